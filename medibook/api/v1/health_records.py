from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_user
from ...models.user import User
from ...services.health_record_service import HealthRecordService
from ...schemas.health_record import HealthRecordCreate, HealthRecordResponse

router = APIRouter(prefix="/health-records", tags=["Health Records"])

@router.get("", response_model=List[HealthRecordResponse])
async def list_health_records(
    patient_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Records of a patient visible to the current user."""
    return HealthRecordService(db).list_for_patient(current_user, patient_id)

@router.get("/{record_id}", response_model=HealthRecordResponse)
async def get_health_record(
    record_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return HealthRecordService(db).get_record(current_user, record_id)

@router.post("", response_model=HealthRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_health_record(
    record_data: HealthRecordCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return HealthRecordService(db).create_record(current_user, record_data)
