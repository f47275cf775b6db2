from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_user, get_current_doctor
from ...models.doctor import Doctor
from ...models.user import User
from ...services.prescription_service import PrescriptionService
from ...schemas.prescription import PrescriptionCreate, PrescriptionUpdate, PrescriptionResponse

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

@router.get("", response_model=List[PrescriptionResponse])
async def list_prescriptions(
    patient_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Newest first. Doctors may filter by patient."""
    return PrescriptionService(db).list_for_user(current_user, patient_id)

@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_prescription(
    prescription_data: PrescriptionCreate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    return PrescriptionService(db).create(doctor, prescription_data)

@router.patch("/{prescription_id}", response_model=PrescriptionResponse)
async def update_prescription(
    prescription_id: int,
    updates: PrescriptionUpdate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    return PrescriptionService(db).update(doctor, prescription_id, updates)

@router.delete("/{prescription_id}", response_model=PrescriptionResponse)
async def deactivate_prescription(
    prescription_id: int,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    """Deactivate; the prescription itself is retained."""
    return PrescriptionService(db).deactivate(doctor, prescription_id)
