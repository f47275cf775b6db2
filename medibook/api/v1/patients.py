from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_patient
from ...models.patient import Patient
from ...services.patient_service import PatientService
from ...schemas.patient import (
    PatientResponse, PatientUpdate, MedicalHistoryCreate,
    MedicalHistoryUpdate, MedicalHistoryResponse
)

router = APIRouter(prefix="/patients", tags=["Patients"])

@router.get("/me", response_model=PatientResponse)
async def get_my_profile(patient: Patient = Depends(get_current_patient)):
    return patient

@router.put("/me", response_model=PatientResponse)
async def update_my_profile(
    updates: PatientUpdate,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    return PatientService(db).update_profile(patient, updates)

@router.get("/me/medical-history", response_model=List[MedicalHistoryResponse])
async def list_medical_history(
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    return PatientService(db).list_medical_history(patient)

@router.post(
    "/me/medical-history",
    response_model=MedicalHistoryResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_medical_history(
    entry: MedicalHistoryCreate,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    return PatientService(db).add_medical_history(patient, entry)

@router.put("/me/medical-history/{entry_id}", response_model=MedicalHistoryResponse)
async def update_medical_history(
    entry_id: int,
    updates: MedicalHistoryUpdate,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    return PatientService(db).update_medical_history(patient, entry_id, updates)

@router.delete("/me/medical-history/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_medical_history(
    entry_id: int,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    PatientService(db).delete_medical_history(patient, entry_id)
