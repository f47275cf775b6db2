from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import List

from ..models.patient import Patient, MedicalHistory
from ..schemas.patient import PatientUpdate, MedicalHistoryCreate, MedicalHistoryUpdate

class PatientService:
    def __init__(self, db: Session):
        self.db = db

    def update_profile(self, patient: Patient, updates: PatientUpdate) -> Patient:
        for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(patient, field, value)

        self.db.commit()
        self.db.refresh(patient)
        return patient

    def list_medical_history(self, patient: Patient) -> List[MedicalHistory]:
        return (
            self.db.query(MedicalHistory)
            .filter(MedicalHistory.patient_id == patient.id)
            .order_by(MedicalHistory.created_at.desc(), MedicalHistory.id.desc())
            .all()
        )

    def add_medical_history(self, patient: Patient, data: MedicalHistoryCreate) -> MedicalHistory:
        entry = MedicalHistory(patient_id=patient.id, **data.model_dump())
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def update_medical_history(
        self, patient: Patient, entry_id: int, updates: MedicalHistoryUpdate
    ) -> MedicalHistory:
        entry = self._get_entry(patient, entry_id)
        for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(entry, field, value)

        self.db.commit()
        self.db.refresh(entry)
        return entry

    def delete_medical_history(self, patient: Patient, entry_id: int) -> None:
        entry = self._get_entry(patient, entry_id)
        self.db.delete(entry)
        self.db.commit()

    def _get_entry(self, patient: Patient, entry_id: int) -> MedicalHistory:
        entry = self.db.query(MedicalHistory).filter(
            MedicalHistory.id == entry_id,
            MedicalHistory.patient_id == patient.id
        ).first()
        if not entry:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Medical history entry not found"
            )
        return entry
