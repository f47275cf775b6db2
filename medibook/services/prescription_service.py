from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import date
from typing import List, Optional
import logging

from ..core.security import UserRole
from ..models.appointment import Appointment
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.prescription import Prescription
from ..models.user import User
from ..schemas.prescription import PrescriptionCreate, PrescriptionUpdate
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

class PrescriptionService:
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user: User, patient_id: Optional[int] = None) -> List[Prescription]:
        query = self.db.query(Prescription)

        if user.role == UserRole.DOCTOR:
            if patient_id is not None:
                query = query.filter(Prescription.patient_id == patient_id)
            else:
                query = query.filter(Prescription.doctor_id == user.doctor.id)
        elif user.role == UserRole.PATIENT:
            query = query.filter(Prescription.patient_id == user.patient.id)
        elif patient_id is not None:
            query = query.filter(Prescription.patient_id == patient_id)

        return query.order_by(Prescription.created_at.desc(), Prescription.id.desc()).all()

    def create(self, doctor: Doctor, data: PrescriptionCreate) -> Prescription:
        patient = self.db.query(Patient).filter(Patient.id == data.patient_id).first()
        if not patient:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Patient not found"
            )

        if data.appointment_id is not None:
            appointment = self.db.query(Appointment).filter(
                Appointment.id == data.appointment_id
            ).first()
            if not appointment or appointment.doctor_id != doctor.id or appointment.patient_id != patient.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Appointment does not belong to this doctor and patient"
                )

        prescription = Prescription(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_id=data.appointment_id,
            medications=[med.model_dump() for med in data.medications],
            instructions=data.instructions,
            issue_date=data.issue_date or date.today(),
            expiry_date=data.expiry_date,
            is_active=True,
        )
        self.db.add(prescription)
        self.db.flush()

        NotificationService(self.db).notify(
            user_id=patient.user_id,
            title="New Prescription",
            message="Your doctor has prescribed new medication for you",
            type="system",
            related_id=prescription.id,
        )

        self.db.commit()
        self.db.refresh(prescription)

        logger.info(f"Prescription {prescription.id} issued by doctor {doctor.id}")
        return prescription

    def update(self, doctor: Doctor, prescription_id: int, updates: PrescriptionUpdate) -> Prescription:
        prescription = self._get_owned(doctor, prescription_id, "update")

        for field, value in updates.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            setattr(prescription, field, value)

        self.db.commit()
        self.db.refresh(prescription)
        return prescription

    def deactivate(self, doctor: Doctor, prescription_id: int) -> Prescription:
        """Prescriptions are kept for the record and only switched off."""
        prescription = self._get_owned(doctor, prescription_id, "deactivate")
        prescription.is_active = False

        self.db.commit()
        self.db.refresh(prescription)
        return prescription

    def _get_owned(self, doctor: Doctor, prescription_id: int, verb: str) -> Prescription:
        prescription = self.db.query(Prescription).filter(
            Prescription.id == prescription_id
        ).first()

        if not prescription:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Prescription not found"
            )
        if prescription.doctor_id != doctor.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"You can only {verb} your own prescriptions"
            )
        return prescription
