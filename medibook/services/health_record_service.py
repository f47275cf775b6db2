from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime
from typing import List, Optional

from ..core.security import UserRole
from ..models.appointment import Appointment
from ..models.health_record import HealthRecord
from ..models.patient import Patient
from ..models.user import User
from ..schemas.health_record import HealthRecordCreate
from .audit_service import AuditService

class HealthRecordService:
    """Health records guarded by the patient/treating-doctor relationship.

    A patient sees their own records; a doctor sees the records of patients
    they have at least one appointment with; admins see everything.
    """

    def __init__(self, db: Session):
        self.db = db
        self.audit = AuditService(db)

    def can_access_patient(self, user: User, patient_id: int) -> bool:
        if user.role == UserRole.ADMIN:
            return True
        if user.role == UserRole.PATIENT:
            return user.patient is not None and user.patient.id == patient_id
        if user.role == UserRole.DOCTOR and user.doctor is not None:
            return self._has_appointment(user.doctor.id, patient_id)
        return False

    def list_for_patient(self, user: User, patient_id: int) -> List[HealthRecord]:
        # An empty list does not tell a caller whether records exist
        if not self.can_access_patient(user, patient_id):
            return []

        return (
            self.db.query(HealthRecord)
            .filter(HealthRecord.patient_id == patient_id)
            .order_by(HealthRecord.created_at.desc(), HealthRecord.id.desc())
            .all()
        )

    def get_record(self, user: User, record_id: int) -> HealthRecord:
        record = self.db.query(HealthRecord).filter(HealthRecord.id == record_id).first()

        if not record or not self.can_access_patient(user, record.patient_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Health record not found or access denied"
            )

        record.last_accessed_at = datetime.utcnow()
        record.last_accessed_by = user.id
        self.db.commit()
        self.db.refresh(record)

        self.audit.log(user.id, "health_record", record.id, "view")
        return record

    def create_record(self, user: User, data: HealthRecordCreate) -> HealthRecord:
        doctor = user.doctor
        if user.role != UserRole.DOCTOR or doctor is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only doctors can create health records"
            )

        patient = self.db.query(Patient).filter(Patient.id == data.patient_id).first()
        if not patient:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Patient not found"
            )

        if not self._has_appointment(doctor.id, patient.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied to create health record"
            )

        if data.appointment_id is not None:
            self._check_appointment(data.appointment_id, doctor.id, patient.id)

        record = HealthRecord(doctor_id=doctor.id, **data.model_dump())
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)

        self.audit.log(user.id, "health_record", record.id, "create")
        return record

    def _has_appointment(self, doctor_id: int, patient_id: int) -> bool:
        return self.db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.patient_id == patient_id
        ).first() is not None

    def _check_appointment(self, appointment_id: int, doctor_id: int, patient_id: Optional[int]) -> None:
        appointment = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment or appointment.doctor_id != doctor_id or appointment.patient_id != patient_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Appointment does not belong to this doctor and patient"
            )
