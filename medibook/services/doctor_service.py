from sqlalchemy import func
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import date
from typing import List, Optional, Tuple
import math

from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.prescription import Prescription
from ..models.user import User
from ..schemas.doctor import DoctorUpdate, DoctorDashboard, Pagination

class DoctorService:
    def __init__(self, db: Session):
        self.db = db

    def search(
        self,
        specialty: Optional[str] = None,
        location: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Doctor], Pagination]:
        """Active, available doctors filtered by specialty and location."""
        query = (
            self.db.query(Doctor)
            .join(User, Doctor.user_id == User.id)
            .filter(User.is_active == True, Doctor.is_available == True)  # noqa: E712
        )
        if specialty:
            query = query.filter(func.lower(Doctor.specialization) == specialty.lower())
        if location:
            pattern = location.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            query = query.filter(Doctor.office_address.ilike(f"%{pattern}%", escape="\\"))

        total = query.count()
        doctors = (
            query.order_by(Doctor.last_name.asc(), Doctor.first_name.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        pagination = Pagination(
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )
        return doctors, pagination

    def get(self, doctor_id: int) -> Doctor:
        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Doctor not found"
            )
        return doctor

    def update_profile(self, doctor: Doctor, updates: DoctorUpdate) -> Doctor:
        for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(doctor, field, value)

        self.db.commit()
        self.db.refresh(doctor)
        return doctor

    def dashboard(self, doctor: Doctor) -> DoctorDashboard:
        today = date.today()
        base = self.db.query(Appointment).filter(Appointment.doctor_id == doctor.id)

        return DoctorDashboard(
            today_appointments=base.filter(
                Appointment.appointment_date == today,
                Appointment.status != AppointmentStatus.CANCELLED,
            ).count(),
            upcoming_appointments=base.filter(
                Appointment.appointment_date >= today,
                Appointment.status.notin_([AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED]),
            ).count(),
            completed_appointments=base.filter(
                Appointment.status == AppointmentStatus.COMPLETED
            ).count(),
            total_patients=self.db.query(func.count(func.distinct(Appointment.patient_id)))
            .filter(Appointment.doctor_id == doctor.id)
            .scalar() or 0,
            active_prescriptions=self.db.query(Prescription).filter(
                Prescription.doctor_id == doctor.id,
                Prescription.is_active == True,  # noqa: E712
            ).count(),
        )

    def patients(self, doctor: Doctor) -> List[Patient]:
        """Patients who booked at least one appointment with the doctor."""
        return (
            self.db.query(Patient)
            .join(Appointment, Appointment.patient_id == Patient.id)
            .filter(Appointment.doctor_id == doctor.id)
            .distinct()
            .order_by(Patient.last_name.asc(), Patient.first_name.asc())
            .all()
        )
