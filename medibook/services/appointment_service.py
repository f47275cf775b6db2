from sqlalchemy.orm import Session, joinedload
from fastapi import HTTPException, status
from datetime import date
from typing import List, Optional
import logging

from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus, TERMINAL_STATUSES
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..models.user import User
from ..schemas.appointment import AppointmentCreate, AppointmentStatusUpdate
from .notification_service import NotificationService
from .schedule_service import ScheduleService

logger = logging.getLogger(__name__)

class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(
        self,
        user: User,
        status_filter: Optional[AppointmentStatus] = None,
        upcoming: bool = False,
    ) -> List[Appointment]:
        """Appointments on the user's side of the booking, earliest first."""
        query = self.db.query(Appointment).options(
            joinedload(Appointment.doctor), joinedload(Appointment.patient)
        )

        if user.role == UserRole.DOCTOR:
            if user.doctor is None:
                return []
            query = query.filter(Appointment.doctor_id == user.doctor.id)
        elif user.role == UserRole.PATIENT:
            if user.patient is None:
                return []
            query = query.filter(Appointment.patient_id == user.patient.id)

        if status_filter:
            query = query.filter(Appointment.status == status_filter)
        if upcoming:
            query = query.filter(
                Appointment.appointment_date >= date.today(),
                Appointment.status != AppointmentStatus.CANCELLED,
            )

        return query.order_by(
            Appointment.appointment_date.asc(), Appointment.time_slot.asc()
        ).all()

    def book(self, patient: Patient, data: AppointmentCreate) -> Appointment:
        doctor = self.db.query(Doctor).filter(Doctor.id == data.doctor_id).first()
        if not doctor or not doctor.is_available:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Doctor not found"
            )

        if data.appointment_date < date.today():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot book an appointment in the past"
            )

        schedule = ScheduleService(self.db)
        if not schedule.is_bookable(doctor.id, data.appointment_date, data.time_slot):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="The requested time slot is not available"
            )

        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_date=data.appointment_date,
            time_slot=data.time_slot,
            consultation_type=data.consultation_type,
            reason=data.reason,
            status=AppointmentStatus.PENDING,
        )
        self.db.add(appointment)
        self.db.flush()

        NotificationService(self.db).notify(
            user_id=doctor.user_id,
            title="New Appointment",
            message=(
                f"{patient.first_name} {patient.last_name} booked "
                f"{data.appointment_date.isoformat()} at {data.time_slot}"
            ),
            type="appointment",
            related_id=appointment.id,
        )

        self.db.commit()
        self.db.refresh(appointment)

        logger.info(f"Appointment {appointment.id} booked with doctor {doctor.id}")
        return appointment

    def get_for_user(self, user: User, appointment_id: int) -> Appointment:
        appointment = self.db.query(Appointment).filter(
            Appointment.id == appointment_id
        ).first()

        if not appointment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Appointment not found"
            )

        if user.role != UserRole.ADMIN and not appointment.involves(user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have access to this appointment"
            )

        return appointment

    def update_status(self, user: User, appointment_id: int, update: AppointmentStatusUpdate) -> Appointment:
        """Write a new status on the appointment.

        Patients may only cancel. Completed and cancelled appointments are final.
        """
        appointment = self.get_for_user(user, appointment_id)

        if user.role == UserRole.PATIENT and update.status != AppointmentStatus.CANCELLED:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Patients can only cancel appointments"
            )

        if appointment.status in TERMINAL_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Appointment is already {appointment.status.value}"
            )

        previous = appointment.status
        appointment.status = update.status
        if update.notes:
            appointment.notes = update.notes
        if update.status == AppointmentStatus.CANCELLED:
            appointment.cancelled_reason = update.cancelled_reason

        counterpart_user_id = (
            appointment.doctor.user_id
            if appointment.patient.user_id == user.id
            else appointment.patient.user_id
        )
        NotificationService(self.db).notify(
            user_id=counterpart_user_id,
            title="Appointment Updated",
            message=(
                f"Appointment on {appointment.appointment_date.isoformat()} at "
                f"{appointment.time_slot} is now {update.status.value}"
            ),
            type="appointment",
            related_id=appointment.id,
        )

        self.db.commit()
        self.db.refresh(appointment)

        logger.info(f"Appointment {appointment.id} status {previous.value} -> {update.status.value} by user {user.id}")
        return appointment
