from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Text, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"

# No transitions out of these
TERMINAL_STATUSES = {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}

class PaymentState(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"

class ConsultationType(str, enum.Enum):
    VIDEO = "video"
    IN_PERSON = "in_person"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)

    # Appointment details
    appointment_date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(5), nullable=False)  # "HH:MM" start time
    consultation_type = Column(SQLEnum(ConsultationType), nullable=False, default=ConsultationType.IN_PERSON)
    status = Column(SQLEnum(AppointmentStatus), default=AppointmentStatus.PENDING, nullable=False)
    payment_status = Column(SQLEnum(PaymentState), default=PaymentState.PENDING, nullable=False)
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    cancelled_reason = Column(String(255), nullable=True)

    # Relationships
    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")
    payments = relationship("Payment", back_populates="appointment")

    def involves(self, user) -> bool:
        """True when ``user`` is the patient or the doctor of this appointment."""
        return (
            (self.patient is not None and self.patient.user_id == user.id)
            or (self.doctor is not None and self.doctor.user_id == user.id)
        )

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, date='{self.appointment_date}', slot='{self.time_slot}')>"
