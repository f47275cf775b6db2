from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, date

from ..models.appointment import AppointmentStatus, ConsultationType, PaymentState
from .doctor import DoctorSummary
from .patient import PatientSummary
from .time_slot import validate_hhmm

class AppointmentCreate(BaseModel):
    doctor_id: int
    appointment_date: date
    time_slot: str
    consultation_type: ConsultationType = ConsultationType.IN_PERSON
    reason: Optional[str] = Field(None, max_length=2000)

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, v):
        return validate_hhmm(v)

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    notes: Optional[str] = None
    cancelled_reason: Optional[str] = Field(None, max_length=255)

class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date
    time_slot: str
    consultation_type: ConsultationType
    status: AppointmentStatus
    payment_status: PaymentState
    reason: Optional[str] = None
    notes: Optional[str] = None
    cancelled_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    doctor: Optional[DoctorSummary] = None
    patient: Optional[PatientSummary] = None

    class Config:
        from_attributes = True
