from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_user, get_current_patient
from ...models.appointment import AppointmentStatus
from ...models.patient import Patient
from ...models.user import User
from ...services.appointment_service import AppointmentService
from ...services.schedule_service import ScheduleService
from ...services.doctor_service import DoctorService
from ...schemas.appointment import AppointmentCreate, AppointmentResponse, AppointmentStatusUpdate
from ...schemas.time_slot import AvailableSlotsResponse

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    upcoming: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Appointments of the current patient or doctor, earliest first."""
    return AppointmentService(db).list_for_user(current_user, status_filter, upcoming)

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    appointment_data: AppointmentCreate,
    patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    """Book an open slot with a doctor."""
    return AppointmentService(db).book(patient, appointment_data)

@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def available_slots(
    doctor_id: int,
    on_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db)
):
    """Bookable slots of a doctor on a given date."""
    DoctorService(db).get(doctor_id)
    return AvailableSlotsResponse(
        time_slots=ScheduleService(db).get_available_slots(doctor_id, on_date)
    )

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return AppointmentService(db).get_for_user(current_user, appointment_id)

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    update: AppointmentStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change the status of an appointment."""
    return AppointmentService(db).update_status(current_user, appointment_id, update)
