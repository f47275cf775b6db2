from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_doctor
from ...models.doctor import Doctor
from ...services.schedule_service import ScheduleService
from ...schemas.time_slot import (
    TimeSlotCreate, TimeSlotUpdate, RecurringTimeSlotCreate, TimeSlotResponse
)

router = APIRouter(prefix="/time-slots", tags=["Time Slots"])

@router.get("", response_model=List[TimeSlotResponse])
async def list_time_slots(doctor_id: int, db: Session = Depends(get_db)):
    """Weekly slots of a doctor ordered by weekday and start time."""
    return ScheduleService(db).list_time_slots(doctor_id)

@router.post("", response_model=TimeSlotResponse, status_code=status.HTTP_201_CREATED)
async def create_time_slot(
    slot_data: TimeSlotCreate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    return ScheduleService(db).create_time_slot(doctor, slot_data)

@router.post(
    "/recurring",
    response_model=List[TimeSlotResponse],
    status_code=status.HTTP_201_CREATED
)
async def create_recurring_time_slots(
    data: RecurringTimeSlotCreate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    """Fill a window of one weekday with back-to-back slots."""
    return ScheduleService(db).create_recurring_time_slots(doctor, data)

@router.put("/{slot_id}", response_model=TimeSlotResponse)
async def update_time_slot(
    slot_id: int,
    updates: TimeSlotUpdate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    return ScheduleService(db).update_time_slot(doctor, slot_id, updates)

@router.delete("/{slot_id}")
async def delete_time_slot(
    slot_id: int,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    ScheduleService(db).delete_time_slot(doctor, slot_id)
    return {"message": "Time slot deleted successfully"}
