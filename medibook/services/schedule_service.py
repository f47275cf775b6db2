from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import date, datetime, timedelta
from typing import List, Tuple
import logging

from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.time_slot import TimeSlot
from ..schemas.time_slot import (
    TimeSlotCreate, TimeSlotUpdate, RecurringTimeSlotCreate, AvailableSlot
)

logger = logging.getLogger(__name__)

TIME_FORMAT = "%H:%M"

def day_of_week(day: date) -> int:
    """Weekday index counting from Sunday (0) to Saturday (6)."""
    return (day.weekday() + 1) % 7

def generate_slot_windows(start_time: str, end_time: str, interval_minutes: int) -> List[Tuple[str, str]]:
    """Split ``[start_time, end_time)`` into consecutive fixed-length windows.

    Only whole intervals are produced; a trailing remainder shorter than
    ``interval_minutes`` is dropped.
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")

    anchor = date(2000, 1, 1)
    start = datetime.combine(anchor, datetime.strptime(start_time, TIME_FORMAT).time())
    end = datetime.combine(anchor, datetime.strptime(end_time, TIME_FORMAT).time())

    total_minutes = (end - start).total_seconds() / 60
    count = max(int(total_minutes // interval_minutes), 0)

    step = timedelta(minutes=interval_minutes)
    windows = []
    for i in range(count):
        slot_start = start + i * step
        slot_end = slot_start + step
        windows.append((slot_start.strftime(TIME_FORMAT), slot_end.strftime(TIME_FORMAT)))
    return windows

class ScheduleService:
    """Doctor availability: weekly time slots and bookable openings."""

    def __init__(self, db: Session):
        self.db = db

    def list_time_slots(self, doctor_id: int) -> List[TimeSlot]:
        return (
            self.db.query(TimeSlot)
            .filter(TimeSlot.doctor_id == doctor_id)
            .order_by(TimeSlot.day_of_week.asc(), TimeSlot.start_time.asc())
            .all()
        )

    def create_time_slot(self, doctor: Doctor, slot_data: TimeSlotCreate) -> TimeSlot:
        slot = TimeSlot(
            doctor_id=doctor.id,
            day_of_week=slot_data.day_of_week,
            start_time=slot_data.start_time,
            end_time=slot_data.end_time,
            is_available=slot_data.is_available,
        )
        self.db.add(slot)
        self.db.commit()
        self.db.refresh(slot)
        return slot

    def create_recurring_time_slots(self, doctor: Doctor, data: RecurringTimeSlotCreate) -> List[TimeSlot]:
        windows = generate_slot_windows(data.start_time, data.end_time, data.interval_minutes)

        slots = [
            TimeSlot(
                doctor_id=doctor.id,
                day_of_week=data.day_of_week,
                start_time=slot_start,
                end_time=slot_end,
                is_available=data.is_available,
            )
            for slot_start, slot_end in windows
        ]
        self.db.add_all(slots)
        self.db.commit()
        for slot in slots:
            self.db.refresh(slot)

        logger.info(
            f"Doctor {doctor.id} generated {len(slots)} slots on day {data.day_of_week} "
            f"({data.start_time}-{data.end_time} every {data.interval_minutes}m)"
        )
        return slots

    def update_time_slot(self, doctor: Doctor, slot_id: int, updates: TimeSlotUpdate) -> TimeSlot:
        slot = self._get_owned_slot(doctor, slot_id)

        for field, value in updates.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(slot, field, value)

        if slot.start_time >= slot.end_time:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="start_time must be before end_time"
            )

        self.db.commit()
        self.db.refresh(slot)
        return slot

    def delete_time_slot(self, doctor: Doctor, slot_id: int) -> None:
        slot = self._get_owned_slot(doctor, slot_id)
        self.db.delete(slot)
        self.db.commit()

    def get_available_slots(self, doctor_id: int, on_date: date) -> List[AvailableSlot]:
        """Open slots of a doctor on a calendar date.

        Weekly slots for the date's weekday that are marked available, minus
        start times already taken by a non-cancelled appointment that day.
        """
        slots = (
            self.db.query(TimeSlot)
            .filter(
                TimeSlot.doctor_id == doctor_id,
                TimeSlot.day_of_week == day_of_week(on_date),
                TimeSlot.is_available == True,  # noqa: E712
            )
            .order_by(TimeSlot.start_time.asc())
            .all()
        )

        booked = {start for (start,) in self._booked_starts(doctor_id, on_date)}

        return [
            AvailableSlot(id=slot.id, start_time=slot.start_time, end_time=slot.end_time)
            for slot in slots
            if slot.start_time not in booked
        ]

    def is_bookable(self, doctor_id: int, on_date: date, start_time: str) -> bool:
        return any(
            slot.start_time == start_time
            for slot in self.get_available_slots(doctor_id, on_date)
        )

    def _booked_starts(self, doctor_id: int, on_date: date):
        return (
            self.db.query(Appointment.time_slot)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == on_date,
                Appointment.status != AppointmentStatus.CANCELLED,
            )
            .all()
        )

    def _get_owned_slot(self, doctor: Doctor, slot_id: int) -> TimeSlot:
        slot = self.db.query(TimeSlot).filter(TimeSlot.id == slot_id).first()
        if not slot:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Time slot not found"
            )
        if slot.doctor_id != doctor.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only manage your own time slots"
            )
        return slot
