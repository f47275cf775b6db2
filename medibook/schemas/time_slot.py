from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
import re

from ..core.config import settings

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

def validate_hhmm(value: str) -> str:
    """Accept ``HH:MM`` 24-hour strings."""
    if not _HHMM.match(value):
        raise ValueError("Time must use the HH:MM 24-hour format")
    return value

class TimeSlotCreate(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str
    end_time: str
    is_available: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v):
        return validate_hhmm(v)

    @model_validator(mode="after")
    def validate_window(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

class TimeSlotUpdate(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: Optional[bool] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v):
        if v is None:
            return v
        return validate_hhmm(v)

class RecurringTimeSlotCreate(TimeSlotCreate):
    interval_minutes: int = Field(settings.DEFAULT_SLOT_INTERVAL_MINUTES, gt=0, le=24 * 60)

class TimeSlotResponse(BaseModel):
    id: int
    doctor_id: int
    day_of_week: int
    start_time: str
    end_time: str
    is_available: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AvailableSlot(BaseModel):
    id: int
    start_time: str
    end_time: str
    available: bool = True

class AvailableSlotsResponse(BaseModel):
    time_slots: List[AvailableSlot]
