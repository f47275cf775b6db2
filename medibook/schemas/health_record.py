from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class HealthRecordCreate(BaseModel):
    patient_id: int
    appointment_id: Optional[int] = None
    record_type: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    file_url: Optional[str] = Field(None, max_length=500)
    is_confidential: bool = False

class HealthRecordResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_id: Optional[int] = None
    record_type: str
    title: str
    description: Optional[str] = None
    file_url: Optional[str] = None
    is_confidential: bool
    last_accessed_at: Optional[datetime] = None
    last_accessed_by: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
