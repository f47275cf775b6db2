from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, date

class Medication(BaseModel):
    name: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1)

class PrescriptionCreate(BaseModel):
    patient_id: int
    appointment_id: Optional[int] = None
    medications: List[Medication] = Field(..., min_length=1)
    instructions: Optional[str] = None
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None

class PrescriptionUpdate(BaseModel):
    medications: Optional[List[Medication]] = Field(None, min_length=1)
    instructions: Optional[str] = None
    expiry_date: Optional[date] = None
    is_active: Optional[bool] = None

class PrescriptionResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_id: Optional[int] = None
    medications: List[Medication]
    instructions: Optional[str] = None
    issue_date: date
    expiry_date: Optional[date] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
