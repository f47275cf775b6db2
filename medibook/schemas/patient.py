from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, date

class PatientResponse(BaseModel):
    id: int
    user_id: int
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    blood_type: Optional[str] = None
    allergies: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PatientSummary(BaseModel):
    id: int
    user_id: int
    first_name: str
    last_name: str

    class Config:
        from_attributes = True

class PatientUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    blood_type: Optional[str] = None
    allergies: Optional[str] = None

class MedicalHistoryCreate(BaseModel):
    history_type: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1)
    is_current: bool = True
    diagnosed_date: Optional[date] = None

class MedicalHistoryUpdate(BaseModel):
    history_type: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=1)
    is_current: Optional[bool] = None
    diagnosed_date: Optional[date] = None

class MedicalHistoryResponse(BaseModel):
    id: int
    patient_id: int
    history_type: str
    description: str
    is_current: bool
    diagnosed_date: Optional[date] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
