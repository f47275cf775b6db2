from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

class DoctorResponse(BaseModel):
    id: int
    user_id: int
    first_name: str
    last_name: str
    full_name: str
    specialization: str
    license_number: str
    years_of_experience: Optional[int] = None
    qualification: Optional[str] = None
    bio: Optional[str] = None
    consultation_fee: Optional[float] = None
    phone_number: Optional[str] = None
    office_address: Optional[str] = None
    is_available: bool = True
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class DoctorSummary(BaseModel):
    id: int
    user_id: int
    full_name: str
    specialization: str
    office_address: Optional[str] = None

    class Config:
        from_attributes = True

class DoctorUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    specialization: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, ge=0)
    qualification: Optional[str] = None
    bio: Optional[str] = None
    consultation_fee: Optional[Decimal] = Field(None, ge=0)
    phone_number: Optional[str] = None
    office_address: Optional[str] = None
    is_available: Optional[bool] = None

class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

class DoctorListResponse(BaseModel):
    doctors: List[DoctorResponse]
    pagination: Pagination

class DoctorDashboard(BaseModel):
    today_appointments: int
    upcoming_appointments: int
    completed_appointments: int
    total_patients: int
    active_prescriptions: int
