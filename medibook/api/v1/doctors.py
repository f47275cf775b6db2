from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_doctor
from ...models.doctor import Doctor
from ...services.doctor_service import DoctorService
from ...schemas.doctor import DoctorResponse, DoctorUpdate, DoctorListResponse, DoctorDashboard
from ...schemas.patient import PatientResponse

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("", response_model=DoctorListResponse)
async def list_doctors(
    response: Response,
    specialty: Optional[str] = None,
    location: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Search doctors by specialty and location."""
    doctors, pagination = DoctorService(db).search(specialty, location, page, limit)
    response.headers["Cache-Control"] = "public, max-age=3600"
    return DoctorListResponse(
        doctors=[DoctorResponse.model_validate(doctor) for doctor in doctors],
        pagination=pagination
    )

@router.get("/me", response_model=DoctorResponse)
async def get_my_profile(doctor: Doctor = Depends(get_current_doctor)):
    return doctor

@router.put("/me", response_model=DoctorResponse)
async def update_my_profile(
    updates: DoctorUpdate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    return DoctorService(db).update_profile(doctor, updates)

@router.get("/me/dashboard", response_model=DoctorDashboard)
async def get_dashboard(
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    """Appointment and patient counters for the doctor portal."""
    return DoctorService(db).dashboard(doctor)

@router.get("/me/patients", response_model=List[PatientResponse])
async def get_my_patients(
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db)
):
    return DoctorService(db).patients(doctor)

@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    return DoctorService(db).get(doctor_id)
