from fastapi import APIRouter

from .auth import router as auth_router
from .appointments import router as appointments_router
from .doctors import router as doctors_router
from .patients import router as patients_router
from .time_slots import router as time_slots_router
from .health_records import router as health_records_router
from .prescriptions import router as prescriptions_router
from .messages import router as messages_router
from .payments import router as payments_router
from .video import router as video_router
from .audit import router as audit_router
from .notifications import router as notifications_router

api_router = APIRouter()
for router in (
    auth_router,
    appointments_router,
    doctors_router,
    patients_router,
    time_slots_router,
    health_records_router,
    prescriptions_router,
    messages_router,
    payments_router,
    video_router,
    audit_router,
    notifications_router,
):
    api_router.include_router(router)
