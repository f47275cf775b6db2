from .user import User, RefreshToken
from .patient import Patient, MedicalHistory
from .doctor import Doctor
from .appointment import Appointment, AppointmentStatus, ConsultationType, PaymentState
from .time_slot import TimeSlot
from .health_record import HealthRecord
from .prescription import Prescription
from .message import Message
from .payment import Payment, PaymentStatus
from .notification import Notification
from .audit_log import AuditLog

__all__ = [
    "User", "RefreshToken", "Patient", "MedicalHistory", "Doctor",
    "Appointment", "AppointmentStatus", "ConsultationType", "PaymentState",
    "TimeSlot", "HealthRecord", "Prescription", "Message",
    "Payment", "PaymentStatus", "Notification", "AuditLog",
]
