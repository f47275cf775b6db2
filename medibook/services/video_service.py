from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from twilio.jwt.access_token import AccessToken
from twilio.jwt.access_token.grants import VideoGrant
import logging

from ..core.config import settings
from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus, ConsultationType
from ..models.user import User
from ..schemas.video import VideoTokenResponse

logger = logging.getLogger(__name__)

def room_name_for(appointment_id: int) -> str:
    return f"appointment-{appointment_id}"

class VideoService:
    """Issues Twilio Video access tokens for video consultations.

    Signalling, media and track handling stay in the client SDK; the
    service only decides who may join which room.
    """

    def __init__(self, db: Session):
        self.db = db

    def issue_token(self, user: User, appointment_id: int) -> VideoTokenResponse:
        appointment = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Appointment not found"
            )
        if user.role != UserRole.ADMIN and not appointment.involves(user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have access to this appointment"
            )
        if appointment.consultation_type != ConsultationType.VIDEO:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Appointment is not a video consultation"
            )
        if appointment.status == AppointmentStatus.CANCELLED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Appointment has been cancelled"
            )

        self._check_credentials()

        identity = f"user-{user.id}"
        room_name = room_name_for(appointment.id)

        token = AccessToken(
            settings.TWILIO_ACCOUNT_SID,
            settings.TWILIO_API_KEY,
            settings.TWILIO_API_SECRET,
            identity=identity,
            ttl=settings.VIDEO_TOKEN_TTL,
        )
        token.add_grant(VideoGrant(room=room_name))

        jwt = token.to_jwt()
        if isinstance(jwt, bytes):
            jwt = jwt.decode()

        logger.info(f"Issued video token for {identity} in room {room_name}")
        return VideoTokenResponse(token=jwt, room_name=room_name, identity=identity)

    def _check_credentials(self) -> None:
        account_sid = settings.TWILIO_ACCOUNT_SID
        api_key = settings.TWILIO_API_KEY
        api_secret = settings.TWILIO_API_SECRET

        if not account_sid or not api_key or not api_secret:
            logger.error("Missing Twilio credentials")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Video service credentials not configured"
            )
        if not account_sid.startswith("AC"):
            logger.error(f"TWILIO_ACCOUNT_SID should start with AC, got {account_sid[:4]}...")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Invalid TWILIO_ACCOUNT_SID format - should start with AC"
            )
        if not api_key.startswith("SK"):
            logger.error(f"TWILIO_API_KEY should start with SK, got {api_key[:4]}...")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Invalid TWILIO_API_KEY format - should start with SK"
            )
