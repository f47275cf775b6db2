from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_user
from ...models.user import User
from ...services.video_service import VideoService
from ...schemas.video import VideoTokenRequest, VideoTokenResponse

router = APIRouter(prefix="/video", tags=["Video"])

@router.post("/token", response_model=VideoTokenResponse)
async def create_video_token(
    token_request: VideoTokenRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Access token for the video room of an appointment."""
    return VideoService(db).issue_token(current_user, token_request.appointment_id)
