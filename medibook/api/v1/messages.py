from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_user
from ...models.user import User
from ...services.message_service import MessageService
from ...schemas.message import MessageCreate, MessageUpdate, MessageResponse, Contact

router = APIRouter(prefix="/messages", tags=["Messages"])

@router.get("", response_model=List[MessageResponse])
async def list_messages(
    other_user_id: Optional[int] = None,
    appointment_id: Optional[int] = None,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Conversation with another user, or the thread of an appointment."""
    return MessageService(db).list_messages(current_user, other_user_id, appointment_id, limit)

@router.get("/contacts", response_model=List[Contact])
async def list_contacts(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return MessageService(db).contacts(current_user)

@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return MessageService(db).send(current_user, message_data)

@router.patch("/{message_id}", response_model=MessageResponse)
async def update_message(
    message_id: int,
    update: MessageUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return MessageService(db).set_read(current_user, message_id, update.read)

@router.delete("/{message_id}")
async def delete_message(
    message_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    MessageService(db).delete(current_user, message_id)
    return {"success": True}
