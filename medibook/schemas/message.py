from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class MessageCreate(BaseModel):
    receiver_id: int
    appointment_id: Optional[int] = None
    content: str = Field(..., min_length=1, max_length=5000)
    contains_phi: bool = False

class MessageUpdate(BaseModel):
    read: bool

class MessageResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    appointment_id: Optional[int] = None
    content: str
    read: bool
    contains_phi: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class Contact(BaseModel):
    user_id: int
    full_name: str
    role: str
    unread_count: int
