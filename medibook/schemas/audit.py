from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class AuditLogCreate(BaseModel):
    resource_type: str = Field(..., min_length=1, max_length=50)
    resource_id: str = Field(..., min_length=1, max_length=64)
    action: str = Field(..., min_length=1, max_length=50)

class AuditLogResponse(BaseModel):
    id: int
    user_id: int
    resource_type: str
    resource_id: str
    action: str
    timestamp: Optional[datetime] = None

    class Config:
        from_attributes = True
