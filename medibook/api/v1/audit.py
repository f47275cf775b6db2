from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_user, get_admin_user
from ...models.user import User
from ...services.audit_service import AuditService
from ...schemas.audit import AuditLogCreate, AuditLogResponse

router = APIRouter(prefix="/audit", tags=["Audit"])

@router.post("/log")
async def log_action(
    entry: AuditLogCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record a client-side data access or appointment action."""
    AuditService(db).log(current_user.id, entry.resource_type, entry.resource_id, entry.action)
    return {"success": True}

@router.get("/logs", response_model=List[AuditLogResponse])
async def list_logs(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    user_id: Optional[int] = None,
    resource_type: Optional[str] = None,
    _: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    return AuditService(db).list_logs(skip, limit, user_id, resource_type)
