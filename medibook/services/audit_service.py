from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import logging

from ..models.audit_log import AuditLog

logger = logging.getLogger(__name__)

class AuditService:
    """Append-only access log for clinical data."""

    def __init__(self, db: Session):
        self.db = db

    def log(self, user_id: int, resource_type: str, resource_id, action: str) -> bool:
        """Write one audit entry.

        A failing write is logged and reported as ``False``; it never
        propagates to the request that triggered it.
        """
        try:
            self.db.add(AuditLog(
                user_id=user_id,
                resource_type=resource_type,
                resource_id=str(resource_id),
                action=action,
            ))
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to write audit log for {resource_type}:{resource_id}: {str(e)}")
            return False

    def list_logs(
        self,
        skip: int = 0,
        limit: int = 50,
        user_id: Optional[int] = None,
        resource_type: Optional[str] = None,
    ) -> List[AuditLog]:
        query = self.db.query(AuditLog)
        if user_id is not None:
            query = query.filter(AuditLog.user_id == user_id)
        if resource_type:
            query = query.filter(AuditLog.resource_type == resource_type)
        return (
            query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
