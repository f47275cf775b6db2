from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.sql import func

from ..core.database import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    resource_type = Column(String(50), nullable=False)
    resource_id = Column(String(64), nullable=False)
    action = Column(String(50), nullable=False)
    timestamp = Column(DateTime, server_default=func.now(), index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, user_id={self.user_id}, {self.action} {self.resource_type}:{self.resource_id})>"
