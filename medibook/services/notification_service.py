from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import List, Optional

from ..models.notification import Notification
from ..models.user import User

class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        type: str = "system",
        related_id: Optional[int] = None,
    ) -> Notification:
        """Queue a notification in the current transaction; the caller commits."""
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            related_id=related_id,
        )
        self.db.add(notification)
        return notification

    def list_for_user(self, user: User, unread_only: bool = False) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user.id)
        if unread_only:
            query = query.filter(Notification.is_read == False)  # noqa: E712
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()

    def mark_read(self, user: User, notification_id: int) -> Notification:
        notification = self.db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user.id
        ).first()

        if not notification:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found"
            )

        notification.is_read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification
