from sqlalchemy import and_, or_, func
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Dict, List, Optional

from ..core.security import UserRole
from ..models.appointment import Appointment
from ..models.doctor import Doctor
from ..models.message import Message
from ..models.patient import Patient
from ..models.user import User
from ..schemas.message import MessageCreate, Contact

class MessageService:
    """Polled conversation storage between users."""

    def __init__(self, db: Session):
        self.db = db

    def list_messages(
        self,
        user: User,
        other_user_id: Optional[int] = None,
        appointment_id: Optional[int] = None,
        limit: int = 50,
    ) -> List[Message]:
        if other_user_id is None and appointment_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Either other_user_id or appointment_id is required"
            )

        query = self.db.query(Message)

        if appointment_id is not None:
            self._check_appointment_access(user, appointment_id)
            query = query.filter(Message.appointment_id == appointment_id)
        else:
            query = query.filter(or_(
                and_(Message.sender_id == user.id, Message.receiver_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.receiver_id == user.id),
            ))

        return query.order_by(Message.created_at.asc(), Message.id.asc()).limit(limit).all()

    def send(self, sender: User, data: MessageCreate) -> Message:
        receiver = self.db.query(User).filter(User.id == data.receiver_id).first()
        if not receiver or not receiver.is_active:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Receiver not found"
            )
        if receiver.id == sender.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot message yourself"
            )

        if data.appointment_id is not None:
            self._check_appointment_access(sender, data.appointment_id)

        message = Message(
            sender_id=sender.id,
            receiver_id=receiver.id,
            appointment_id=data.appointment_id,
            content=data.content,
            contains_phi=data.contains_phi,
            read=False,
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def set_read(self, user: User, message_id: int, read: bool) -> Message:
        message = self._get(message_id)
        if message.receiver_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only update messages you received"
            )

        message.read = read
        self.db.commit()
        self.db.refresh(message)
        return message

    def delete(self, user: User, message_id: int) -> None:
        message = self._get(message_id)
        if message.sender_id != user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only delete messages you sent"
            )

        self.db.delete(message)
        self.db.commit()

    def contacts(self, user: User) -> List[Contact]:
        """Counterparts from the user's appointments with unread message counts."""
        if user.role == UserRole.DOCTOR and user.doctor is not None:
            counterparts = (
                self.db.query(User)
                .join(Patient, Patient.user_id == User.id)
                .join(Appointment, Appointment.patient_id == Patient.id)
                .filter(Appointment.doctor_id == user.doctor.id)
                .distinct()
                .all()
            )
        elif user.role == UserRole.PATIENT and user.patient is not None:
            counterparts = (
                self.db.query(User)
                .join(Doctor, Doctor.user_id == User.id)
                .join(Appointment, Appointment.doctor_id == Doctor.id)
                .filter(Appointment.patient_id == user.patient.id)
                .distinct()
                .all()
            )
        else:
            counterparts = []

        unread: Dict[int, int] = dict(
            self.db.query(Message.sender_id, func.count(Message.id))
            .filter(Message.receiver_id == user.id, Message.read == False)  # noqa: E712
            .group_by(Message.sender_id)
            .all()
        )

        contacts = [
            Contact(
                user_id=other.id,
                full_name=other.full_name,
                role=other.role.value,
                unread_count=unread.get(other.id, 0),
            )
            for other in counterparts
        ]
        return sorted(contacts, key=lambda c: (-c.unread_count, c.full_name))

    def _get(self, message_id: int) -> Message:
        message = self.db.query(Message).filter(Message.id == message_id).first()
        if not message:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Message not found"
            )
        return message

    def _check_appointment_access(self, user: User, appointment_id: int) -> None:
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
