from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime
from typing import Dict, List, Optional
import logging

from ..core.config import settings
from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus, PaymentState
from ..models.payment import Payment, PaymentStatus
from ..models.user import User
from ..schemas.payment import CheckoutRequest
from .stripe_gateway import StripeGateway

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"

class PaymentService:
    def __init__(self, db: Session, gateway: Optional[StripeGateway] = None):
        self.db = db
        self.gateway = gateway or StripeGateway()

    async def create_checkout(self, user: User, data: CheckoutRequest) -> Dict[str, str]:
        appointment = self.db.query(Appointment).filter(
            Appointment.id == data.appointment_id
        ).first()

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

        already_paid = self.db.query(Payment).filter(
            Payment.appointment_id == appointment.id,
            Payment.status == PaymentStatus.SUCCESSFUL
        ).first()
        if already_paid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This appointment has already been paid for"
            )

        doctor_name = appointment.doctor.full_name if appointment.doctor else "your doctor"
        session = await self.gateway.create_checkout_session(
            appointment_id=appointment.id,
            amount=data.amount,
            currency=settings.PAYMENT_CURRENCY,
            product_name=f"Appointment with {doctor_name}",
            description=f"{appointment.appointment_date.isoformat()} at {appointment.time_slot}",
            success_url=data.success_url,
            cancel_url=data.cancel_url,
        )

        # Reuse the pending row of an abandoned checkout
        payment = self.db.query(Payment).filter(
            Payment.appointment_id == appointment.id,
            Payment.status == PaymentStatus.PENDING
        ).first()
        if payment is None:
            payment = Payment(appointment_id=appointment.id, status=PaymentStatus.PENDING)
            self.db.add(payment)

        payment.amount = data.amount
        payment.currency = settings.PAYMENT_CURRENCY
        payment.transaction_id = session["id"]
        payment.payment_date = datetime.utcnow()

        self.db.commit()

        logger.info(f"Checkout session {session['id']} created for appointment {appointment.id}")
        return {"url": session["url"], "session_id": session["id"]}

    def get_by_session(self, user: User, session_id: str) -> Payment:
        """Payment of a checkout session; other users' payments look missing."""
        payment = self.db.query(Payment).filter(Payment.transaction_id == session_id).first()
        if not payment or (user.role != UserRole.ADMIN and not payment.appointment.involves(user)):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Payment not found"
            )
        return payment

    def list_for_user(self, user: User) -> List[Payment]:
        query = self.db.query(Payment).join(Appointment, Payment.appointment_id == Appointment.id)

        if user.role == UserRole.PATIENT:
            query = query.filter(Appointment.patient_id == user.patient.id)
        elif user.role == UserRole.DOCTOR:
            query = query.filter(Appointment.doctor_id == user.doctor.id)

        return query.order_by(Payment.payment_date.desc(), Payment.id.desc()).all()

    def handle_event(self, event: Dict) -> Dict:
        """Apply a verified provider event; unknown event types are acknowledged."""
        event_type = event.get("type")
        logger.info(f"Webhook event received: {event_type}")

        if event_type != CHECKOUT_COMPLETED:
            return {"received": True}

        session = event.get("data", {}).get("object", {})
        metadata = session.get("metadata") or {}
        appointment_id = str(metadata.get("appointment_id") or "")
        if appointment_id and not appointment_id.isdigit():
            logger.warning(f"Ignoring non-numeric appointment_id {appointment_id!r} in session {session.get('id')}")
            appointment_id = ""

        payment = self.complete_session(
            session.get("id"),
            int(appointment_id) if appointment_id else None,
        )
        if payment is None:
            logger.error(f"No payment record found for checkout session {session.get('id')}")
            return {"received": True, "error": "No payment record found"}

        return {"received": True}

    def complete_session(self, session_id: Optional[str], appointment_id: Optional[int] = None) -> Optional[Payment]:
        """Mark the payment of a checkout session successful and confirm its appointment.

        Falls back to the appointment's payment row when the session id is
        unknown locally.
        """
        payment = None
        if session_id:
            payment = self.db.query(Payment).filter(Payment.transaction_id == session_id).first()

        if payment is None and appointment_id is not None:
            payment = (
                self.db.query(Payment)
                .filter(Payment.appointment_id == appointment_id)
                .order_by(Payment.id.desc())
                .first()
            )
            if payment is not None:
                logger.info(f"Matched session {session_id} to payment {payment.id} via appointment {appointment_id}")
                payment.transaction_id = session_id

        if payment is None:
            return None

        payment.status = PaymentStatus.SUCCESSFUL

        appointment = payment.appointment
        appointment.payment_status = PaymentState.PAID
        if appointment.status not in (AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED):
            appointment.status = AppointmentStatus.CONFIRMED

        self.db.commit()
        self.db.refresh(payment)

        logger.info(f"Payment {payment.id} for appointment {appointment.id} completed")
        return payment

    def manual_update(self, session_id: str) -> Payment:
        payment = self.complete_session(session_id)
        if payment is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No payment record found for this session"
            )
        return payment
