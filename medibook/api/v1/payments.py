from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_user, get_admin_user
from ...models.user import User
from ...services.payment_service import PaymentService
from ...services.stripe_gateway import StripeGateway
from ...schemas.payment import (
    CheckoutRequest, CheckoutResponse, ManualPaymentUpdate, PaymentResponse
)

router = APIRouter(prefix="/payments", tags=["Payments"])

def get_stripe_gateway() -> StripeGateway:
    return StripeGateway()

@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    checkout: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_stripe_gateway)
):
    """Start a hosted checkout for an appointment."""
    return await PaymentService(db, gateway).create_checkout(current_user, checkout)

@router.get("/status", response_model=PaymentResponse)
async def payment_status(
    session_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return PaymentService(db).get_by_session(current_user, session_id)

@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return PaymentService(db).list_for_user(current_user)

@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_stripe_gateway)
):
    """Provider callback; authenticated by signature, not by user token."""
    payload = await request.body()
    event = gateway.construct_event(payload, request.headers.get("stripe-signature"))
    return PaymentService(db, gateway).handle_event(event)

@router.post("/manual-update", response_model=PaymentResponse)
async def manual_update(
    update: ManualPaymentUpdate,
    _: User = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Replay checkout completion for a session the webhook missed."""
    return PaymentService(db).manual_update(update.session_id)
