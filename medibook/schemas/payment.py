from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from ..models.payment import PaymentStatus

class CheckoutRequest(BaseModel):
    appointment_id: int
    amount: Decimal = Field(..., gt=0)
    success_url: str
    cancel_url: str

class CheckoutResponse(BaseModel):
    url: str
    session_id: str

class ManualPaymentUpdate(BaseModel):
    session_id: str

class PaymentResponse(BaseModel):
    id: int
    appointment_id: int
    amount: float
    currency: str
    transaction_id: Optional[str] = None
    status: PaymentStatus
    payment_date: Optional[datetime] = None

    class Config:
        from_attributes = True
