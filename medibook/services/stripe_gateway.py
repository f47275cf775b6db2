from fastapi import HTTPException, status
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional
import hashlib
import hmac
import httpx
import json
import logging
import time

from ..core.config import settings

logger = logging.getLogger(__name__)

class StripeGateway:
    """Minimal Stripe REST client: Checkout sessions and webhook verification."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        api_base: Optional[str] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.STRIPE_SECRET_KEY
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.STRIPE_WEBHOOK_SECRET
        self.api_base = api_base or settings.STRIPE_API_BASE

    async def create_checkout_session(
        self,
        appointment_id: int,
        amount: Decimal,
        currency: str,
        product_name: str,
        description: str,
        success_url: str,
        cancel_url: str,
    ) -> Dict:
        if not self.secret_key:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Payment provider is not configured"
            )

        separator = "&" if "?" in success_url else "?"
        form = {
            "mode": "payment",
            "payment_method_types[0]": "card",
            "line_items[0][quantity]": "1",
            "line_items[0][price_data][currency]": currency,
            "line_items[0][price_data][unit_amount]": str(to_minor_units(amount)),
            "line_items[0][price_data][product_data][name]": product_name,
            "line_items[0][price_data][product_data][description]": description,
            "success_url": f"{success_url}{separator}session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": cancel_url,
            "metadata[appointment_id]": str(appointment_id),
        }

        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                f"{self.api_base}/checkout/sessions",
                data=form,
                headers={"Authorization": f"Bearer {self.secret_key}"},
            )

        if response.status_code != 200:
            message = _error_message(response)
            logger.error(f"Stripe checkout session failed ({response.status_code}): {message}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Payment provider error: {message}"
            )

        return response.json()

    def construct_event(self, payload: bytes, signature_header: Optional[str]) -> Dict:
        """Verify a ``Stripe-Signature`` header and decode the event body."""
        if not signature_header:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing Stripe signature"
            )
        if not self.webhook_secret:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Webhook secret is not configured"
            )

        timestamp = None
        signatures = []
        for item in signature_header.split(","):
            key, _, value = item.strip().partition("=")
            if key == "t":
                timestamp = value
            elif key == "v1":
                signatures.append(value)

        if not timestamp or not timestamp.isdigit() or not signatures:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Webhook signature verification failed: malformed header"
            )

        expected = compute_signature(self.webhook_secret, timestamp, payload)
        if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Webhook signature verification failed: signature mismatch"
            )

        if abs(time.time() - int(timestamp)) > settings.STRIPE_WEBHOOK_TOLERANCE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Webhook signature verification failed: timestamp outside tolerance"
            )

        try:
            return json.loads(payload)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid webhook payload"
            )

def compute_signature(secret: str, timestamp: str, payload: bytes) -> str:
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()

def to_minor_units(amount: Decimal) -> int:
    """Dollars to cents, rounding half up."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("error", {}).get("message") or response.text
    except ValueError:
        return response.text
