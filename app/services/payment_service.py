import hashlib
import hmac
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

import requests
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from app.models.payment import Payment
from app.models.user import User
from app.services.pricing_service import PriceBreakdown
from app.utils.retry import with_retry

logger = logging.getLogger(__name__)


class RazorpayClient:
    """Minimal client for the Razorpay Orders API."""

    def __init__(self, key_id: str = None, key_secret: str = None, base_url: str = None, session=None):
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.base_url = (base_url or settings.RAZORPAY_API_URL).rstrip("/")
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def create_order(self, amount_paise: int, currency: str, receipt: str, notes: Dict = None) -> Dict:
        def call():
            response = self.session.post(
                f"{self.base_url}/orders",
                json={"amount": amount_paise, "currency": currency, "receipt": receipt, "notes": notes or {}},
                auth=(self.key_id, self.key_secret),
                timeout=10,
            )
            response.raise_for_status()
            return response.json()

        try:
            return with_retry(call, exceptions=(requests.RequestException,))
        except requests.RequestException as e:
            logger.error("Razorpay order creation failed: %s", e)
            raise ExternalServiceError("Unable to start payment: order creation failed")

    def signature_for(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return hmac.compare_digest(self.signature_for(order_id, payment_id), signature or "")


class PaymentService:
    @staticmethod
    def create_order(
        db: Session,
        user: User,
        breakdown: PriceBreakdown,
        customer: Optional[Dict] = None,
        client: RazorpayClient = None,
    ) -> Dict:
        client = client or RazorpayClient()
        if not client.configured:
            raise ExternalServiceError("Payment gateway is not configured")
        if breakdown.totalAmount <= 0:
            raise ValidationError("Order total must be greater than zero")

        amount_paise = breakdown.totalAmount * 100
        receipt = f"rcpt_{uuid.uuid4().hex[:16]}"
        notes = {"userId": user.user_id, "items": str(len(breakdown.items))}
        order = client.create_order(amount_paise, "INR", receipt, notes)

        payment = Payment(
            id=str(uuid.uuid4()),
            user_id=user.id,
            order_id=order["id"],
            amount=amount_paise,
            currency=order.get("currency", "INR"),
            status="CREATED",
            breakdown=breakdown.to_dict(),
        )
        db.add(payment)
        db.commit()

        logger.info("Created payment order %s for user %s", payment.order_id, user.user_id)
        return {
            "key": client.key_id,
            "orderId": payment.order_id,
            "amountPaise": amount_paise,
            "currency": payment.currency,
            "customer": {
                "name": (customer or {}).get("name") or user.name,
                "email": (customer or {}).get("email") or user.email,
                "contact": (customer or {}).get("contact") or user.mobile,
            },
            "notes": notes,
            "breakdown": breakdown.to_dict(),
        }

    @staticmethod
    def verify_payment(
        db: Session,
        user: User,
        order_id: str,
        payment_id: str,
        signature: str,
        client: RazorpayClient = None,
    ) -> Dict:
        client = client or RazorpayClient()
        if not client.configured:
            raise ExternalServiceError("Payment gateway is not configured")

        payment = db.query(Payment).filter(
            Payment.order_id == order_id,
            Payment.user_id == user.id,
        ).first()
        if not payment:
            raise NotFoundError("Payment not found")

        if not client.verify_signature(order_id, payment_id, signature):
            # a settled payment is never downgraded by a later bad confirmation
            if payment.status != "PAID":
                payment.status = "FAILED"
                db.commit()
            logger.warning("Signature mismatch for order %s", order_id)
            raise ValidationError("Payment verification failed")

        if payment.status == "PAID":
            return PaymentService._verification_view(payment)

        payment.status = "PAID"
        payment.payment_id = payment_id
        payment.payment_date = datetime.now(timezone.utc)
        db.commit()

        return PaymentService._verification_view(payment)

    @staticmethod
    def _verification_view(payment: Payment) -> Dict:
        return {
            "paymentId": payment.id,
            "orderId": payment.order_id,
            "status": payment.status,
            "amount": payment.amount,
        }
