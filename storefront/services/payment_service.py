import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import razorpay
import requests

from storefront.errors import PaymentGatewayError, ValidationFailed

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED_EVENT = "order.paid"

_GATEWAY_ERRORS = (
    razorpay.errors.BadRequestError,
    razorpay.errors.GatewayError,
    razorpay.errors.ServerError,
    requests.RequestException,
)


@dataclass(frozen=True)
class PaymentSucceeded:
    """The parts of an ``order.paid`` event needed to record an order."""
    payment_id: Optional[str]
    product_id: Optional[str]
    discount_code_id: Optional[str]
    email: Optional[str]
    amount_paid_in_cents: int


class PaymentGateway:
    """Thin wrapper over the Razorpay client.

    Orders play the role of payment intents: the amount is fixed when the
    order is created and ``notes`` carry the product/discount ids that the
    webhook reads back.
    """

    def __init__(self, key_id: str, key_secret: str, webhook_secret: str, currency: str = "USD"):
        self.key_id = key_id
        self.webhook_secret = webhook_secret
        self.currency = currency
        self.client = razorpay.Client(auth=(key_id, key_secret))

    def create_order(self, amount_in_cents: int, notes: Dict[str, str], receipt: Optional[str] = None) -> Dict[str, Any]:
        payload = {
            "amount": amount_in_cents,
            "currency": self.currency,
            "notes": notes,
        }
        if receipt:
            payload["receipt"] = receipt

        try:
            order = self.client.order.create(payload)
        except _GATEWAY_ERRORS as e:
            logger.error(f"Razorpay order creation failed: {e}")
            raise PaymentGatewayError("Payment provider unavailable, please try again") from e

        logger.info(f"Razorpay order {order['id']} created for {amount_in_cents}")
        return order

    def fetch_order(self, gateway_order_id: str) -> Dict[str, Any]:
        try:
            return self.client.order.fetch(gateway_order_id)
        except _GATEWAY_ERRORS as e:
            logger.error(f"Razorpay order fetch failed for {gateway_order_id}: {e}")
            raise PaymentGatewayError("Payment provider unavailable, please try again") from e

    def verify_webhook(self, body: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Check the signature against the shared secret, then decode the event."""
        if not self.webhook_secret:
            logger.error("Webhook received but no webhook secret is configured")
            raise ValidationFailed("Invalid webhook signature")

        if not signature:
            logger.warning("Webhook received without signature")
            raise ValidationFailed("Invalid webhook signature")

        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("Webhook body is not valid UTF-8")
            raise ValidationFailed("Malformed webhook event")

        try:
            self.client.utility.verify_webhook_signature(text, signature, self.webhook_secret)
        except razorpay.errors.SignatureVerificationError:
            logger.warning("Webhook signature verification failed")
            raise ValidationFailed("Invalid webhook signature")

        try:
            event = json.loads(text)
        except ValueError:
            logger.warning("Webhook body is not valid JSON")
            raise ValidationFailed("Malformed webhook event")

        if not isinstance(event, dict):
            logger.warning(f"Webhook body is a {type(event).__name__}, expected an object")
            raise ValidationFailed("Malformed webhook event")

        return event


def _object(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _entity(event: Dict[str, Any], name: str) -> Dict[str, Any]:
    return _object(_object(_object(event.get("payload")).get(name)).get("entity"))


def parse_payment_event(event: Dict[str, Any]) -> Optional[PaymentSucceeded]:
    """Extract a ``PaymentSucceeded`` from a webhook event, ``None`` for other events."""
    if event.get("event") != PAYMENT_SUCCEEDED_EVENT:
        return None

    payment = _entity(event, "payment")
    order = _entity(event, "order")
    notes = {**_object(payment.get("notes")), **_object(order.get("notes"))}

    amount = payment.get("amount") or order.get("amount_paid") or 0
    if isinstance(amount, bool) or not isinstance(amount, int):
        logger.warning(f"Webhook payment amount is not an integer: {amount!r}")
        raise ValidationFailed("Malformed webhook event")

    return PaymentSucceeded(
        payment_id=_text(payment.get("id")),
        product_id=_text(notes.get("product_id")),
        discount_code_id=_text(notes.get("discount_code_id")),
        email=_text(payment.get("email")),
        amount_paid_in_cents=amount,
    )
