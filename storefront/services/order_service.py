"""Checkout and order recording.

``create_payment_intent`` runs before the customer is sent to the payment
provider; ``ingest_payment`` runs when the provider reports the payment as
captured. Both trust only what they read from the database at call time,
and ingestion trusts the captured amount reported by the provider.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy import update
from sqlmodel import Session, select

from storefront.errors import (
    DuplicatePurchase,
    EmailDeliveryError,
    NotFound,
    ValidationFailed,
)
from storefront.models.discount_code import DiscountCode
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.types import utcnow
from storefront.models.user import User
from storefront.services.discount_service import discounted_price, find_usable_code
from storefront.services.download_service import new_download_verification
from storefront.services.email_service import Mailer
from storefront.services.payment_service import PaymentGateway, PaymentSucceeded

logger = logging.getLogger(__name__)

ORDER_HISTORY_MESSAGE = (
    "Check your email to view your order history and download your products."
)

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(value) -> Optional[str]:
    """The address in the form checkout and order history compare against,
    ``None`` when it is not a valid address."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return _email_adapter.validate_python(value)
    except ValidationError:
        return None


@dataclass(frozen=True)
class PaymentIntent:
    gateway_order_id: str
    amount_in_cents: int
    currency: str
    key_id: str
    product_id: str
    discount_code_id: Optional[str]


@dataclass(frozen=True)
class IngestedOrder:
    order_id: str
    user_id: str
    download_token: str
    receipt_sent: bool


def has_existing_order(session: Session, email: str, product_id: str) -> bool:
    existing = session.exec(
        select(Order.id)
        .join(User, User.id == Order.user_id)
        .where(User.email == email)
        .where(Order.product_id == product_id)
    ).first()
    return existing is not None


def create_payment_intent(
    session: Session,
    gateway: PaymentGateway,
    *,
    email: str,
    product_id: str,
    discount_code_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> PaymentIntent:
    now = now or utcnow()

    email = normalize_email(email)
    if email is None:
        raise ValidationFailed.for_field("email", "Invalid email address")

    product = session.get(Product, product_id)
    if product is None:
        raise NotFound("Unexpected Error")

    discount_code = None
    if discount_code_id is not None:
        discount_code = find_usable_code(session, product.id, now, code_id=discount_code_id)
        if discount_code is None:
            raise ValidationFailed.for_field("discount_code_id", "Coupon has expired")

    # checked before the gateway is ever called
    if has_existing_order(session, email, product.id):
        raise DuplicatePurchase(
            "You have already purchased this product. "
            "Try downloading it from the My Orders page"
        )

    amount = (
        product.price_in_cents
        if discount_code is None
        else discounted_price(discount_code, product.price_in_cents)
    )

    gateway_order = gateway.create_order(
        amount,
        notes={
            "product_id": product.id,
            "discount_code_id": discount_code.id if discount_code else "",
            "email": email,
        },
    )

    return PaymentIntent(
        gateway_order_id=gateway_order["id"],
        amount_in_cents=amount,
        currency=gateway.currency,
        key_id=gateway.key_id,
        product_id=product.id,
        discount_code_id=discount_code.id if discount_code else None,
    )


def ingest_payment(
    session: Session,
    payment: PaymentSucceeded,
    mailer: Mailer,
    now: Optional[datetime] = None,
    ttl_hours: Optional[int] = None,
) -> IngestedOrder:
    """Record a captured payment as an order.

    Not idempotent: the same event delivered twice records two orders.
    A failed receipt email is logged and does not fail ingestion.
    """
    now = now or utcnow()

    product = session.get(Product, payment.product_id) if payment.product_id else None
    email = normalize_email(payment.email)
    if product is None or email is None:
        logger.warning(
            f"Rejected payment {payment.payment_id}: "
            f"product={payment.product_id} email={payment.email!r}"
        )
        raise ValidationFailed("Bad Request")

    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        user = User(email=email, created_at=now, updated_at=now)
    else:
        user.updated_at = now
    session.add(user)

    discount_code = None
    if payment.discount_code_id:
        discount_code = session.get(DiscountCode, payment.discount_code_id)
        if discount_code is None:
            logger.warning(f"Payment {payment.payment_id} references unknown discount code {payment.discount_code_id}")

    order = Order(
        user=user,
        product_id=product.id,
        discount_code_id=discount_code.id if discount_code else None,
        price_paid_in_cents=payment.amount_paid_in_cents,
        created_at=now,
        updated_at=now,
    )
    session.add(order)

    verification = new_download_verification(product.id, now, ttl_hours)
    session.add(verification)

    if discount_code is not None:
        session.exec(
            update(DiscountCode)
            .where(DiscountCode.id == discount_code.id)
            .values(uses=DiscountCode.uses + 1)
        )

    session.commit()
    session.refresh(order)

    logger.info(
        f"Order {order.id} recorded for {email}",
        extra={"order_id": order.id, "product_id": product.id},
    )

    try:
        receipt_sent = mailer.send_purchase_receipt(
            email=email,
            order=order,
            product=product,
            download_token=verification.id,
        )
    except Exception:
        logger.exception(f"Receipt email for order {order.id} failed")
        receipt_sent = False

    if not receipt_sent:
        logger.error(f"Receipt for order {order.id} was not delivered")

    return IngestedOrder(
        order_id=order.id,
        user_id=order.user_id,
        download_token=verification.id,
        receipt_sent=receipt_sent,
    )


def email_order_history(
    session: Session,
    mailer: Mailer,
    email: str,
    now: Optional[datetime] = None,
    ttl_hours: Optional[int] = None,
) -> str:
    """Email every order with a fresh download link.

    Answers with the same message whether or not the address is a customer.
    """
    email = normalize_email(email)
    if email is None:
        raise ValidationFailed.for_field("email", "Invalid email address")

    user = session.exec(select(User).where(User.email == email)).first()
    if user is None:
        return ORDER_HISTORY_MESSAGE

    now = now or utcnow()
    items = []
    for order in user.orders:
        verification = new_download_verification(order.product_id, now, ttl_hours)
        session.add(verification)
        items.append({"order": order, "product": order.product, "verification": verification})
    session.commit()

    sent = mailer.send_order_history(
        email=user.email,
        orders=[
            {
                "order": item["order"],
                "product": item["product"],
                "download_token": item["verification"].id,
            }
            for item in items
        ],
    )
    if not sent:
        raise EmailDeliveryError(
            "There was an error sending your email. Please try again."
        )

    return ORDER_HISTORY_MESSAGE


def payment_status(
    session: Session,
    gateway: PaymentGateway,
    gateway_order_id: str,
) -> Dict[str, Any]:
    gateway_order = gateway.fetch_order(gateway_order_id)
    notes = gateway_order.get("notes") or {}

    product = session.get(Product, notes.get("product_id")) if notes.get("product_id") else None
    if product is None:
        raise NotFound("Order not found")

    return {
        "is_success": gateway_order.get("status") == "paid",
        "amount_in_cents": gateway_order.get("amount"),
        "product": {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "image_path": product.image_path,
        },
    }
