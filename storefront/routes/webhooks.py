import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlmodel import Session

from storefront.config import Settings
from storefront.database import get_session
from storefront.dependencies.services import get_gateway, get_mailer, get_settings
from storefront.services.email_service import Mailer
from storefront.services.order_service import ingest_payment
from storefront.services.payment_service import PaymentGateway, parse_payment_event

logger = logging.getLogger(__name__)

router = APIRouter()


async def raw_body(request: Request) -> bytes:
    # signature is computed over the exact bytes sent
    return await request.body()


@router.post("/razorpay")
def razorpay_webhook(
    body: bytes = Depends(raw_body),
    x_razorpay_signature: Optional[str] = Header(None),
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_gateway),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    event = gateway.verify_webhook(body, x_razorpay_signature)

    payment = parse_payment_event(event)
    if payment is None:
        logger.info(f"Ignoring webhook event {event.get('event')}", extra={"event": event.get("event")})
        return {"status": "ignored"}

    result = ingest_payment(
        session,
        payment,
        mailer,
        ttl_hours=settings.download_link_ttl_hours,
    )
    return {"status": "ok", "order_id": result.order_id}
