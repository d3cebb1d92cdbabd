from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.database import get_session
from storefront.dependencies.services import get_gateway
from storefront.schemas.order_schemas import PaymentIntentRequest, PaymentIntentResponse
from storefront.services.order_service import create_payment_intent, payment_status
from storefront.services.payment_service import PaymentGateway

router = APIRouter()


@router.post("/payment-intent", response_model=PaymentIntentResponse)
def start_checkout(
    payload: PaymentIntentRequest,
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_gateway),
):
    intent = create_payment_intent(
        session,
        gateway,
        email=payload.email,
        product_id=payload.product_id,
        discount_code_id=payload.discount_code_id,
    )

    return PaymentIntentResponse(
        gateway_order_id=intent.gateway_order_id,
        amount_in_cents=intent.amount_in_cents,
        currency=intent.currency,
        key_id=intent.key_id,
        product_id=intent.product_id,
        discount_code_id=intent.discount_code_id,
    )


@router.get("/{gateway_order_id}/status")
def checkout_status(
    gateway_order_id: str,
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_gateway),
):
    return payment_status(session, gateway, gateway_order_id)
