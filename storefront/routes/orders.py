from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.database import get_session
from storefront.dependencies.services import get_mailer, get_settings
from storefront.config import Settings
from storefront.schemas.order_schemas import MessageResponse, OrderHistoryRequest
from storefront.services.email_service import Mailer
from storefront.services.order_service import email_order_history

router = APIRouter()


@router.post("/history", response_model=MessageResponse)
def request_order_history(
    payload: OrderHistoryRequest,
    session: Session = Depends(get_session),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    message = email_order_history(
        session,
        mailer,
        payload.email,
        ttl_hours=settings.download_link_ttl_hours,
    )
    return MessageResponse(message=message)
