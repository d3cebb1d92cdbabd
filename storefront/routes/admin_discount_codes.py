from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from storefront.database import get_session
from storefront.schemas.discount_code_schemas import ActiveUpdate
from storefront.services import discount_code_service
from storefront.services.discount_service import format_discount

router = APIRouter()


class DiscountCodeRequest(BaseModel):
    # field rules live in discount_code_service
    code: Optional[str] = None
    discount_amount: Optional[int] = None
    discount_type: Optional[str] = None
    all_products: bool = False
    product_ids: Optional[List[str]] = None
    expires_at: Optional[datetime] = None
    limit: Optional[int] = None


def _summary(discount_code):
    return {
        "id": discount_code.id,
        "code": discount_code.code,
        "discount": format_discount(discount_code),
        "is_active": discount_code.is_active,
        "uses": discount_code.uses,
        "limit": discount_code.limit,
        "expires_at": discount_code.expires_at,
    }


@router.get("")
def list_discount_codes(session: Session = Depends(get_session)):
    return discount_code_service.list_discount_codes(session)


@router.post("", status_code=201)
def create_discount_code(
    payload: DiscountCodeRequest,
    session: Session = Depends(get_session),
):
    discount_code = discount_code_service.create_discount_code(
        session, payload.model_dump(exclude_unset=True)
    )
    return _summary(discount_code)


@router.patch("/{discount_code_id}/active")
def toggle_active(
    discount_code_id: str,
    payload: ActiveUpdate,
    session: Session = Depends(get_session),
):
    discount_code = discount_code_service.set_active(session, discount_code_id, payload.is_active)
    return _summary(discount_code)


@router.delete("/{discount_code_id}")
def delete_discount_code(discount_code_id: str, session: Session = Depends(get_session)):
    deleted = discount_code_service.delete_discount_code(session, discount_code_id)
    return {"message": "Discount code deleted", **deleted}
