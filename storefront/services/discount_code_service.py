import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.errors import NotFound, ValidationFailed
from storefront.models.discount_code import DiscountCode, DiscountCodeType
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.types import utcnow
from storefront.schemas.discount_code_schemas import DiscountCodeCreate
from storefront.schemas.forms import parse_form
from storefront.services.discount_service import format_discount
from storefront.utils.formatters import format_number

logger = logging.getLogger(__name__)


def _check_rules(data: DiscountCodeCreate, now: datetime) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}

    if data.discount_type == DiscountCodeType.PERCENTAGE and data.discount_amount > 100:
        errors["discount_amount"] = ["Percentage discount must be less than or equal 100"]

    if data.all_products and data.product_ids is not None:
        errors["product_ids"] = ["Cannot select products when all products is selected"]
    elif not data.all_products and data.product_ids is None:
        errors["product_ids"] = ["Must select products when all products is not selected"]

    if data.expires_at is not None and data.expires_at <= now:
        errors["expires_at"] = ["Expiration must be in the future"]

    return errors


def create_discount_code(
    session: Session,
    form: Dict[str, Any],
    now: Optional[datetime] = None,
) -> DiscountCode:
    now = now or utcnow()
    data = parse_form(DiscountCodeCreate, form)

    errors = _check_rules(data, now)

    products: List[Product] = []
    if data.product_ids:
        products = session.exec(
            select(Product).where(Product.id.in_(data.product_ids))
        ).all()
        if len(products) != len(set(data.product_ids)):
            errors.setdefault("product_ids", []).append("Unknown product selected")

    existing = session.exec(
        select(DiscountCode.id).where(DiscountCode.code == data.code)
    ).first()
    if existing is not None:
        errors.setdefault("code", []).append("Code already exists")

    if errors:
        raise ValidationFailed("Invalid discount code", errors)

    discount_code = DiscountCode(
        code=data.code,
        discount_amount=data.discount_amount,
        discount_type=data.discount_type,
        all_products=data.all_products,
        expires_at=data.expires_at,
        limit=data.limit,
        created_at=now,
    )
    discount_code.products = list(products)

    session.add(discount_code)
    session.commit()
    session.refresh(discount_code)

    logger.info(f"Discount code {discount_code.code} created")
    return discount_code


def _get(session: Session, discount_code_id: str) -> DiscountCode:
    discount_code = session.get(DiscountCode, discount_code_id)
    if discount_code is None:
        raise NotFound("Discount code not found")
    return discount_code


def set_active(session: Session, discount_code_id: str, is_active: bool) -> DiscountCode:
    discount_code = _get(session, discount_code_id)
    discount_code.is_active = is_active

    session.add(discount_code)
    session.commit()
    session.refresh(discount_code)
    return discount_code


def delete_discount_code(session: Session, discount_code_id: str) -> Dict[str, str]:
    discount_code = _get(session, discount_code_id)
    deleted = {"id": discount_code.id, "code": discount_code.code}

    # orders keep their price paid but lose the code reference
    session.exec(
        update(Order)
        .where(Order.discount_code_id == discount_code.id)
        .values(discount_code_id=None)
    )
    session.delete(discount_code)
    session.commit()

    logger.info(f"Discount code {deleted['code']} deleted")
    return deleted


def _row(code: DiscountCode, now: datetime) -> Dict[str, Any]:
    return {
        "id": code.id,
        "code": code.code,
        "discount": format_discount(code),
        "discount_type": code.discount_type.value,
        "discount_amount": code.discount_amount,
        "expires_at": code.expires_at,
        "remaining_uses": "Unlimited" if code.limit is None else format_number(max(code.limit - code.uses, 0)),
        "uses": code.uses,
        "orders": len(code.orders),
        "products": "All" if code.all_products else ", ".join(p.name for p in code.products),
        "is_active": code.is_active,
        "is_usable": code.is_active
        and (code.limit is None or code.uses < code.limit)
        and (code.expires_at is None or code.expires_at > now),
    }


def list_discount_codes(session: Session, now: Optional[datetime] = None) -> Dict[str, List[Dict[str, Any]]]:
    """Split into codes that can still be redeemed and everything else."""
    now = now or utcnow()
    codes = session.exec(select(DiscountCode).order_by(DiscountCode.created_at)).all()

    rows = [_row(code, now) for code in codes]
    return {
        "unexpired": [r for r in rows if r["is_usable"]],
        "expired": [r for r in rows if not r["is_usable"]],
    }
