"""Discount code evaluation.

A stored ``DiscountCode`` row is turned into one of two discount variants
(``PercentageDiscount`` or ``FixedDiscount``); each variant knows how to
apply itself to a price and how to describe itself. Prices are integer
cents and a discounted price never drops below 1 cent.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import and_, or_
from sqlmodel import Session, select

from storefront.errors import InvalidDiscountKind
from storefront.models.discount_code import (
    DiscountCode,
    DiscountCodeProductLink,
    DiscountCodeType,
)
from storefront.utils.formatters import format_currency, format_percent

MIN_PRICE_IN_CENTS = 1


@dataclass(frozen=True)
class PercentageDiscount:
    percent: int

    def apply(self, price_in_cents: int) -> int:
        # ceil(price - price * percent / 100) == price - floor(price * percent / 100)
        return max(MIN_PRICE_IN_CENTS, price_in_cents - (price_in_cents * self.percent) // 100)

    def describe(self) -> str:
        return format_percent(self.percent / 100)


@dataclass(frozen=True)
class FixedDiscount:
    # major currency units
    amount: int

    def apply(self, price_in_cents: int) -> int:
        return max(MIN_PRICE_IN_CENTS, price_in_cents - self.amount * 100)

    def describe(self) -> str:
        return format_currency(self.amount)


Discount = Union[PercentageDiscount, FixedDiscount]


def discount_for(code) -> Discount:
    """Build the discount variant for anything with discount_type/discount_amount."""
    kind = code.discount_type
    if kind == DiscountCodeType.PERCENTAGE:
        return PercentageDiscount(code.discount_amount)
    if kind == DiscountCodeType.FIXED:
        return FixedDiscount(code.discount_amount)
    raise InvalidDiscountKind(kind)


def discounted_price(code, price_in_cents: int) -> int:
    return discount_for(code).apply(price_in_cents)


def format_discount(code) -> str:
    return discount_for(code).describe()


def is_usable(code: DiscountCode, product_id: str, now: datetime) -> bool:
    """Evaluated against the row as given; the caller decides how fresh it is."""
    if not code.is_active:
        return False

    if not code.all_products and product_id not in {p.id for p in code.products}:
        return False

    if code.limit is not None and code.uses >= code.limit:
        return False

    if code.expires_at is not None and code.expires_at <= now:
        return False

    return True


def usable_discount_code_clause(product_id: str, now: datetime):
    """``is_usable`` expressed as a SQL filter on DiscountCode."""
    in_product_set = DiscountCode.id.in_(
        select(DiscountCodeProductLink.discount_code_id).where(
            DiscountCodeProductLink.product_id == product_id
        )
    )
    return and_(
        DiscountCode.is_active == True,  # noqa: E712
        or_(DiscountCode.all_products == True, in_product_set),  # noqa: E712
        or_(DiscountCode.limit == None, DiscountCode.limit > DiscountCode.uses),  # noqa: E711
        or_(DiscountCode.expires_at == None, DiscountCode.expires_at > now),  # noqa: E711
    )


def find_usable_code(
    session: Session,
    product_id: str,
    now: datetime,
    *,
    code: Optional[str] = None,
    code_id: Optional[str] = None,
) -> Optional[DiscountCode]:
    query = select(DiscountCode).where(usable_discount_code_clause(product_id, now))

    if code_id is not None:
        query = query.where(DiscountCode.id == code_id)
    elif code is not None:
        query = query.where(DiscountCode.code == code)
    else:
        return None

    return session.exec(query).first()
