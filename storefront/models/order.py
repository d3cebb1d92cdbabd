from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

from storefront.models.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from .discount_code import DiscountCode
    from .product import Product
    from .user import User


class Order(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    price_paid_in_cents: int

    user_id: str = Field(foreign_key="user.id", index=True)
    product_id: str = Field(foreign_key="product.id", index=True)
    discount_code_id: Optional[str] = Field(default=None, foreign_key="discountcode.id")

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    user: Optional["User"] = Relationship(back_populates="orders")
    product: Optional["Product"] = Relationship(back_populates="orders")
    discount_code: Optional["DiscountCode"] = Relationship(back_populates="orders")
