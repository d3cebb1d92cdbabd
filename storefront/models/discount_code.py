from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

from storefront.models.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from .order import Order
    from .product import Product


class DiscountCodeType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class DiscountCodeProductLink(SQLModel, table=True):
    discount_code_id: str = Field(foreign_key="discountcode.id", primary_key=True)
    product_id: str = Field(foreign_key="product.id", primary_key=True)


class DiscountCode(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    code: str = Field(unique=True, index=True)

    # percentage 1-100, or major currency units for FIXED
    discount_amount: int
    discount_type: DiscountCodeType

    all_products: bool = Field(default=False)
    expires_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    limit: Optional[int] = None
    uses: int = Field(default=0)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    products: List["Product"] = Relationship(
        back_populates="discount_codes", link_model=DiscountCodeProductLink
    )
    orders: List["Order"] = Relationship(back_populates="discount_code")
