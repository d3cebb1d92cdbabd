from datetime import datetime
from typing import TYPE_CHECKING, List
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

from storefront.models.discount_code import DiscountCodeProductLink
from storefront.models.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from .discount_code import DiscountCode
    from .download_verification import DownloadVerification
    from .order import Order


class Product(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str
    description: str

    price_in_cents: int
    file_path: str
    image_path: str
    is_available_for_purchase: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    orders: List["Order"] = Relationship(back_populates="product")
    download_verifications: List["DownloadVerification"] = Relationship(
        back_populates="product",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    discount_codes: List["DiscountCode"] = Relationship(
        back_populates="products", link_model=DiscountCodeProductLink
    )
