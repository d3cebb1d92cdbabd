from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

from storefront.models.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from .product import Product


class DownloadVerification(SQLModel, table=True):
    # the id doubles as the unguessable download token
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    product_id: str = Field(foreign_key="product.id", index=True)
    expire_at: datetime = Field(sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    product: Optional["Product"] = Relationship(back_populates="download_verifications")
