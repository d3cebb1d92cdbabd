from datetime import datetime
from typing import TYPE_CHECKING, List
from uuid import uuid4

from sqlmodel import Field, Relationship, SQLModel

from storefront.models.types import UTCDateTime, utcnow

if TYPE_CHECKING:
    from .order import Order


class User(SQLModel, table=True):
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    email: str = Field(unique=True, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    orders: List["Order"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
