from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from storefront.models.discount_code import DiscountCodeType


class DiscountCodeCreate(BaseModel):
    code: str = Field(..., min_length=1)
    discount_amount: int = Field(..., ge=1)
    discount_type: DiscountCodeType
    all_products: bool = False
    product_ids: Optional[List[str]] = None
    expires_at: Optional[datetime] = None
    limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Code is required")
        return v

    @field_validator("product_ids", mode="before")
    @classmethod
    def empty_products_to_none(cls, v):
        return v or None

    @field_validator("expires_at", mode="before")
    @classmethod
    def empty_expiry_to_none(cls, v):
        return None if v == "" else v

    @field_validator("limit", mode="before")
    @classmethod
    def empty_limit_to_none(cls, v):
        return None if v == "" else v

    @field_validator("expires_at")
    @classmethod
    def aware_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # an offset-less value is read as UTC
        if v is None:
            return v
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class ActiveUpdate(BaseModel):
    is_active: bool
