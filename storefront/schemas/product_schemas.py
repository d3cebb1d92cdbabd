from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductForm(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price_in_cents: int = Field(..., ge=1)


class AvailabilityUpdate(BaseModel):
    is_available_for_purchase: bool


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    price_in_cents: int
    image_path: str
    is_available_for_purchase: bool
    created_at: datetime


class AdminProductRow(ProductResponse):
    order_count: int
    price: str


class PurchaseDetails(BaseModel):
    product: ProductResponse
    discount_code_id: Optional[str] = None
    discount: Optional[str] = None
    price_in_cents: int
    discounted_price_in_cents: Optional[int] = None
