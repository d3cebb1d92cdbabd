from typing import Optional

from pydantic import BaseModel, EmailStr


class PaymentIntentRequest(BaseModel):
    email: EmailStr
    product_id: str
    discount_code_id: Optional[str] = None


class PaymentIntentResponse(BaseModel):
    gateway_order_id: str
    amount_in_cents: int
    currency: str
    key_id: str
    product_id: str
    discount_code_id: Optional[str] = None


class OrderHistoryRequest(BaseModel):
    # validated in the service so a bad address gets the form message
    email: str


class MessageResponse(BaseModel):
    message: str
