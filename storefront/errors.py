"""Storefront error hierarchy and the FastAPI handlers that render it.

Service functions raise these; routes let them propagate and the handlers
registered in ``register_error_handlers`` turn them into JSON responses.
``InvalidDiscountKind`` is not a ``StorefrontError``: it signals a
broken data model and surfaces as a 500.
"""

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    code = "STOREFRONT_ERROR"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        field_errors: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors or {}

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "fields": self.field_errors,
            }
        }


class ValidationFailed(StorefrontError):
    code = "VALIDATION_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailed":
        return cls(message, {field: [message]})


class NotFound(StorefrontError):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND


class DuplicatePurchase(StorefrontError):
    code = "DUPLICATE_PURCHASE"
    http_status = status.HTTP_409_CONFLICT


class ProductHasOrders(StorefrontError):
    code = "PRODUCT_HAS_ORDERS"
    http_status = status.HTTP_409_CONFLICT


class PaymentGatewayError(StorefrontError):
    code = "PAYMENT_GATEWAY_ERROR"
    http_status = status.HTTP_502_BAD_GATEWAY


class EmailDeliveryError(StorefrontError):
    code = "EMAIL_DELIVERY_ERROR"
    http_status = status.HTTP_502_BAD_GATEWAY


class InvalidDiscountKind(RuntimeError):
    def __init__(self, kind):
        super().__init__(f"Invalid discount type {kind!r}")
        self.kind = kind


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        fields: Dict[str, List[str]] = {}
        for err in exc.errors():
            # drop the leading "body"/"query"/"form" location
            loc = [str(part) for part in err["loc"][1:]] or [str(err["loc"][0])]
            fields.setdefault(".".join(loc), []).append(err["msg"])

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "code": ValidationFailed.code,
                    "message": "Invalid request data",
                    "fields": fields,
                }
            },
        )
