import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storefront.config import Settings, settings as default_settings
from storefront.database import Database
from storefront.dependencies.admin import require_admin
from storefront.errors import register_error_handlers
from storefront.routes import (
    admin,
    admin_discount_codes,
    admin_orders,
    admin_products,
    admin_users,
    checkout,
    health,
    orders,
    products,
    webhooks,
)
from storefront.services.email_service import Mailer
from storefront.services.file_storage import ProductFiles
from storefront.services.payment_service import PaymentGateway
from storefront.utils.cache import ReadThroughCache
from storefront.utils.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    gateway: Optional[PaymentGateway] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)

        db = Database(settings.database_url, echo=settings.database_echo)
        # Run DB creation ONLY in local
        if settings.env == "local":
            db.create_all()
        app.state.db = db

        logger.info(f"{settings.store_name} API started")
        yield

        db.dispose()
        logger.info(f"{settings.store_name} API shutting down")

    app = FastAPI(title=f"{settings.store_name} API", lifespan=lifespan)

    app.state.settings = settings
    app.state.cache = ReadThroughCache(settings.cache_ttl_seconds)
    app.state.files = ProductFiles(settings.products_dir, settings.public_dir)
    app.state.gateway = gateway or PaymentGateway(
        settings.razorpay_key_id,
        settings.razorpay_key_secret,
        settings.razorpay_webhook_secret,
        currency=settings.currency,
    )
    app.state.mailer = mailer or Mailer(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    admin_only = [Depends(require_admin)]

    app.include_router(products.router, prefix="/products", tags=["Products"])
    app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
    app.include_router(orders.router, prefix="/orders", tags=["Orders"])
    app.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
    app.include_router(health.router, prefix="/health", tags=["Health"])

    app.include_router(admin.router, prefix="/admin", tags=["Admin"], dependencies=admin_only)
    app.include_router(admin_products.router, prefix="/admin/products", tags=["Admin Products"], dependencies=admin_only)
    app.include_router(admin_discount_codes.router, prefix="/admin/discount-codes", tags=["Admin Discount Codes"], dependencies=admin_only)
    app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"], dependencies=admin_only)
    app.include_router(admin_users.router, prefix="/admin/users", tags=["Admin Customers"], dependencies=admin_only)

    # preview images only; product files are never served statically
    os.makedirs(settings.public_dir, exist_ok=True)
    app.mount("/public", StaticFiles(directory=settings.public_dir), name="public")

    return app


app = create_app()
