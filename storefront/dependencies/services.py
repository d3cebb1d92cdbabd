from fastapi import Request

from storefront.config import Settings
from storefront.services.email_service import Mailer
from storefront.services.file_storage import ProductFiles
from storefront.services.payment_service import PaymentGateway
from storefront.utils.cache import ReadThroughCache


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> ReadThroughCache:
    return request.app.state.cache


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_files(request: Request) -> ProductFiles:
    return request.app.state.files
