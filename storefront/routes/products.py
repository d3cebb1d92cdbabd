from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlmodel import Session

from storefront.database import get_session
from storefront.dependencies.services import get_cache
from storefront.schemas.product_schemas import PurchaseDetails
from storefront.services import product_service
from storefront.services.download_service import read_product_file, resolve_download
from storefront.utils.cache import ReadThroughCache
from storefront.utils.responses import attachment_response

router = APIRouter()


@router.get("")
def list_products(
    session: Session = Depends(get_session),
    cache: ReadThroughCache = Depends(get_cache),
):
    return product_service.list_available_products(session, cache)


@router.get("/featured")
def featured_products(
    session: Session = Depends(get_session),
    cache: ReadThroughCache = Depends(get_cache),
):
    return product_service.featured_products(session, cache)


@router.get("/download/expired", name="download_expired")
def download_expired():
    return {
        "expired": True,
        "message": "Download link expired. Request your order history to get a new link.",
    }


@router.get("/download/{verification_id}")
def download_product(
    verification_id: str,
    request: Request,
    session: Session = Depends(get_session),
):
    product_file = resolve_download(session, verification_id)

    if product_file is None:
        return RedirectResponse(url=request.url_for("download_expired"))

    return attachment_response(read_product_file(product_file))


@router.get("/{product_id}/purchase", response_model=PurchaseDetails)
def purchase_page(
    product_id: str,
    coupon: Optional[str] = None,
    session: Session = Depends(get_session),
):
    return product_service.purchase_details(session, product_id, coupon)
