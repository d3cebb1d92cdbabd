from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlmodel import Session

from storefront.database import get_session
from storefront.dependencies.services import get_cache, get_files
from storefront.schemas.product_schemas import AdminProductRow, AvailabilityUpdate, ProductResponse
from storefront.services import product_service
from storefront.services.download_service import product_file, read_product_file
from storefront.services.file_storage import ProductFiles
from storefront.utils.cache import ReadThroughCache
from storefront.utils.responses import attachment_response

router = APIRouter()


@router.get("", response_model=List[AdminProductRow])
def list_products(session: Session = Depends(get_session)):
    return product_service.list_admin_products(session)


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price_in_cents: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    session: Session = Depends(get_session),
    cache: ReadThroughCache = Depends(get_cache),
    files: ProductFiles = Depends(get_files),
):
    return product_service.create_product(
        session,
        cache,
        files,
        {"name": name, "description": description, "price_in_cents": price_in_cents},
        file,
        image,
    )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, session: Session = Depends(get_session)):
    return product_service.get_product(session, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price_in_cents: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    session: Session = Depends(get_session),
    cache: ReadThroughCache = Depends(get_cache),
    files: ProductFiles = Depends(get_files),
):
    return product_service.update_product(
        session,
        cache,
        files,
        product_id,
        {"name": name, "description": description, "price_in_cents": price_in_cents},
        file,
        image,
    )


@router.patch("/{product_id}/availability", response_model=ProductResponse)
def toggle_availability(
    product_id: str,
    payload: AvailabilityUpdate,
    session: Session = Depends(get_session),
    cache: ReadThroughCache = Depends(get_cache),
):
    return product_service.set_availability(
        session, cache, product_id, payload.is_available_for_purchase
    )


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    session: Session = Depends(get_session),
    cache: ReadThroughCache = Depends(get_cache),
    files: ProductFiles = Depends(get_files),
):
    deleted = product_service.delete_product(session, cache, files, product_id)
    return {"message": "Product deleted", **deleted}


@router.get("/{product_id}/download")
def download_product(product_id: str, session: Session = Depends(get_session)):
    product = product_service.get_product(session, product_id)
    return attachment_response(read_product_file(product_file(product)))
