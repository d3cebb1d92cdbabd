import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from sqlalchemy import func
from sqlmodel import Session, select

from storefront.errors import NotFound, ProductHasOrders, ValidationFailed
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.types import utcnow
from storefront.schemas.forms import parse_form
from storefront.schemas.product_schemas import ProductForm, ProductResponse
from storefront.services.discount_service import (
    discounted_price,
    find_usable_code,
    format_discount,
)
from storefront.services.file_storage import ProductFiles, upload_size
from storefront.utils.cache import ReadThroughCache
from storefront.utils.formatters import format_cents

logger = logging.getLogger(__name__)

PRODUCTS_TAG = "products"
FEATURED_LIMIT = 6


def _public(product: Product) -> Dict[str, Any]:
    return ProductResponse.model_validate(product).model_dump(mode="json")


def get_product(session: Session, product_id: str) -> Product:
    product = session.get(Product, product_id)
    if not product:
        raise NotFound("Product not found")
    return product


# -------------------------------
# Catalog
# -------------------------------

def list_available_products(session: Session, cache: ReadThroughCache) -> List[Dict[str, Any]]:
    def load():
        products = session.exec(
            select(Product)
            .where(Product.is_available_for_purchase == True)  # noqa: E712
            .order_by(Product.name)
        ).all()
        return [_public(p) for p in products]

    return cache.get(("products", "available"), load, tags=[PRODUCTS_TAG])


def featured_products(session: Session, cache: ReadThroughCache) -> Dict[str, List[Dict[str, Any]]]:
    def load_popular():
        order_count = func.count(Order.id)
        rows = session.exec(
            select(Product)
            .outerjoin(Order, Order.product_id == Product.id)
            .where(Product.is_available_for_purchase == True)  # noqa: E712
            .group_by(Product.id)
            .order_by(order_count.desc(), Product.name)
            .limit(FEATURED_LIMIT)
        ).all()
        return [_public(p) for p in rows]

    def load_newest():
        rows = session.exec(
            select(Product)
            .where(Product.is_available_for_purchase == True)  # noqa: E712
            .order_by(Product.created_at.desc())
            .limit(FEATURED_LIMIT)
        ).all()
        return [_public(p) for p in rows]

    return {
        "most_popular": cache.get(("products", "popular"), load_popular, tags=[PRODUCTS_TAG]),
        "newest": cache.get(("products", "newest"), load_newest, tags=[PRODUCTS_TAG]),
    }


def purchase_details(
    session: Session,
    product_id: str,
    coupon: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utcnow()
    product = get_product(session, product_id)

    details = {
        "product": _public(product),
        "price_in_cents": product.price_in_cents,
        "discount_code_id": None,
        "discount": None,
        "discounted_price_in_cents": None,
    }

    if coupon:
        code = find_usable_code(session, product.id, now, code=coupon)
        if code is not None:
            details["discount_code_id"] = code.id
            details["discount"] = format_discount(code)
            details["discounted_price_in_cents"] = discounted_price(code, product.price_in_cents)

    return details


# -------------------------------
# Admin
# -------------------------------

def list_admin_products(session: Session) -> List[Dict[str, Any]]:
    order_count = func.count(Order.id)
    rows = session.exec(
        select(Product, order_count)
        .outerjoin(Order, Order.product_id == Product.id)
        .group_by(Product.id)
        .order_by(Product.name)
    ).all()

    return [
        {
            **_public(product),
            "price": format_cents(product.price_in_cents),
            "order_count": count,
        }
        for product, count in rows
    ]


def _validate_product(
    form: Dict[str, Any],
    file: Optional[UploadFile],
    image: Optional[UploadFile],
    *,
    uploads_required: bool,
) -> ProductForm:
    errors: Dict[str, List[str]] = {}

    has_file = file is not None and upload_size(file) > 0
    has_image = image is not None and upload_size(image) > 0

    if uploads_required and not has_file:
        errors["file"] = ["Required"]

    if uploads_required and not has_image:
        errors["image"] = ["Required"]
    elif has_image and not (image.content_type or "").startswith("image/"):
        errors["image"] = ["Must be an image"]

    data = None
    try:
        data = parse_form(ProductForm, form)
    except ValidationFailed as e:
        errors.update(e.field_errors)

    if errors:
        raise ValidationFailed("Invalid product", errors)
    return data


def create_product(
    session: Session,
    cache: ReadThroughCache,
    files: ProductFiles,
    form: Dict[str, Any],
    file: Optional[UploadFile],
    image: Optional[UploadFile],
) -> Product:
    data = _validate_product(form, file, image, uploads_required=True)

    product = Product(
        name=data.name,
        description=data.description,
        price_in_cents=data.price_in_cents,
        file_path=files.save_file(file),
        image_path=files.save_image(image),
        is_available_for_purchase=False,
    )
    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Product {product.id} created", extra={"product_id": product.id})
    cache.invalidate(PRODUCTS_TAG)
    return product


def update_product(
    session: Session,
    cache: ReadThroughCache,
    files: ProductFiles,
    product_id: str,
    form: Dict[str, Any],
    file: Optional[UploadFile] = None,
    image: Optional[UploadFile] = None,
) -> Product:
    product = get_product(session, product_id)
    data = _validate_product(form, file, image, uploads_required=False)

    if file is not None and upload_size(file) > 0:
        files.delete_file(product.file_path)
        product.file_path = files.save_file(file)

    if image is not None and upload_size(image) > 0:
        files.delete_image(product.image_path)
        product.image_path = files.save_image(image)

    product.name = data.name
    product.description = data.description
    product.price_in_cents = data.price_in_cents
    product.updated_at = utcnow()

    session.add(product)
    session.commit()
    session.refresh(product)

    logger.info(f"Product {product.id} updated", extra={"product_id": product.id})
    cache.invalidate(PRODUCTS_TAG)
    return product


def set_availability(
    session: Session,
    cache: ReadThroughCache,
    product_id: str,
    is_available: bool,
) -> Product:
    product = get_product(session, product_id)
    product.is_available_for_purchase = is_available
    product.updated_at = utcnow()

    session.add(product)
    session.commit()
    session.refresh(product)

    cache.invalidate(PRODUCTS_TAG)
    return product


def delete_product(
    session: Session,
    cache: ReadThroughCache,
    files: ProductFiles,
    product_id: str,
) -> Dict[str, Any]:
    product = get_product(session, product_id)

    order_count = session.exec(
        select(func.count(Order.id)).where(Order.product_id == product.id)
    ).one()
    if order_count > 0:
        raise ProductHasOrders("Product has orders and cannot be deleted")

    deleted = {"id": product.id, "name": product.name}
    file_path, image_path = product.file_path, product.image_path
    session.delete(product)
    session.commit()

    files.delete_file(file_path)
    files.delete_image(image_path)

    logger.info(f"Product {product_id} deleted", extra={"product_id": product_id})
    cache.invalidate(PRODUCTS_TAG)
    return deleted
