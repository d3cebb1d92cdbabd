"""Timestamps are stored and read back as timezone-aware UTC."""

from datetime import datetime, timedelta, timezone

from storefront.models.discount_code import DiscountCode
from storefront.models.product import Product
from storefront.schemas.discount_code_schemas import DiscountCodeCreate
from tests.factories import make_discount_code, make_product


def test_defaults_are_aware_after_reload(db, tmp_path):
    with db.session() as s:
        product_id = make_product(s, tmp_path).id

    with db.session() as s:
        product = s.get(Product, product_id)
        assert product.created_at.tzinfo is not None
        assert product.created_at.utcoffset() == timedelta(0)


def test_offset_is_converted_to_utc(db):
    plus_two = timezone(timedelta(hours=2))
    with db.session() as s:
        code_id = make_discount_code(s, expires_at=datetime(2026, 10, 19, 14, 0, tzinfo=plus_two)).id

    with db.session() as s:
        expires_at = s.get(DiscountCode, code_id).expires_at
    assert expires_at == datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    assert expires_at.tzinfo == timezone.utc


def test_naive_value_is_taken_as_utc(db):
    with db.session() as s:
        code_id = make_discount_code(s, expires_at=datetime(2026, 10, 19, 12, 0)).id

    with db.session() as s:
        expires_at = s.get(DiscountCode, code_id).expires_at
    assert expires_at == datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_admin_expiry_without_offset_becomes_utc():
    data = DiscountCodeCreate(
        code="LAUNCH",
        discount_amount=10,
        discount_type="PERCENTAGE",
        all_products=True,
        expires_at="2030-01-01T00:00:00",
    )
    assert data.expires_at == datetime(2030, 1, 1, tzinfo=timezone.utc)
