"""Signed payment webhooks end to end through the HTTP surface."""

import hashlib
import hmac
import json

from sqlmodel import select

from storefront.models.discount_code import DiscountCode, DiscountCodeType
from storefront.models.download_verification import DownloadVerification
from storefront.models.order import Order
from tests.factories import make_discount_code, make_product


def _order_paid(product_id, *, email="reader@example.com", discount_code_id="", amount=1000):
    notes = {"product_id": product_id, "discount_code_id": discount_code_id, "email": email}
    return {
        "entity": "event",
        "event": "order.paid",
        "payload": {
            "payment": {
                "entity": {
                    "id": "pay_test_1",
                    "amount": amount,
                    "currency": "USD",
                    "status": "captured",
                    "email": email,
                    "notes": notes,
                }
            },
            "order": {
                "entity": {
                    "id": "order_test_1",
                    "amount_paid": amount,
                    "notes": notes,
                    "status": "paid",
                }
            },
        },
    }


def _post(client, event, secret):
    return _post_raw(client, json.dumps(event).encode("utf-8"), secret)


def _post_raw(client, body, secret):
    signature = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return client.post(
        "/webhooks/razorpay",
        content=body,
        headers={"Content-Type": "application/json", "X-Razorpay-Signature": signature},
    )


def test_paid_event_records_order(client, app_db, mailer, settings):
    with app_db.session() as s:
        product = make_product(s, settings.products_dir, price_in_cents=1000)
        code = make_discount_code(s, discount_type=DiscountCodeType.FIXED, discount_amount=2)
        product_id, code_id = product.id, code.id

    response = _post(client, _order_paid(product_id, discount_code_id=code_id, amount=800), settings.razorpay_webhook_secret)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"

    with app_db.session() as s:
        orders = s.exec(select(Order)).all()
        assert len(orders) == 1
        assert orders[0].id == body["order_id"]
        assert orders[0].price_paid_in_cents == 800
        assert s.get(DiscountCode, code_id).uses == 1
        assert len(s.exec(select(DownloadVerification)).all()) == 1

    assert [m["subject"] for m in mailer.sent] == ["Order Confirmation"]


def test_bad_signature_is_rejected(client, app_db, settings):
    with app_db.session() as s:
        product_id = make_product(s, settings.products_dir).id

    response = _post(client, _order_paid(product_id), secret="not-the-secret")

    assert response.status_code == 400
    with app_db.session() as s:
        assert s.exec(select(Order)).all() == []


def test_missing_signature_is_rejected(client, app_db, settings):
    with app_db.session() as s:
        product_id = make_product(s, settings.products_dir).id

    body = json.dumps(_order_paid(product_id)).encode("utf-8")
    response = client.post("/webhooks/razorpay", content=body)

    assert response.status_code == 400


def test_other_events_are_acknowledged_and_ignored(client, app_db, settings):
    response = _post(client, {"event": "payment.failed", "payload": {}}, settings.razorpay_webhook_secret)

    assert response.status_code == 200
    assert response.json() == {"status": "ignored"}
    with app_db.session() as s:
        assert s.exec(select(Order)).all() == []


def test_unknown_product_is_bad_request(client, app_db, mailer, settings):
    response = _post(client, _order_paid("missing"), settings.razorpay_webhook_secret)

    assert response.status_code == 400
    assert mailer.sent == []


def test_receipt_failure_still_acknowledges(client, app_db, mailer, settings):
    with app_db.session() as s:
        product_id = make_product(s, settings.products_dir).id
    mailer.deliver = False

    response = _post(client, _order_paid(product_id), settings.razorpay_webhook_secret)

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_events_are_refused_when_no_secret_is_configured(client, app_db, gateway, mailer, settings):
    with app_db.session() as s:
        product_id = make_product(s, settings.products_dir).id
    gateway.webhook_secret = ""

    # signed with the empty key, which anyone can compute
    response = _post(client, _order_paid(product_id), "")

    assert response.status_code == 400
    with app_db.session() as s:
        assert s.exec(select(Order)).all() == []
    assert mailer.sent == []


def test_signed_body_that_is_not_an_object_is_rejected(client, settings):
    response = _post_raw(client, b"[]", settings.razorpay_webhook_secret)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Malformed webhook event"


def test_signed_body_that_is_not_json_is_rejected(client, settings):
    response = _post_raw(client, b"order.paid", settings.razorpay_webhook_secret)

    assert response.status_code == 400


def test_signed_body_that_is_not_utf8_is_rejected(client, settings):
    response = _post_raw(client, b"\xff\xfe{}", settings.razorpay_webhook_secret)

    assert response.status_code == 400


def test_null_payment_entity_is_bad_request(client, app_db, mailer, settings):
    event = {"event": "order.paid", "payload": {"payment": None, "order": None}}

    response = _post(client, event, settings.razorpay_webhook_secret)

    assert response.status_code == 400
    assert mailer.sent == []


def test_non_integer_amount_is_rejected(client, app_db, settings):
    with app_db.session() as s:
        product_id = make_product(s, settings.products_dir).id
    event = _order_paid(product_id)
    event["payload"]["payment"]["entity"]["amount"] = "800"
    event["payload"]["order"]["entity"]["amount_paid"] = "800"

    response = _post(client, event, settings.razorpay_webhook_secret)

    assert response.status_code == 400
    with app_db.session() as s:
        assert s.exec(select(Order)).all() == []


def test_payer_email_is_stored_normalized(client, app_db, mailer, settings):
    with app_db.session() as s:
        product_id = make_product(s, settings.products_dir).id

    response = _post(client, _order_paid(product_id, email="Reader@Example.COM"), settings.razorpay_webhook_secret)
    assert response.status_code == 200

    history = client.post("/orders/history", json={"email": "Reader@Example.COM"})
    assert history.status_code == 200
    assert [m["subject"] for m in mailer.sent] == ["Order Confirmation", "Order History"]


def test_non_string_product_note_is_bad_request(client, settings):
    event = _order_paid("ignored")
    event["payload"]["payment"]["entity"]["notes"]["product_id"] = {"id": 1}
    event["payload"]["order"]["entity"]["notes"]["product_id"] = {"id": 1}

    response = _post(client, event, settings.razorpay_webhook_secret)

    assert response.status_code == 400
