from datetime import timedelta

from storefront.models.types import utcnow
from storefront.services.download_service import issue_download_token
from tests.factories import make_product


def test_live_token_downloads_file(client, app_db, settings):
    with app_db.session() as s:
        product = make_product(s, settings.products_dir, name="Clean Code", content=b"book bytes")
        token = issue_download_token(s, product.id)

    response = client.get(f"/products/download/{token}")

    assert response.status_code == 200
    assert response.content == b"book bytes"
    assert response.headers["content-disposition"] == 'attachment; filename="Clean Code.pdf"'
    assert response.headers["content-length"] == str(len(b"book bytes"))


def test_token_works_twice(client, app_db, settings):
    with app_db.session() as s:
        token = issue_download_token(s, make_product(s, settings.products_dir).id)

    assert client.get(f"/products/download/{token}").status_code == 200
    assert client.get(f"/products/download/{token}").status_code == 200


def test_expired_token_redirects(client, app_db, settings):
    with app_db.session() as s:
        product = make_product(s, settings.products_dir)
        token = issue_download_token(
            s, product.id, now=utcnow() - timedelta(hours=25), ttl_hours=24
        )

    response = client.get(f"/products/download/{token}", follow_redirects=False)

    assert response.status_code in (302, 307)
    assert response.headers["location"].endswith("/products/download/expired")


def test_unknown_token_redirects(client):
    response = client.get("/products/download/does-not-exist", follow_redirects=False)

    assert response.headers["location"].endswith("/products/download/expired")

    expired = client.get(response.headers["location"])
    assert expired.status_code == 200
    assert expired.json()["expired"] is True
