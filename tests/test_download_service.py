from datetime import datetime, timedelta, timezone

from storefront.models.download_verification import DownloadVerification
from storefront.services.download_service import (
    ProductFile,
    issue_download_token,
    read_product_file,
    resolve_download,
)
from tests.factories import make_product

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def test_token_resolves_to_product_file(session, tmp_path):
    product = make_product(session, tmp_path, name="Clean Code", content=b"book bytes")
    token = issue_download_token(session, product.id, now=NOW, ttl_hours=24)

    file = resolve_download(session, token, now=NOW + timedelta(hours=23))

    assert file is not None
    assert file.path == product.file_path
    assert file.filename == "Clean Code.pdf"

    payload = read_product_file(file)
    assert payload.content == b"book bytes"
    assert payload.size == len(b"book bytes")


def test_token_expires_after_ttl(session, tmp_path):
    product = make_product(session, tmp_path)
    token = issue_download_token(session, product.id, now=NOW, ttl_hours=24)

    assert resolve_download(session, token, now=NOW + timedelta(hours=24)) is None


def test_token_can_be_used_more_than_once(session, tmp_path):
    product = make_product(session, tmp_path)
    token = issue_download_token(session, product.id, now=NOW, ttl_hours=24)

    assert resolve_download(session, token, now=NOW + timedelta(minutes=1)) is not None
    assert resolve_download(session, token, now=NOW + timedelta(minutes=2)) is not None
    assert session.get(DownloadVerification, token) is not None


def test_unknown_token_resolves_to_none(session, tmp_path):
    make_product(session, tmp_path)
    assert resolve_download(session, "not-a-token", now=NOW) is None


def test_tokens_are_distinct(session, tmp_path):
    product = make_product(session, tmp_path)
    tokens = {issue_download_token(session, product.id, now=NOW) for _ in range(5)}
    assert len(tokens) == 5


def test_filename_keeps_only_the_file_extension():
    assert ProductFile(path="products/v1.2/book.epub", name="Clean Code").filename == "Clean Code.epub"


def test_filename_without_extension_is_bare_name():
    assert ProductFile(path="products/v1.2/book", name="Clean Code").filename == "Clean Code"
