import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session, select

from storefront.config import settings
from storefront.models.download_verification import DownloadVerification
from storefront.models.product import Product
from storefront.models.types import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductFile:
    path: str
    name: str

    @property
    def filename(self) -> str:
        extension = os.path.splitext(os.path.basename(self.path))[1]
        return f"{self.name}{extension}"


@dataclass(frozen=True)
class FilePayload:
    content: bytes
    size: int
    filename: str


def new_download_verification(
    product_id: str,
    now: Optional[datetime] = None,
    ttl_hours: Optional[int] = None,
) -> DownloadVerification:
    now = now or utcnow()
    ttl_hours = ttl_hours if ttl_hours is not None else settings.download_link_ttl_hours

    return DownloadVerification(
        product_id=product_id,
        expire_at=now + timedelta(hours=ttl_hours),
        created_at=now,
    )


def issue_download_token(
    session: Session,
    product_id: str,
    now: Optional[datetime] = None,
    ttl_hours: Optional[int] = None,
) -> str:
    """Create a verification row and return its id as the download token."""
    verification = new_download_verification(product_id, now, ttl_hours)
    session.add(verification)
    session.commit()
    session.refresh(verification)

    return verification.id


def resolve_download(
    session: Session,
    token_id: str,
    now: Optional[datetime] = None,
) -> Optional[ProductFile]:
    """Return the product file for a live token, ``None`` when expired or unknown.

    The token is left untouched and keeps working until it expires.
    """
    now = now or utcnow()

    product = session.exec(
        select(Product)
        .join(DownloadVerification, DownloadVerification.product_id == Product.id)
        .where(DownloadVerification.id == token_id)
        .where(DownloadVerification.expire_at > now)
    ).first()

    if product is None:
        logger.info(f"Download token {token_id} expired or unknown")
        return None

    return ProductFile(path=product.file_path, name=product.name)


def product_file(product: Product) -> ProductFile:
    return ProductFile(path=product.file_path, name=product.name)


def read_product_file(file: ProductFile) -> FilePayload:
    size = os.stat(file.path).st_size
    with open(file.path, "rb") as f:
        content = f.read()

    return FilePayload(content=content, size=size, filename=file.filename)
