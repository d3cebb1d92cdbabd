import logging
import os
from uuid import uuid4

from fastapi import UploadFile
from slugify import slugify

logger = logging.getLogger(__name__)


def _stored_name(filename: str) -> str:
    stem, dot, ext = (filename or "upload").rpartition(".")
    if not dot:
        stem, ext = ext, "bin"
    return f"{uuid4()}-{slugify(stem) or 'file'}.{ext.lower()}"


def save_upload(upload: UploadFile, directory: str, subdir: str = "") -> str:
    """Write an upload under ``directory`` and return its path relative to it,
    prefixed with ``subdir`` when given."""
    relative = os.path.join(subdir, _stored_name(upload.filename)) if subdir else _stored_name(upload.filename)
    full_path = os.path.join(directory, relative)
    os.makedirs(os.path.dirname(full_path), exist_ok=True)

    upload.file.seek(0)
    with open(full_path, "wb") as f:
        f.write(upload.file.read())

    logger.info(f"Stored upload {upload.filename} at {full_path}")
    return relative


def delete_file(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        logger.warning(f"File already gone: {path}")


def upload_size(upload: UploadFile) -> int:
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


class ProductFiles:
    """Product downloads live under ``products_dir`` (never served directly);
    preview images live under ``public_dir`` and are served as static files."""

    def __init__(self, products_dir: str, public_dir: str):
        self.products_dir = products_dir
        self.public_dir = public_dir
        os.makedirs(products_dir, exist_ok=True)
        os.makedirs(os.path.join(public_dir, "products"), exist_ok=True)

    def save_file(self, upload: UploadFile) -> str:
        return os.path.join(self.products_dir, save_upload(upload, self.products_dir))

    def save_image(self, upload: UploadFile) -> str:
        return save_upload(upload, self.public_dir, subdir="products")

    def delete_file(self, file_path: str) -> None:
        delete_file(file_path)

    def delete_image(self, image_path: str) -> None:
        delete_file(os.path.join(self.public_dir, image_path))
