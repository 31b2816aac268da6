# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Local-disk storage for component images.

Files are written under ``settings.upload_dir`` with a random name and
served by the StaticFiles mount at /uploads (see main.py).  Only the
returned URL is stored in the database.

An upload is checked and held in memory by ``read_image``; nothing touches
the disk until the service calls ``ImageUpload.save`` for a row the caller
actually owns.
"""

import uuid
from dataclasses import dataclass
from pathlib import Path

from starlette.datastructures import UploadFile

from core.config import settings
from core.errors import ValidationError
from core.logger import logger

UPLOAD_URL_PREFIX = "/uploads"

_ALLOWED_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


def upload_root() -> Path:
    root = Path(settings.upload_dir)
    root.mkdir(parents=True, exist_ok=True)
    return root


@dataclass(frozen=True)
class ImageUpload:
    """A validated image that has not been written yet."""

    suffix: str
    content: bytes

    def save(self) -> str:
        """Write the image under a fresh name and return its public URL."""
        filename = f"{uuid.uuid4().hex}{self.suffix}"
        (upload_root() / filename).write_bytes(self.content)
        logger.info("image stored | file=%s bytes=%d", filename, len(self.content))
        return f"{UPLOAD_URL_PREFIX}/{filename}"


def delete_image(url: str) -> None:
    """Remove a file previously returned by ``ImageUpload.save``."""
    path = upload_root() / Path(url).name
    path.unlink(missing_ok=True)
    logger.info("image removed | file=%s", path.name)


async def read_image(upload: UploadFile) -> ImageUpload:
    """
    Read and check an uploaded image.

    Raises ``ValidationError`` for non-image uploads or files larger than
    ``settings.max_image_bytes``.
    """
    suffix = Path(upload.filename or "").suffix.lower()
    content_type = upload.content_type or ""
    if not content_type.startswith("image/") or suffix not in _ALLOWED_SUFFIXES:
        raise ValidationError("Invalid image", errors=["image must be a PNG, JPEG, GIF or WebP file"])

    raw = await upload.read()
    if len(raw) > settings.max_image_bytes:
        raise ValidationError("Invalid image", errors=["image is too large"])
    return ImageUpload(suffix=suffix, content=raw)
