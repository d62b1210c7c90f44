"""Image helpers for stored assets, built on Pillow."""

from __future__ import annotations

import hashlib
import io
import logging

from PIL import Image

logger = logging.getLogger(__name__)

THUMBNAIL_MAX_SIZE = 400
THUMBNAIL_QUALITY = 85

THUMBNAIL_MEDIA_TYPES = {"image/png", "image/jpeg", "image/webp", "image/gif"}

_FORMAT_MEDIA_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


def compute_sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def normalize_media_type(media_type: str | None) -> str:
    """Lowercase and canonicalize a MIME type ('image/jpg' -> 'image/jpeg')."""
    if not media_type:
        return "application/octet-stream"
    media_type = media_type.split(";", 1)[0].strip().lower()
    if media_type == "image/jpg":
        return "image/jpeg"
    return media_type


def can_thumbnail(media_type: str) -> bool:
    return normalize_media_type(media_type) in THUMBNAIL_MEDIA_TYPES


def generate_thumbnail(data: bytes, max_size: int = THUMBNAIL_MAX_SIZE) -> tuple[bytes, str]:
    """Shrink an image so its longest side is at most ``max_size``.

    Returns:
        Tuple of (thumbnail_bytes, media_type).

    Raises:
        ValueError: If ``data`` is not a readable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = (img.format or "PNG").upper()
            if fmt not in _FORMAT_MEDIA_TYPES:
                fmt = "PNG"

            thumb = img.copy()
            # thumbnail() keeps aspect ratio and never enlarges
            thumb.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

            if fmt == "JPEG" and thumb.mode not in ("RGB", "L"):
                thumb = thumb.convert("RGB")

            output = io.BytesIO()
            save_kwargs = {"quality": THUMBNAIL_QUALITY} if fmt in ("JPEG", "WEBP") else {}
            thumb.save(output, format=fmt, **save_kwargs)
            logger.debug(f"Thumbnail {img.size} -> {thumb.size} ({fmt})")
            return output.getvalue(), _FORMAT_MEDIA_TYPES[fmt]
    except Exception as e:
        raise ValueError(f"Cannot generate thumbnail: {e}") from e
