"""AI image URL builder.

The remote renderer produces the image on first fetch of a URL that embeds
the prompt, so "generating" an image only means building its URLs. Nothing
is awaited and nothing is polled.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, urlencode

from product_studio import config

THUMBNAIL_SIZE = (400, 300)
FULL_SIZE = (1024, 768)


@dataclass(frozen=True)
class GeneratedImageUrls:
    thumbnail_url: str
    full_url: str


def build_image_url(prompt: str, width: int, height: int, base_url: str | None = None) -> str:
    """Rendering URL for ``prompt`` at the given size."""
    base = (base_url or config.IMAGE_GENERATION_BASE_URL).rstrip("/")
    query = urlencode({"width": width, "height": height, "nologo": "true"})
    return f"{base}/{quote(prompt.strip(), safe='')}?{query}"


def build_image_urls(prompt: str, base_url: str | None = None) -> GeneratedImageUrls:
    """Thumbnail and full-size URLs for one prompt.

    Raises:
        ValueError: If the prompt is blank.
    """
    if not prompt or not prompt.strip():
        raise ValueError("Prompt is required")
    return GeneratedImageUrls(
        thumbnail_url=build_image_url(prompt, *THUMBNAIL_SIZE, base_url=base_url),
        full_url=build_image_url(prompt, *FULL_SIZE, base_url=base_url),
    )
