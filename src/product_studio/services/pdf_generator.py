"""Print-ready export and server-side PDF capture.

The print artifact is the HTML document itself: it is handed to the print
boundary, which opens it in a browser where the user prints or saves it as
PDF. The API additionally offers capturing that same HTML to PDF bytes with
WeasyPrint.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

# Lazy import WeasyPrint: it needs cairo/pango, which may not be installed
if TYPE_CHECKING:
    from weasyprint import HTML  # noqa: F401

from product_studio.errors import ExportError
from product_studio.models import ExportFormat

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
PRINT_MEDIA_TYPE = "text/html"


def render_print_document(html_content: str) -> bytes:
    """Encode the print view. Identical to the HTML export payload."""
    if not html_content:
        raise ExportError(ExportFormat.pdf.value, "nothing to print")
    return html_content.encode("utf-8")


def _write_pdf_sync(html_content: str) -> bytes:
    """Synchronous WeasyPrint conversion. Runs in a worker thread."""
    from weasyprint import HTML

    return HTML(string=html_content, base_url=".").write_pdf()


async def capture_pdf(html_content: str) -> bytes:
    """Convert the print view to PDF bytes.

    Raises:
        ExportError: If WeasyPrint is unavailable or the conversion fails.
    """
    try:
        pdf_bytes = await asyncio.to_thread(_write_pdf_sync, html_content)
    except ImportError as e:
        raise ExportError(ExportFormat.pdf.value, f"PDF capture unavailable: {e}") from e
    except Exception as e:
        logger.error(f"PDF capture failed: {e}")
        raise ExportError(ExportFormat.pdf.value, str(e)) from e

    if not pdf_bytes:
        raise ExportError(ExportFormat.pdf.value, "PDF capture produced no output")
    logger.info(f"Captured PDF ({len(pdf_bytes)} bytes)")
    return pdf_bytes
