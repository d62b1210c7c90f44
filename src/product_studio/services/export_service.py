"""Export renderer chain.

Dispatches a format to its renderer and packages the result as an
``ExportArtifact``. A renderer either returns complete bytes or raises
``ExportError``; in the latter case the outcome carries no artifact.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from product_studio.errors import ExportError
from product_studio.models import (
    DOCX_MEDIA_TYPE,
    FORMAT_EXTENSIONS,
    Asset,
    Delivery,
    ExportArtifact,
    ExportFormat,
    ExportOutcome,
    Product,
)
from product_studio.services.docx_generator import DocumentBuilder, generate_docx
from product_studio.services.ebook_renderer import render_product_html
from product_studio.services.markdown_exporter import render_markdown
from product_studio.services.pdf_generator import PRINT_MEDIA_TYPE, render_print_document

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def export_filename(name: str, format: ExportFormat) -> str:
    """Download filename for a product name.

    Every character outside ``[a-zA-Z0-9]`` becomes ``_``, then the result
    is lowercased: ``"My Guide! 2.0"`` -> ``my_guide__2_0.html``.
    """
    return f"{_UNSAFE_FILENAME_CHARS.sub('_', name).lower()}.{FORMAT_EXTENSIONS[format]}"


class ExportService:
    """Renders a product in one of the export formats."""

    def __init__(self, document_builder: Optional[DocumentBuilder] = None):
        self.document_builder = document_builder

    def render(self, product: Product, assets: Iterable[Asset], format: ExportFormat) -> ExportArtifact:
        """Render one artifact.

        Raises:
            ExportError: If the renderer fails.
        """
        assets = list(assets)
        filename = export_filename(product.name, format)

        if format == ExportFormat.html:
            content = render_product_html(product, assets).encode("utf-8")
            return ExportArtifact(
                format=format, content=content, media_type="text/html", filename=filename
            )
        if format == ExportFormat.markdown:
            content = render_markdown(product).encode("utf-8")
            return ExportArtifact(
                format=format, content=content, media_type="text/markdown", filename=filename
            )
        if format == ExportFormat.doc:
            content = generate_docx(product, assets, self.document_builder)
            return ExportArtifact(
                format=format, content=content, media_type=DOCX_MEDIA_TYPE, filename=filename
            )
        if format == ExportFormat.pdf:
            content = render_print_document(render_product_html(product, assets))
            return ExportArtifact(
                format=format,
                content=content,
                media_type=PRINT_MEDIA_TYPE,
                filename=filename,
                delivery=Delivery.print,
            )
        raise ExportError(str(format), "unsupported format")

    def export(self, product: Product, assets: Iterable[Asset], format: ExportFormat) -> ExportOutcome:
        """Render and report; never raises for renderer failures."""
        try:
            artifact = self.render(product, assets, format)
        except ExportError as e:
            logger.warning(f"Export of {product.id} as {format.value} failed: {e}")
            return ExportOutcome(format=format, error_message=e.message)

        logger.info(f"Exported {product.id} as {artifact.filename} ({len(artifact.content)} bytes)")
        return ExportOutcome(format=format, artifact=artifact)
