"""Word (.docx) export.

The product is first shaped into a flat ``DocumentInput``; a
``DocumentBuilder`` then turns that into bytes. The default builder uses
python-docx. Whatever goes wrong inside a builder surfaces as ``ExportError``
so the caller never receives a partial document.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol, assert_never

from docx import Document

from product_studio.errors import ExportError
from product_studio.models import (
    Asset,
    ContentOutline,
    ContentProduct,
    ExportFormat,
    Product,
    ProductStructure,
    SoftwareProduct,
)

logger = logging.getLogger(__name__)

_BLANK_LINES = re.compile(r"\n\s*\n")


@dataclass
class DocumentPart:
    heading: str
    content: Optional[str] = None


@dataclass
class DocumentChapter:
    heading: str
    content: Optional[str] = None
    parts: list[DocumentPart] = field(default_factory=list)


@dataclass
class DocumentInput:
    """Format-neutral view of a product for document builders."""

    title: str
    overview: Optional[str] = None
    chapters: list[DocumentChapter] = field(default_factory=list)
    asset_links: list[str] = field(default_factory=list)


class DocumentBuilder(Protocol):
    def build(self, document: DocumentInput) -> bytes: ...


# =============================================================================
# Shaping
# =============================================================================


def _chapters_from_outline(outline: ContentOutline) -> list[DocumentChapter]:
    chapters = []
    for i, chapter in enumerate(outline.chapters, start=1):
        parts = [
            DocumentPart(heading=f"{i}.{j} {section.title}")
            for j, section in enumerate(chapter.sections or [], start=1)
        ]
        chapters.append(
            DocumentChapter(heading=f"{i}. {chapter.title}", content=chapter.content, parts=parts)
        )
    return chapters


def _chapters_from_structure(structure: ProductStructure) -> list[DocumentChapter]:
    chapters = []
    for i, part in enumerate(structure.parts, start=1):
        modules = [
            DocumentPart(
                heading=f"{i}.{j} {module.title}",
                content="\n".join(module.learning_objectives) if module.learning_objectives else None,
            )
            for j, module in enumerate(part.modules, start=1)
        ]
        chapters.append(
            DocumentChapter(heading=f"{i}. {part.title}", content=part.description or None, parts=modules)
        )
    return chapters


def build_document_input(product: Product, assets: Iterable[Asset] = ()) -> DocumentInput:
    """Shape a product into the document builder's input."""
    outline = product.analysis.outline
    structure = product.analysis.structure

    if isinstance(product, ContentProduct):
        # Chapters lead; the structure is only a fallback
        if outline is not None and outline.chapters:
            chapters = _chapters_from_outline(outline)
        elif structure is not None:
            chapters = _chapters_from_structure(structure)
        else:
            chapters = []
        overview = product.description or None
    elif isinstance(product, SoftwareProduct):
        # The part/module tree leads; the outline is only a fallback
        if structure is not None and structure.parts:
            chapters = _chapters_from_structure(structure)
        elif outline is not None:
            chapters = _chapters_from_outline(outline)
        else:
            chapters = []
        overview = product.description or None
        features = product.analysis.generatedFeatures or []
        if features:
            chapters.append(
                DocumentChapter(heading=f"{len(chapters) + 1}. Key Features", content="\n".join(features))
            )
    else:
        assert_never(product)

    links = [asset.display_url for asset in assets if asset.is_durable and asset.display_url]
    return DocumentInput(
        title=product.name or "Untitled",
        overview=overview,
        chapters=chapters,
        asset_links=links,
    )


# =============================================================================
# python-docx builder
# =============================================================================


class PythonDocxBuilder:
    """Builds a .docx with python-docx."""

    def build(self, document: DocumentInput) -> bytes:
        doc = Document()
        doc.add_heading(document.title, level=0)

        if document.overview:
            doc.add_heading("Overview", level=1)
            doc.add_paragraph(document.overview)

        for chapter in document.chapters:
            doc.add_heading(chapter.heading, level=2)
            self._add_text(doc, chapter.content)
            for part in chapter.parts:
                doc.add_heading(part.heading, level=3)
                self._add_text(doc, part.content)

        if document.asset_links:
            doc.add_paragraph("Assets:")
            for link in document.asset_links:
                doc.add_paragraph(link, style="List Bullet")

        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def _add_text(doc, text: Optional[str]) -> None:
        if not text:
            return
        for block in _BLANK_LINES.split(text.strip()):
            if block.strip():
                doc.add_paragraph(block.strip())


def generate_docx(
    product: Product,
    assets: Iterable[Asset] = (),
    builder: Optional[DocumentBuilder] = None,
) -> bytes:
    """Render a product as .docx bytes.

    Raises:
        ExportError: If the builder fails or returns nothing.
    """
    builder = builder or PythonDocxBuilder()
    document = build_document_input(product, assets)
    try:
        content = builder.build(document)
    except ExportError:
        raise
    except Exception as e:
        logger.error(f"DOCX builder failed for product {product.id}: {e}")
        raise ExportError(ExportFormat.doc.value, str(e)) from e

    if not content:
        raise ExportError(ExportFormat.doc.value, "document builder returned no content")
    return content
