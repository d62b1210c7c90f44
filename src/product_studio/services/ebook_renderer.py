"""Product document renderer.

Assembles a self-contained HTML document from a product and its assets:
cover, table of contents, one section per chapter (or per structure part),
bonus content and footer. The same document is the HTML export and the
print view.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, assert_never

from product_studio.models import (
    Asset,
    AssetCategory,
    Chapter,
    ContentOutline,
    ContentProduct,
    Module,
    Part,
    Product,
    ProductStructure,
    SoftwareProduct,
)
from product_studio.services.ebook_styles import get_document_styles
from product_studio.services.text_formatting import escape, format_content

logger = logging.getLogger(__name__)

FOOTER_TEXT = "Created with Product Studio"


class ProductDocumentRenderer:
    """Renders the export/print HTML for one product.

    Usage:
        html = ProductDocumentRenderer(product, assets).render()
    """

    def __init__(self, product: Product, assets: Iterable[Asset] = ()):
        self.product = product
        self.assets = list(assets)

    def render(self) -> str:
        """Complete HTML document with embedded CSS."""
        outline = self.product.analysis.outline
        structure = self.product.analysis.structure

        sections: list[str] = [self._build_cover()]
        if outline is not None and outline.chapters:
            sections.append(self._build_chapter_toc(outline))
            sections.extend(self._build_chapter(chapter) for chapter in outline.chapters)
        elif structure is not None and structure.parts:
            sections.append(self._build_part_toc(structure))
            sections.extend(
                self._build_part(index, part) for index, part in enumerate(structure.parts, start=1)
            )
        else:
            sections.append('<p class="placeholder">No content has been generated yet.</p>')

        sections.extend(self._build_kind_sections())

        if outline is not None and outline.bonus_content:
            sections.append(self._build_bonus(outline))

        sections.append(f"<footer>{escape(FOOTER_TEXT)}</footer>")
        return self._assemble_document("\n".join(sections))

    # -------------------------------------------------------------------------
    # Building blocks
    # -------------------------------------------------------------------------

    def _cover_image(self) -> Optional[Asset]:
        """First durable cover asset, if any."""
        for asset in self.assets:
            if asset.category == AssetCategory.cover and asset.is_durable and asset.display_url:
                return asset
        return None

    def _build_cover(self) -> str:
        title = escape(self.product.name)
        tagline = self.product.tagline
        tagline_html = f'<p class="tagline">{escape(tagline)}</p>' if tagline else ""

        image_html = ""
        cover = self._cover_image()
        if cover is not None:
            image_html = f'<img src="{escape(cover.display_url)}" alt="{escape(cover.name)}">'

        return f"""<header class="cover">
    <h1>{title}</h1>
    {tagline_html}
    {image_html}
</header>"""

    def _build_chapter_toc(self, outline: ContentOutline) -> str:
        items = "\n".join(
            f'<li><a href="#chapter-{chapter.number}">Chapter {chapter.number}: {escape(chapter.title)}</a></li>'
            for chapter in outline.chapters
        )
        return f"""<nav class="toc">
    <h2>Table of Contents</h2>
    <ol>
{items}
    </ol>
</nav>"""

    def _build_chapter(self, chapter: Chapter) -> str:
        heading = f"<h2>Chapter {chapter.number}: {escape(chapter.title)}</h2>"

        if chapter.is_complete:
            body = format_content(chapter.content)
        else:
            # Not generated yet: show what the chapter will cover
            body = f'<p class="placeholder">{escape(chapter.description)}</p>'

        takeaways = ""
        if chapter.keyTakeaways:
            items = "".join(f"<li>{escape(item)}</li>" for item in chapter.keyTakeaways)
            takeaways = f"""<aside class="key-takeaways">
    <h3>Key Takeaways</h3>
    <ul>{items}</ul>
</aside>"""

        return f"""<section class="chapter" id="chapter-{chapter.number}">
    {heading}
    {body}
    {takeaways}
</section>"""

    def _build_part_toc(self, structure: ProductStructure) -> str:
        items = "\n".join(
            f'<li><a href="#part-{index}">Part {index}: {escape(part.title)}</a></li>'
            for index, part in enumerate(structure.parts, start=1)
        )
        return f"""<nav class="toc">
    <h2>Table of Contents</h2>
    <ol>
{items}
    </ol>
</nav>"""

    def _build_part(self, index: int, part: Part) -> str:
        description = f"<p>{escape(part.description)}</p>" if part.description else ""
        modules = "\n".join(self._build_module(module) for module in part.modules)
        return f"""<section class="part" id="part-{index}">
    <h2>Part {index}: {escape(part.title)}</h2>
    {description}
    {modules}
</section>"""

    def _build_module(self, module: Module) -> str:
        duration = ""
        if module.duration_minutes:
            duration = f'<span class="duration">{module.duration_minutes} min</span>'

        objectives = ""
        if module.learning_objectives:
            items = "".join(f"<li>{escape(item)}</li>" for item in module.learning_objectives)
            objectives = f"<ul>{items}</ul>"

        content_items = ""
        if module.content_items:
            items = "".join(
                f"<li><strong>{escape(item.type.value.title())}:</strong> {escape(item.title)}</li>"
                for item in module.content_items
            )
            content_items = f"<ul>{items}</ul>"

        return f"""<div class="module">
    <h3>{escape(module.title)} {duration}</h3>
    {objectives}
    {content_items}
</div>"""

    def _build_kind_sections(self) -> list[str]:
        """Sections specific to the product shape."""
        product = self.product
        if isinstance(product, ContentProduct):
            return []
        elif isinstance(product, SoftwareProduct):
            features = product.analysis.generatedFeatures or []
            if not features:
                return []
            items = "".join(f"<li>{escape(feature)}</li>" for feature in features)
            return [
                f"""<section class="features">
    <h2>Key Features</h2>
    <ul>{items}</ul>
</section>"""
            ]
        else:
            assert_never(product)

    def _build_bonus(self, outline: ContentOutline) -> str:
        items = []
        for bonus in outline.bonus_content or []:
            description = f"<p>{escape(bonus.description)}</p>" if bonus.description else ""
            items.append(
                f"""<div class="bonus-item">
    <span class="bonus-type">{escape(bonus.type)}</span>
    <h3>{escape(bonus.title)}</h3>
    {description}
</div>"""
            )
        joined = "\n".join(items)
        return f"""<section class="bonus">
    <h2>Bonus Content</h2>
{joined}
</section>"""

    def _assemble_document(self, body: str) -> str:
        title = escape(self.product.name)
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>{get_document_styles()}</style>
</head>
<body>
{body}
</body>
</html>"""


def render_product_html(product: Product, assets: Iterable[Asset] = ()) -> str:
    """Convenience wrapper used by the export service and preview route."""
    return ProductDocumentRenderer(product, assets).render()
