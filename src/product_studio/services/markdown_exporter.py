"""Markdown export.

Chapter content is already Markdown-lite, so it is emitted verbatim with no
substitutions. Key takeaways and bonus content are not part of this format.
"""

from __future__ import annotations

from typing import assert_never

from product_studio.models import (
    ContentProduct,
    Product,
    ProductStructure,
    SoftwareProduct,
)


def render_markdown(product: Product) -> str:
    """Render a product as a Markdown document."""
    lines: list[str] = [f"# {product.name}", ""]

    outline = product.analysis.outline
    if outline is not None:
        for chapter in outline.chapters:
            lines.append(f"## {chapter.title}")
            lines.append("")
            if chapter.content:
                lines.append(chapter.content)
                lines.append("")

    structure = product.analysis.structure
    if structure is not None and structure.parts:
        lines.extend(_structure_lines(structure))

    lines.extend(_kind_lines(product))
    return "\n".join(lines).rstrip("\n") + "\n"


def _structure_lines(structure: ProductStructure) -> list[str]:
    lines = ["## Product Structure", ""]
    for part in structure.parts:
        lines.append(f"### {part.title}")
        lines.append("")
        if part.description:
            lines.append(part.description)
            lines.append("")
        for module in part.modules:
            lines.append(f"- {module.title}")
        if part.modules:
            lines.append("")
    return lines


def _kind_lines(product: Product) -> list[str]:
    if isinstance(product, ContentProduct):
        return []
    elif isinstance(product, SoftwareProduct):
        features = product.analysis.generatedFeatures or []
        if not features:
            return []
        return ["## Key Features", "", *(f"- {feature}" for feature in features), ""]
    else:
        assert_never(product)
