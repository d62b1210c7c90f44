"""Content model: the product's document tree and its merge rules.

Only ``apply_outline`` and ``apply_structure`` replace a subtree wholesale.
Everything else is a targeted merge that leaves sibling data untouched.
Each merge builds the replacement object first and swaps it in with a
single assignment, so no partially-merged state is ever observable.
"""

from __future__ import annotations

import logging
from typing import Optional

from product_studio.models import (
    Chapter,
    ChapterContent,
    ContentOutline,
    Product,
    ProductStructure,
)

logger = logging.getLogger(__name__)


class ContentModel:
    """Holds a product's outline and structure and applies generation results.

    Usage:
        model = ContentModel(product)
        model.apply_outline(outline)
        model.apply_chapter_content("ch1", ChapterContent(content="..."))
        model.chapter_completion_ratio()
    """

    def __init__(self, product: Product):
        self.product = product
        self._detached = False

    @property
    def outline(self) -> Optional[ContentOutline]:
        return self.product.analysis.outline

    @property
    def structure(self) -> Optional[ProductStructure]:
        return self.product.analysis.structure

    @property
    def is_detached(self) -> bool:
        return self._detached

    def detach(self) -> None:
        """Stop accepting merges. Called when the owning session closes."""
        self._detached = True

    def _accepting(self, operation: str) -> bool:
        if self._detached:
            logger.info(f"Dropping late {operation} merge for closed product {self.product.id}")
            return False
        return True

    # -------------------------------------------------------------------------
    # Merges
    # -------------------------------------------------------------------------

    def apply_outline(self, outline: ContentOutline) -> bool:
        """Replace the entire outline."""
        if not self._accepting("outline"):
            return False
        self.product.analysis.outline = outline
        logger.debug(f"Applied outline with {len(outline.chapters)} chapters to {self.product.id}")
        return True

    def apply_structure(self, structure: ProductStructure) -> bool:
        """Replace the entire structure."""
        if not self._accepting("structure"):
            return False
        self.product.analysis.structure = structure
        return True

    def apply_chapter_content(self, chapter_id: str, content: ChapterContent) -> bool:
        """Merge generated-content fields into one chapter.

        Leaves title, description and keyPoints untouched. Returns False
        (no-op) if there is no outline or no chapter with this id, which can
        happen when the outline was regenerated while the request was in
        flight.
        """
        if not self._accepting("chapter-content"):
            return False

        outline = self.outline
        if outline is None:
            logger.info(f"No outline for chapter merge {chapter_id}, ignoring")
            return False

        index = _chapter_index(outline, chapter_id)
        if index is None:
            logger.info(f"Chapter {chapter_id} not in current outline, ignoring merge")
            return False

        merged = outline.chapters[index].model_copy(
            update={
                "content": content.content,
                "wordCount": content.wordCount,
                "readingTimeMinutes": content.readingTimeMinutes,
                # Replace, never accumulate, so repeated merges are idempotent
                "keyTakeaways": list(content.keyTakeaways),
            }
        )
        chapters = list(outline.chapters)
        chapters[index] = merged
        self.product.analysis.outline = outline.model_copy(update={"chapters": chapters})
        return True

    def apply_outline_estimates(self, word_count: int, total_pages: int) -> bool:
        """Merge outline-level size estimates produced by an all-chapters run."""
        if not self._accepting("outline-estimates"):
            return False
        outline = self.outline
        if outline is None:
            return False
        self.product.analysis.outline = outline.model_copy(
            update={
                "estimated_word_count": word_count,
                "estimated_total_pages": total_pages,
            }
        )
        return True

    # -------------------------------------------------------------------------
    # Derived queries
    # -------------------------------------------------------------------------

    def chapters(self) -> list[Chapter]:
        return list(self.outline.chapters) if self.outline else []

    def chapter_completion_ratio(self) -> float:
        """Completed chapters / total chapters (0.0 when there are none)."""
        chapters = self.chapters()
        if not chapters:
            return 0.0
        completed = sum(1 for chapter in chapters if chapter.is_complete)
        return completed / len(chapters)

    def all_chapters_complete(self) -> bool:
        chapters = self.chapters()
        return bool(chapters) and all(chapter.is_complete for chapter in chapters)

    def has_structure(self) -> bool:
        return self.structure is not None and bool(self.structure.parts)


def _chapter_index(outline: ContentOutline, chapter_id: str) -> Optional[int]:
    for index, chapter in enumerate(outline.chapters):
        if chapter.id == chapter_id:
            return index
    return None
