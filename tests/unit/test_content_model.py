"""Unit tests for the content model merge rules.

Tests cover:
- Chapter completion ratio (the c1/c2 scenario)
- Idempotent chapter merges
- Merge isolation from sibling chapters and non-content fields
- Wholesale outline/structure replacement
- Detached models dropping late merges
"""

import pytest
from pydantic import ValidationError

from product_studio.models import Chapter, ChapterContent, ContentOutline
from product_studio.services.content_model import ContentModel


@pytest.fixture
def model(make_product, make_outline):
    return ContentModel(make_product(outline=make_outline(["c1", "c2"])))


class TestChapterCompletion:
    """Tests for derived completion queries."""

    def test_ratio_is_zero_without_outline(self, make_product):
        model = ContentModel(make_product())
        assert model.chapter_completion_ratio() == 0.0
        assert model.all_chapters_complete() is False

    def test_half_complete_after_one_merge(self, model):
        """Outline c1/c2, content merged into c1 only."""
        model.apply_chapter_content("c1", ChapterContent(content="X"))

        assert model.chapter_completion_ratio() == 0.5
        assert model.outline.find_chapter("c2").content is None
        assert model.all_chapters_complete() is False

    def test_blank_content_does_not_count(self, model):
        model.apply_chapter_content("c1", ChapterContent(content="   \n"))
        assert model.chapter_completion_ratio() == 0.0

    def test_all_complete(self, model):
        model.apply_chapter_content("c1", ChapterContent(content="one"))
        model.apply_chapter_content("c2", ChapterContent(content="two"))
        assert model.all_chapters_complete() is True


class TestChapterMerge:
    """Tests for apply_chapter_content."""

    def test_merge_is_idempotent(self, model):
        content = ChapterContent(
            content="Body", wordCount=800, readingTimeMinutes=4, keyTakeaways=["a", "b"]
        )
        model.apply_chapter_content("c1", content)
        once = model.outline.model_dump()
        model.apply_chapter_content("c1", content)

        assert model.outline.model_dump() == once
        assert model.outline.find_chapter("c1").keyTakeaways == ["a", "b"]

    def test_merge_leaves_other_fields_untouched(self, model):
        before_c2 = model.outline.find_chapter("c2").model_dump()
        before_c1 = model.outline.find_chapter("c1")

        model.apply_chapter_content("c1", ChapterContent(content="Body", wordCount=700))

        after_c1 = model.outline.find_chapter("c1")
        assert model.outline.find_chapter("c2").model_dump() == before_c2
        assert after_c1.title == before_c1.title
        assert after_c1.description == before_c1.description
        assert after_c1.keyPoints == before_c1.keyPoints
        assert after_c1.wordCount == 700

    def test_unknown_chapter_is_noop(self, model):
        before = model.outline.model_dump()
        assert model.apply_chapter_content("c9", ChapterContent(content="X")) is False
        assert model.outline.model_dump() == before

    def test_no_outline_is_noop(self, make_product):
        model = ContentModel(make_product())
        assert model.apply_chapter_content("c1", ChapterContent(content="X")) is False

    def test_outline_estimates_merge(self, model):
        model.apply_outline_estimates(1200, 5)
        assert model.outline.estimated_word_count == 1200
        assert model.outline.estimated_total_pages == 5
        assert len(model.outline.chapters) == 2


class TestWholesaleReplace:
    """Tests for outline and structure replacement."""

    def test_apply_outline_replaces_chapters(self, model, make_outline):
        model.apply_chapter_content("c1", ChapterContent(content="X"))
        model.apply_outline(make_outline(["n1"]))

        assert [c.id for c in model.chapters()] == ["n1"]
        assert model.chapter_completion_ratio() == 0.0

    def test_apply_structure(self, model, make_structure):
        assert model.has_structure() is False
        model.apply_structure(make_structure())
        assert model.has_structure() is True
        assert model.outline is not None

    def test_chapter_numbers_must_match_position(self):
        with pytest.raises(ValidationError):
            ContentOutline(
                title="Bad",
                chapters=[Chapter(id="a", number=2, title="A")],
            )


class TestDetach:
    """Tests for closed sessions."""

    def test_detached_model_drops_merges(self, model, make_outline):
        model.detach()

        assert model.apply_chapter_content("c1", ChapterContent(content="late")) is False
        assert model.apply_outline(make_outline(["z"])) is False
        assert model.outline.find_chapter("c1").content is None
