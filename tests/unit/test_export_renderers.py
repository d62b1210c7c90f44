"""Unit tests for the export renderer chain.

Tests cover:
- Filename sanitization
- HTML document sections (cover, TOC, placeholders, takeaways, bonus)
- Markdown emitting chapter content verbatim
- HTML vs Markdown divergence on the same chapter
- DOCX shaping per product kind and python-docx output
- Export outcomes on renderer failure
"""

import io

import pytest
from docx import Document

from product_studio.errors import ExportError
from product_studio.models import (
    Asset,
    AssetCategory,
    AssetStatus,
    BonusContent,
    Delivery,
    ExportFormat,
)
from product_studio.services.docx_generator import build_document_input, generate_docx
from product_studio.services.ebook_renderer import render_product_html
from product_studio.services.export_service import ExportService, export_filename
from product_studio.services.markdown_exporter import render_markdown


class FailingBuilder:
    def build(self, document):
        raise RuntimeError("collaborator crashed")


class EmptyBuilder:
    def build(self, document):
        return b""


@pytest.fixture
def product_with_content(make_product, make_outline):
    outline = make_outline(["c1", "c2"], {"c1": "**Bold** start\n\n- tip one\n- tip two"})
    outline.chapters[0].keyTakeaways = ["Remember this"]
    outline.bonus_content = [BonusContent(title="Launch Checklist", type="checklist")]
    return make_product(outline=outline)


@pytest.fixture
def cover_asset():
    return Asset(
        id="a1",
        dbId="db-1",
        name="Cover",
        status=AssetStatus.saved,
        category=AssetCategory.cover,
        fullUrl="https://assets.test/db-1",
    )


class TestExportFilename:
    """Tests for the download filename rule."""

    def test_example_from_product_name(self):
        assert export_filename("My Guide! 2.0", ExportFormat.html) == "my_guide__2_0.html"

    @pytest.mark.parametrize(
        "format,expected",
        [
            (ExportFormat.markdown, "ebook.md"),
            (ExportFormat.doc, "ebook.docx"),
            (ExportFormat.pdf, "ebook.pdf"),
        ],
    )
    def test_extensions(self, format, expected):
        assert export_filename("eBook", format) == expected

    def test_non_ascii_is_replaced(self):
        assert export_filename("Café", ExportFormat.html) == "caf_.html"


class TestHtmlRenderer:
    """Tests for the HTML document."""

    def test_cover_and_toc(self, product_with_content, cover_asset):
        html = render_product_html(product_with_content, [cover_asset])

        assert html.startswith("<!DOCTYPE html>")
        assert "<h1>My Guide</h1>" in html
        assert '<p class="tagline">Ship faster</p>' in html
        assert 'src="https://assets.test/db-1"' in html
        assert "Chapter 1: Chapter c1" in html
        assert "Chapter 2: Chapter c2" in html
        assert "Created with Product Studio" in html

    def test_unsaved_cover_is_not_used(self, product_with_content):
        local = Asset(
            id="a2",
            name="Draft cover",
            status=AssetStatus.uploaded,
            category=AssetCategory.cover,
            fullUrl="blob:http://localhost/abc",
        )
        assert "blob:" not in render_product_html(product_with_content, [local])

    def test_chapter_without_content_shows_description(self, product_with_content):
        html = render_product_html(product_with_content)
        assert '<p class="placeholder">About c2</p>' in html

    def test_takeaways_and_bonus(self, product_with_content):
        html = render_product_html(product_with_content)
        assert '<aside class="key-takeaways">' in html
        assert "<li>Remember this</li>" in html
        assert "Launch Checklist" in html

    def test_software_product_renders_parts_and_features(self, make_product, make_structure):
        product = make_product(
            product_type="saas",
            raw_analysis={"structure": make_structure().model_dump(), "generatedFeatures": ["Sync"]},
        )
        html = render_product_html(product)

        assert "Part 1: Foundations" in html
        assert "<h3>Setup" in html
        assert "<h2>Key Features</h2>" in html
        assert "<li>Sync</li>" in html

    def test_empty_product_placeholder(self, make_product):
        assert "No content has been generated yet." in render_product_html(make_product())


class TestMarkdownRenderer:
    """Tests for the Markdown document."""

    def test_content_is_verbatim(self, product_with_content):
        markdown = render_markdown(product_with_content)

        assert markdown.startswith("# My Guide\n")
        assert "## Chapter c1\n\n**Bold** start\n\n- tip one\n- tip two\n" in markdown
        assert "## Chapter c2\n" in markdown

    def test_takeaways_and_bonus_are_omitted(self, product_with_content):
        markdown = render_markdown(product_with_content)
        assert "Remember this" not in markdown
        assert "Launch Checklist" not in markdown

    def test_structure_section(self, make_product, make_structure):
        markdown = render_markdown(make_product(structure=make_structure()))
        assert "## Product Structure" in markdown
        assert "### Foundations" in markdown
        assert "- Setup\n- First Steps" in markdown

    def test_html_and_markdown_diverge(self, product_with_content):
        html = render_product_html(product_with_content)
        markdown = render_markdown(product_with_content)

        assert "<strong>Bold</strong> start" in html
        assert "<ul><li>tip one</li><li>tip two</li></ul>" in html
        assert "**Bold** start" in markdown
        assert "<strong>" not in markdown


class TestDocx:
    """Tests for DOCX shaping and generation."""

    def test_content_product_shaped_from_outline(self, product_with_content, cover_asset):
        document = build_document_input(product_with_content, [cover_asset])

        assert document.title == "My Guide"
        assert [c.heading for c in document.chapters] == ["1. Chapter c1", "2. Chapter c2"]
        assert document.asset_links == ["https://assets.test/db-1"]

    def test_software_product_shaped_from_structure(self, make_product, make_structure, make_outline):
        product = make_product(
            product_type="saas",
            raw_analysis={
                "outline": make_outline(["c1"]).model_dump(),
                "structure": make_structure().model_dump(),
                "generatedFeatures": ["Sync", "Share"],
            },
        )
        document = build_document_input(product)

        assert document.chapters[0].heading == "1. Foundations"
        assert [p.heading for p in document.chapters[0].parts] == ["1.1 Setup", "1.2 First Steps"]
        assert document.chapters[-1].heading == "2. Key Features"

    def test_python_docx_output(self, product_with_content):
        content = generate_docx(product_with_content)
        doc = Document(io.BytesIO(content))
        texts = [p.text for p in doc.paragraphs]

        assert "My Guide" in texts
        assert "1. Chapter c1" in texts
        assert "2. Chapter c2" in texts

    def test_builder_failure_becomes_export_error(self, product_with_content):
        with pytest.raises(ExportError) as exc_info:
            generate_docx(product_with_content, builder=FailingBuilder())
        assert exc_info.value.format == "doc"
        assert "collaborator crashed" in exc_info.value.message

    def test_empty_output_is_an_error(self, product_with_content):
        with pytest.raises(ExportError):
            generate_docx(product_with_content, builder=EmptyBuilder())


class TestExportService:
    """Tests for ExportService outcomes."""

    def test_doc_failure_yields_no_artifact(self, product_with_content):
        service = ExportService(document_builder=FailingBuilder())
        outcome = service.export(product_with_content, [], ExportFormat.doc)

        assert outcome.ok is False
        assert outcome.artifact is None
        assert "collaborator crashed" in outcome.error_message

    def test_html_artifact(self, product_with_content):
        outcome = ExportService().export(product_with_content, [], ExportFormat.html)

        assert outcome.ok
        assert outcome.artifact.filename == "my_guide.html"
        assert outcome.artifact.media_type == "text/html"
        assert outcome.artifact.delivery == Delivery.download

    def test_markdown_artifact(self, product_with_content):
        artifact = ExportService().render(product_with_content, [], ExportFormat.markdown)
        assert artifact.media_type == "text/markdown"
        assert artifact.content.decode("utf-8") == render_markdown(product_with_content)

    def test_pdf_is_print_view_of_the_html(self, product_with_content):
        artifact = ExportService().render(product_with_content, [], ExportFormat.pdf)

        assert artifact.delivery == Delivery.print
        assert artifact.filename == "my_guide.pdf"
        assert artifact.content.decode("utf-8") == render_product_html(product_with_content, [])
