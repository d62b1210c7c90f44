"""Integration tests for POST /api/products/{id}/generate.

The generation service is replaced by the fake from conftest, so these tests
cover the request flow: intent parsing, merge, checklist and persistence.
"""

import pytest
from httpx import AsyncClient

from product_studio.errors import GenerationServiceError
from product_studio.models import ChapterContent, GenerationIntent, GenerationResponse
from product_studio.services.generation_service import with_chapter_content


async def _create(client: AsyncClient, data: dict) -> str:
    response = await client.post("/api/products", json=data)
    return response.json()["data"]["id"]


def _fill_chapter(chapter_id: str, text: str):
    """Response callable that fills one chapter of the current outline."""

    def respond(product, request):
        outline = product.analysis.outline
        chapters = [
            with_chapter_content(chapter, ChapterContent(content=text, wordCount=120))
            if chapter.id == chapter_id
            else chapter
            for chapter in outline.chapters
        ]
        return GenerationResponse(outline=outline.model_copy(update={"chapters": chapters}))

    return respond


class TestGenerateOutline:
    """Tests for outline generation."""

    @pytest.mark.asyncio
    async def test_outline_merged_and_saved(
        self, client: AsyncClient, sample_product_data: dict, fake_generation, outline_response, mock_db
    ):
        fake_generation.responses[GenerationIntent.outline] = outline_response
        product_id = await _create(client, sample_product_data)

        response = await client.post(f"/api/products/{product_id}/generate", json={"type": "outline"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["outcome"]["status"] == "completed"
        assert data["notifications"][0]["title"] == "Generation Complete"
        chapters = data["product"]["analysis"]["outline"]["chapters"]
        assert [c["id"] for c in chapters] == ["c1", "c2"]

        stored = await mock_db["product_ideas"].find_one({"name": "My Guide"})
        assert len(stored["raw_analysis"]["outline"]["chapters"]) == 2

    @pytest.mark.asyncio
    async def test_invalid_type(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)

        response = await client.post(f"/api/products/{product_id}/generate", json={"type": "poem"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_GENERATION_TYPE"

    @pytest.mark.asyncio
    async def test_missing_type(self, client: AsyncClient, sample_product_data: dict):
        product_id = await _create(client, sample_product_data)

        response = await client.post(f"/api/products/{product_id}/generate", json={})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_service_failure(self, client: AsyncClient, sample_product_data: dict, fake_generation):
        fake_generation.responses[GenerationIntent.outline] = GenerationServiceError(
            "outline", "All AI providers failed"
        )
        product_id = await _create(client, sample_product_data)

        response = await client.post(f"/api/products/{product_id}/generate", json={"type": "outline"})

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "GENERATION_FAILED"

        view = (await client.get(f"/api/products/{product_id}")).json()["data"]
        assert view["product"]["analysis"]["outline"] is None
        assert view["generation"]["outline"] == "error"


class TestGenerateChapters:
    """Tests for chapter generation."""

    @pytest.mark.asyncio
    async def test_chapters_need_outline(self, client: AsyncClient, sample_product_data: dict, fake_generation):
        product_id = await _create(client, sample_product_data)

        response = await client.post(
            f"/api/products/{product_id}/generate", json={"type": "all-chapters"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PRECONDITION_FAILED"
        assert fake_generation.calls == []

    @pytest.mark.asyncio
    async def test_single_chapter(
        self, client: AsyncClient, sample_product_data: dict, fake_generation, outline_response
    ):
        fake_generation.responses[GenerationIntent.outline] = outline_response
        fake_generation.responses[GenerationIntent.chapter_content] = _fill_chapter("c1", "Hello chapter")
        product_id = await _create(client, sample_product_data)
        await client.post(f"/api/products/{product_id}/generate", json={"type": "outline"})

        response = await client.post(
            f"/api/products/{product_id}/generate",
            json={"type": "chapter-content", "chapterId": "c1", "chapterTitle": "Chapter c1"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        chapters = data["product"]["analysis"]["outline"]["chapters"]
        assert chapters[0]["content"] == "Hello chapter"
        assert chapters[1]["content"] is None
        assert data["chapterCompletion"] == 0.5
        assert data["checklist"]["contentComplete"] is False
        assert fake_generation.calls[-1].context["chapterId"] == "c1"

    @pytest.mark.asyncio
    async def test_unknown_chapter_skipped(
        self, client: AsyncClient, sample_product_data: dict, fake_generation, outline_response
    ):
        fake_generation.responses[GenerationIntent.outline] = outline_response
        product_id = await _create(client, sample_product_data)
        await client.post(f"/api/products/{product_id}/generate", json={"type": "outline"})

        response = await client.post(
            f"/api/products/{product_id}/generate",
            json={"type": "chapter-content", "chapterId": "c9", "chapterTitle": "Ghost"},
        )

        assert response.status_code == 400
        assert "c9" in response.json()["error"]["message"]
