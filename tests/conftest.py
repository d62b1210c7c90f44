"""Pytest fixtures for testing."""

import asyncio
from collections.abc import AsyncGenerator, Callable
from typing import Any, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from product_studio.api.dependencies import get_asset_storage, get_generation_service
from product_studio.api.main import app
from product_studio.db import mongo
from product_studio.errors import AssetDeleteError, AssetStorageError, GenerationServiceError
from product_studio.models import (
    Chapter,
    ContentOutline,
    GenerationRequest,
    GenerationResponse,
    Part,
    Module,
    Product,
    ProductStructure,
    StoredAssetRecord,
    parse_product,
)
from product_studio.services.session import SessionStore, set_session_store


# =============================================================================
# Fakes
# =============================================================================


class FakeAssetStorage:
    """In-memory asset storage with switchable failures.

    With a ``gate`` every create waits for the event before storing.
    """

    def __init__(self):
        self.records: dict[str, dict[str, Any]] = {}
        self.fail_create = False
        self.fail_delete = False
        self.deleted: list[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()

    def _record(self, product_id: str, name: str, content: bytes, media_type: str) -> StoredAssetRecord:
        if self.fail_create:
            raise AssetStorageError("Storage unavailable")
        db_id = f"db-{len(self.records) + 1}"
        self.records[db_id] = {
            "product_id": product_id,
            "name": name,
            "content": content,
            "media_type": media_type,
        }
        return StoredAssetRecord(
            id=db_id,
            publicUrl=f"https://assets.test/{db_id}",
            thumbnailUrl=f"https://assets.test/{db_id}?size=thumb",
            storagePath=f"product_assets/{db_id}_original",
        )

    async def create_from_file(self, product_id, filename, content, media_type, category=None):
        await self._wait()
        return self._record(product_id, filename, content, media_type)

    async def create_from_url(self, product_id, url, name, prompt=None, category=None, thumbnail_url=None):
        await self._wait()
        return self._record(product_id, name, url.encode(), "image/jpeg")

    async def delete(self, db_id: str) -> None:
        if self.fail_delete:
            raise AssetDeleteError("Failed to delete asset", asset_id=db_id)
        self.records.pop(db_id, None)
        self.deleted.append(db_id)

    async def get_content(self, product_id, db_id, variant="full"):
        record = self.records.get(db_id)
        if record is None or record["product_id"] != product_id:
            return None
        return record["content"], record["media_type"]


class FakeGenerationService:
    """Generation service returning canned responses per intent.

    A response may be a ``GenerationResponse``, an exception to raise, or a
    callable ``(product, request) -> GenerationResponse``. With a ``gate``
    every call waits for the event before answering.
    """

    def __init__(self, responses: Optional[dict] = None, gate: Optional[asyncio.Event] = None):
        self.responses = responses or {}
        self.gate = gate
        self.calls: list[GenerationRequest] = []

    async def generate(self, product: Product, request: GenerationRequest) -> GenerationResponse:
        self.calls.append(request)
        if self.gate is not None:
            await self.gate.wait()
        result = self.responses.get(request.intent)
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(product, request)
        if result is None:
            raise GenerationServiceError(request.intent.value, "No response configured")
        return result


# =============================================================================
# Builders
# =============================================================================


def build_outline(chapter_ids: list[str], contents: Optional[dict[str, str]] = None) -> ContentOutline:
    contents = contents or {}
    return ContentOutline(
        title="Test Guide",
        chapters=[
            Chapter(
                id=chapter_id,
                number=position,
                title=f"Chapter {chapter_id}",
                description=f"About {chapter_id}",
                keyPoints=[f"{chapter_id} point"],
                content=contents.get(chapter_id),
            )
            for position, chapter_id in enumerate(chapter_ids, start=1)
        ],
    )


def build_structure() -> ProductStructure:
    return ProductStructure(
        type="course",
        parts=[
            Part(
                id="part1",
                title="Foundations",
                description="Getting started",
                modules=[Module(id="mod1", title="Setup"), Module(id="mod2", title="First Steps")],
            )
        ],
    )


def build_product(
    product_type: str = "ebook",
    name: str = "My Guide",
    outline: Optional[ContentOutline] = None,
    structure: Optional[ProductStructure] = None,
    **fields: Any,
) -> Product:
    analysis: dict[str, Any] = {"targetAudience": "Busy founders"}
    if outline is not None:
        analysis["outline"] = outline.model_dump()
    if structure is not None:
        analysis["structure"] = structure.model_dump()
    data = {
        "id": "665f1c2e8b3a4d0012345678",
        "name": name,
        "tagline": "Ship faster",
        "product_type": product_type,
        "raw_analysis": analysis,
    }
    data.update(fields)
    return parse_product(data)


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Factory for product variants."""
    return build_product


@pytest.fixture
def make_outline() -> Callable[..., ContentOutline]:
    """Factory for outlines: ``make_outline(["c1", "c2"], {"c1": "text"})``."""
    return build_outline


@pytest.fixture
def make_structure() -> Callable[[], ProductStructure]:
    return build_structure


@pytest.fixture
def fake_storage() -> FakeAssetStorage:
    return FakeAssetStorage()


@pytest.fixture
def fake_generation() -> FakeGenerationService:
    return FakeGenerationService()


@pytest.fixture
def make_generation_service() -> Callable[..., FakeGenerationService]:
    return FakeGenerationService


# =============================================================================
# Database and HTTP client
# =============================================================================


@pytest_asyncio.fixture
async def mock_db() -> AsyncGenerator[Any, None]:
    """Provide a mock MongoDB database for testing."""
    # Create mock client
    mock_client = AsyncMongoMockClient()
    mock_database = mock_client[mongo.DATABASE_NAME]

    # Replace the real client with mock
    mongo.set_client(mock_client)

    yield mock_database

    # Cleanup
    mongo.set_client(None)


@pytest_asyncio.fixture
async def client(
    mock_db: Any,
    fake_storage: FakeAssetStorage,
    fake_generation: FakeGenerationService,
) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client with fake storage and generation."""
    set_session_store(SessionStore())
    app.dependency_overrides[get_asset_storage] = lambda: fake_storage
    app.dependency_overrides[get_generation_service] = lambda: fake_generation

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    set_session_store(None)


@pytest.fixture
def sample_product_data() -> dict[str, Any]:
    """Sample product data for testing."""
    return {
        "name": "My Guide",
        "product_type": "ebook",
        "tagline": "Ship faster",
        "targetAudience": "Busy founders",
    }


@pytest.fixture
def outline_response() -> GenerationResponse:
    return GenerationResponse(outline=build_outline(["c1", "c2"]))
