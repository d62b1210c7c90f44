"""Unit tests for GridFS asset storage.

Tests cover:
- Stored files are removed when the asset record cannot be written
- Cleanup failures still surface the original storage error
"""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image
from pymongo.errors import PyMongoError

from product_studio.errors import AssetStorageError
from product_studio.services import asset_storage
from product_studio.services.asset_storage import COLLECTION_NAME, GridFSAssetStorage


def _png() -> bytes:
    output = io.BytesIO()
    Image.new("RGB", (800, 400), color=0).save(output, format="PNG")
    return output.getvalue()


@pytest.fixture
def bucket():
    bucket = MagicMock()
    bucket.upload_from_stream = AsyncMock(side_effect=["file-original", "file-thumb"])
    bucket.delete = AsyncMock()
    return bucket


@pytest.fixture
def failing_db(monkeypatch, bucket):
    collection = MagicMock()
    collection.insert_one = AsyncMock(side_effect=PyMongoError("write concern error"))
    db = {COLLECTION_NAME: collection}
    monkeypatch.setattr(asset_storage, "get_gridfs_bucket", AsyncMock(return_value=bucket))
    monkeypatch.setattr(asset_storage, "get_database", AsyncMock(return_value=db))
    return db


class TestRecordWriteFailure:
    """Tests for _store when insert_one fails after the bytes are uploaded."""

    @pytest.mark.asyncio
    async def test_document_file_is_removed(self, bucket, failing_db):
        storage = GridFSAssetStorage()

        with pytest.raises(AssetStorageError):
            await storage.create_from_file("product-1", "notes.pdf", b"%PDF", "application/pdf")

        bucket.delete.assert_awaited_once_with("file-original")

    @pytest.mark.asyncio
    async def test_image_and_thumbnail_are_removed(self, bucket, failing_db):
        storage = GridFSAssetStorage()

        with pytest.raises(AssetStorageError):
            await storage.create_from_file("product-1", "cover.png", _png(), "image/png")

        assert [call.args[0] for call in bucket.delete.await_args_list] == ["file-original", "file-thumb"]

    @pytest.mark.asyncio
    async def test_cleanup_failure_keeps_storage_error(self, bucket, failing_db, caplog):
        bucket.delete = AsyncMock(side_effect=PyMongoError("connection reset"))
        storage = GridFSAssetStorage()

        with pytest.raises(AssetStorageError) as exc_info:
            await storage.create_from_file("product-1", "notes.pdf", b"%PDF", "application/pdf")

        assert "write concern error" in str(exc_info.value)
        assert "Orphaned GridFS file file-original" in caplog.text
