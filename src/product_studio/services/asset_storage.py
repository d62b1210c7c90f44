"""GridFS-backed asset storage.

Stores asset bytes in the ``product_assets`` GridFS bucket (original plus a
thumbnail for images) and one record per asset in the ``product_assets``
collection. Public URLs point at the API's asset content route.

Generated images are fetched from their rendering URL and re-stored. When the
fetch fails the record is still created and keeps the external URL.
"""

from __future__ import annotations

import logging
import os
import uuid
from datetime import UTC, datetime
from typing import Any, Optional

import httpx
from pymongo.errors import PyMongoError

from product_studio import config
from product_studio.db.mongo import get_database, get_gridfs_bucket
from product_studio.errors import AssetDeleteError, AssetStorageError
from product_studio.models import StoredAssetRecord
from product_studio.services.image_utils import (
    can_thumbnail,
    compute_sha256,
    generate_thumbnail,
    normalize_media_type,
)

logger = logging.getLogger(__name__)

COLLECTION_NAME = "product_assets"
BUCKET_NAME = "product_assets"

IMAGE_FETCH_TIMEOUT_SECONDS = 30.0


def content_url(product_id: str, db_id: str, variant: str = "full") -> str:
    """Public URL of a stored asset's bytes."""
    return f"{config.PUBLIC_BASE_URL}/api/products/{product_id}/assets/{db_id}/content?size={variant}"


class GridFSAssetStorage:
    """Asset storage on MongoDB + GridFS.

    Usage:
        storage = GridFSAssetStorage()
        record = await storage.create_from_file(product_id, "cover.png", data, "image/png")
        await storage.delete(record.id)
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self._http_client = http_client

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    async def create_from_file(
        self,
        product_id: str,
        filename: str,
        content: bytes,
        media_type: str,
        category: Optional[str] = None,
    ) -> StoredAssetRecord:
        """Store uploaded bytes and create the asset record."""
        if len(content) > config.MAX_ASSET_FILE_SIZE:
            raise AssetStorageError(
                f"File '{filename}' exceeds the {config.MAX_ASSET_FILE_SIZE // (1024 * 1024)}MB limit"
            )
        media_type = normalize_media_type(media_type)
        try:
            return await self._store(
                product_id,
                name=filename,
                content=content,
                media_type=media_type,
                category=category,
                extra={"source": "upload"},
            )
        except PyMongoError as e:
            logger.error(f"Failed to store asset {filename} for {product_id}: {e}")
            raise AssetStorageError(f"Failed to save asset record: {e}") from e

    async def create_from_url(
        self,
        product_id: str,
        url: str,
        name: str,
        prompt: Optional[str] = None,
        category: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> StoredAssetRecord:
        """Fetch a remote image and store it, or record the URL if the fetch fails."""
        if not url:
            raise AssetStorageError("URL is required")

        try:
            content, media_type = await self._fetch(url)
        except httpx.HTTPError as e:
            logger.warning(f"Image download failed for {url}, keeping external URL: {e}")
            return await self._store_external(product_id, url, name, prompt, category, thumbnail_url)

        try:
            return await self._store(
                product_id,
                name=name,
                content=content,
                media_type=media_type,
                category=category,
                extra={"source": "generated", "prompt": prompt, "original_url": url},
            )
        except PyMongoError as e:
            logger.error(f"Failed to store generated image for {product_id}: {e}")
            raise AssetStorageError(f"Failed to save asset: {e}") from e

    async def _fetch(self, url: str) -> tuple[bytes, str]:
        if self._http_client is not None:
            response = await self._http_client.get(url, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=IMAGE_FETCH_TIMEOUT_SECONDS) as client:
                response = await client.get(url, follow_redirects=True)
        response.raise_for_status()
        media_type = normalize_media_type(response.headers.get("content-type") or "image/png")
        return response.content, media_type

    async def _store(
        self,
        product_id: str,
        name: str,
        content: bytes,
        media_type: str,
        category: Optional[str],
        extra: dict[str, Any],
    ) -> StoredAssetRecord:
        db_id = str(uuid.uuid4())
        bucket = await get_gridfs_bucket(BUCKET_NAME)
        file_metadata = {"product_id": product_id, "asset_id": db_id, "content_type": media_type}

        file_ids = [
            await bucket.upload_from_stream(
                f"{db_id}_original", content, metadata={**file_metadata, "variant": "original"}
            )
        ]
        try:
            thumbnail_url = None
            if can_thumbnail(media_type):
                try:
                    thumb_bytes, thumb_type = generate_thumbnail(content)
                except ValueError as e:
                    logger.warning(f"No thumbnail for {name}: {e}")
                else:
                    file_ids.append(
                        await bucket.upload_from_stream(
                            f"{db_id}_thumb",
                            thumb_bytes,
                            metadata={**file_metadata, "content_type": thumb_type, "variant": "thumb"},
                        )
                    )
                    thumbnail_url = content_url(product_id, db_id, "thumb")

            public_url = content_url(product_id, db_id, "full")
            storage_path = f"{product_id}/{db_id}{os.path.splitext(name)[1]}"

            db = await get_database()
            await db[COLLECTION_NAME].insert_one(
                {
                    "_id": db_id,
                    "product_id": product_id,
                    "name": name,
                    "category": category,
                    "storage_path": storage_path,
                    "url": public_url,
                    "thumbnail_url": thumbnail_url or public_url,
                    "mime_type": media_type,
                    "file_size": len(content),
                    "sha256": compute_sha256(content),
                    "metadata": {k: v for k, v in extra.items() if v is not None},
                    "created_at": datetime.now(UTC).isoformat(),
                }
            )
        except PyMongoError:
            await self._remove_files(bucket, db_id, file_ids)
            raise
        logger.info(f"Stored asset {name} ({len(content)} bytes) -> {db_id}")

        return StoredAssetRecord(
            id=db_id,
            publicUrl=public_url,
            thumbnailUrl=thumbnail_url or public_url,
            storagePath=storage_path,
        )

    async def _remove_files(self, bucket: Any, db_id: str, file_ids: list[Any]) -> None:
        """Drop GridFS files of an asset whose record was never written."""
        for file_id in file_ids:
            try:
                await bucket.delete(file_id)
            except PyMongoError as e:
                logger.error(f"Orphaned GridFS file {file_id} of asset {db_id} could not be deleted: {e}")

    async def _store_external(
        self,
        product_id: str,
        url: str,
        name: str,
        prompt: Optional[str],
        category: Optional[str],
        thumbnail_url: Optional[str],
    ) -> StoredAssetRecord:
        db_id = str(uuid.uuid4())
        try:
            db = await get_database()
            await db[COLLECTION_NAME].insert_one(
                {
                    "_id": db_id,
                    "product_id": product_id,
                    "name": name,
                    "category": category,
                    "storage_path": "",
                    "url": url,
                    "thumbnail_url": thumbnail_url or url,
                    "prompt": prompt,
                    "metadata": {"source": "external"},
                    "created_at": datetime.now(UTC).isoformat(),
                }
            )
        except PyMongoError as e:
            raise AssetStorageError(f"Failed to save asset: {e}") from e
        return StoredAssetRecord(id=db_id, publicUrl=url, thumbnailUrl=thumbnail_url or url)

    # -------------------------------------------------------------------------
    # Read / delete
    # -------------------------------------------------------------------------

    async def get_content(
        self, product_id: str, db_id: str, variant: str = "full"
    ) -> tuple[bytes, str] | None:
        """Stored bytes and media type, or None if missing or owned by another product."""
        storage_variant = "thumb" if variant == "thumb" else "original"
        bucket = await get_gridfs_bucket(BUCKET_NAME)
        db = await get_database()
        files = db[f"{BUCKET_NAME}.files"]

        doc = await files.find_one({"filename": f"{db_id}_{storage_variant}"})
        if doc is None and storage_variant == "thumb":
            doc = await files.find_one({"filename": f"{db_id}_original"})
        if doc is None:
            return None

        metadata = doc.get("metadata") or {}
        if metadata.get("product_id") != product_id:
            logger.warning(f"Product mismatch for asset {db_id}: {metadata.get('product_id')} != {product_id}")
            return None

        grid_out = await bucket.open_download_stream(doc["_id"])
        content = await grid_out.read()
        return content, metadata.get("content_type", "application/octet-stream")

    async def delete(self, db_id: str) -> None:
        """Delete the record and every stored file of an asset."""
        try:
            db = await get_database()
            bucket = await get_gridfs_bucket(BUCKET_NAME)
            cursor = db[f"{BUCKET_NAME}.files"].find({"metadata.asset_id": db_id}, {"_id": 1})
            async for doc in cursor:
                await bucket.delete(doc["_id"])
            result = await db[COLLECTION_NAME].delete_one({"_id": db_id})
        except PyMongoError as e:
            logger.error(f"Error deleting asset {db_id}: {e}")
            raise AssetDeleteError(f"Failed to delete asset: {e}", asset_id=db_id) from e

        if result.deleted_count == 0:
            logger.info(f"Asset record {db_id} already gone")
        else:
            logger.info(f"Deleted asset {db_id}")
