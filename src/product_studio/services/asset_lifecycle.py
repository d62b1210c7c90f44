"""Asset lifecycle manager.

Tracks every media item of one editing session through a small state
machine, independently of the content model:

    pending    -> saved      upload succeeded
    pending    -> uploaded   upload failed, local preview kept
    uploaded   -> saved      explicit save
    generating -> uploaded   AI image URLs ready
    any        -> removed    delete

``saved`` is terminal. The ``error`` status exists in the data model but no
edge leads to it.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from product_studio import config
from product_studio.errors import AssetDeleteError, AssetStorageError, InvalidAssetTransitionError
from product_studio.models import (
    LOCAL_URL_SCHEME,
    Asset,
    AssetCategory,
    AssetStatus,
    AssetType,
    StoredAssetRecord,
    asset_type_for,
)
from product_studio.services.image_generation import build_image_urls

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[AssetStatus, frozenset[AssetStatus]] = {
    AssetStatus.pending: frozenset({AssetStatus.saved, AssetStatus.uploaded}),
    AssetStatus.uploaded: frozenset({AssetStatus.saved}),
    AssetStatus.generating: frozenset({AssetStatus.uploaded}),
    AssetStatus.error: frozenset(),
    AssetStatus.saved: frozenset(),
}


def can_transition(current: AssetStatus, target: AssetStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class AssetStorage(Protocol):
    """Backend that makes assets durable.

    Implementations raise ``AssetStorageError`` on create failures and
    ``AssetDeleteError`` on delete failures.
    """

    async def create_from_file(
        self,
        product_id: str,
        filename: str,
        content: bytes,
        media_type: str,
        category: Optional[str] = None,
    ) -> StoredAssetRecord: ...

    async def create_from_url(
        self,
        product_id: str,
        url: str,
        name: str,
        prompt: Optional[str] = None,
        category: Optional[str] = None,
        thumbnail_url: Optional[str] = None,
    ) -> StoredAssetRecord: ...

    async def delete(self, db_id: str) -> None: ...


@dataclass
class _LocalFile:
    """Bytes of a chosen file, kept until the asset is saved."""

    filename: str
    content: bytes
    media_type: str


def new_local_url() -> str:
    """Session-scoped preview URL, never valid outside this process."""
    return f"{LOCAL_URL_SCHEME}{config.PUBLIC_BASE_URL}/{uuid.uuid4()}"


class AssetLifecycleManager:
    """Owns the asset list of one product for the life of a session."""

    def __init__(self, product_id: str, storage: AssetStorage):
        self.product_id = product_id
        self.storage = storage
        self._assets: dict[str, Asset] = {}
        self._local_files: dict[str, _LocalFile] = {}
        self._saving: set[str] = set()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def assets(self) -> list[Asset]:
        return list(self._assets.values())

    def get(self, asset_id: str) -> Optional[Asset]:
        return self._assets.get(asset_id)

    def durable_assets(self) -> list[Asset]:
        """Assets with a backend id, i.e. the ones that may be persisted."""
        return [asset for asset in self._assets.values() if asset.dbId]

    def has_ready_asset(self) -> bool:
        return any(asset.status == AssetStatus.saved for asset in self._assets.values())

    def local_file(self, asset_id: str) -> Optional[tuple[bytes, str]]:
        """Locally held bytes and media type of a not-yet-saved upload."""
        local = self._local_files.get(asset_id)
        if local is None:
            return None
        return local.content, local.media_type

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def _transition(self, asset: Asset, target: AssetStatus, **updates: Any) -> Asset:
        if not can_transition(asset.status, target):
            raise InvalidAssetTransitionError(asset.id, asset.status.value, target.value)
        data = asset.model_dump()
        data.update(updates)
        data["status"] = target
        moved = Asset.model_validate(data)
        logger.debug(f"Asset {asset.id}: {asset.status.value} -> {target.value}")
        return moved

    def _store(self, asset: Asset) -> Asset:
        self._assets[asset.id] = asset
        return asset

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def load(self, assets: list[Asset]) -> None:
        """Seed the manager with assets restored from the product record."""
        for asset in assets:
            if asset.dbId and asset.status != AssetStatus.saved:
                asset = asset.model_copy(update={"status": AssetStatus.saved})
            self._assets[asset.id] = asset

    async def add_upload(
        self,
        filename: str,
        content: bytes,
        media_type: str,
        category: AssetCategory = AssetCategory.uploaded,
    ) -> Asset:
        """Track a chosen file and try to upload it right away.

        The asset is never dropped: on upload failure it stays ``uploaded``
        with its local preview URL and can be saved later.
        """
        local_url = new_local_url()
        asset = self._store(
            Asset(
                id=str(uuid.uuid4()),
                name=filename,
                type=asset_type_for(media_type),
                status=AssetStatus.pending,
                category=category,
                url=local_url,
                thumbnailUrl=local_url,
                fullUrl=local_url,
            )
        )
        self._local_files[asset.id] = _LocalFile(filename, content, media_type)

        try:
            record = await self.storage.create_from_file(
                self.product_id, filename, content, media_type, category.value
            )
        except AssetStorageError as e:
            logger.warning(f"Upload of {filename} failed, keeping local preview: {e}")
            current = self._assets.get(asset.id)
            if current is None:
                return asset
            return self._store(self._transition(current, AssetStatus.uploaded))

        current = self._assets.get(asset.id)
        if current is None:
            logger.info(f"Asset {asset.id} removed during upload, deleting the stored copy")
            await self._discard_stored_copy(record)
            return asset
        self._local_files.pop(asset.id, None)
        return self._store(self._saved(current, record))

    def add_generated_image(
        self,
        prompt: str,
        category: AssetCategory = AssetCategory.illustration,
        name: Optional[str] = None,
    ) -> Asset:
        """Track an AI image. It is viewable immediately but not durable."""
        urls = build_image_urls(prompt)
        generating = Asset(
            id=str(uuid.uuid4()),
            name=name or "Generated Image",
            type=AssetType.image,
            status=AssetStatus.generating,
            category=category,
            prompt=prompt,
        )
        ready = self._transition(
            generating,
            AssetStatus.uploaded,
            thumbnailUrl=urls.thumbnail_url,
            fullUrl=urls.full_url,
            url=urls.full_url,
        )
        return self._store(ready)

    async def save_to_storage(self, asset_id: str) -> Optional[Asset]:
        """Make one asset durable.

        Already-saved assets, assets whose save or initial upload is still in
        flight, and unknown ids are left alone. A storage failure leaves the
        asset unchanged and re-raises ``AssetStorageError``.
        """
        asset = self._assets.get(asset_id)
        if asset is None:
            return None
        if asset.status == AssetStatus.saved or asset.status == AssetStatus.pending:
            return asset
        if asset_id in self._saving:
            return asset

        self._saving.add(asset_id)
        try:
            local = self._local_files.get(asset_id)
            if local is not None:
                record = await self.storage.create_from_file(
                    self.product_id,
                    local.filename,
                    local.content,
                    local.media_type,
                    asset.category.value if asset.category else None,
                )
            else:
                record = await self.storage.create_from_url(
                    self.product_id,
                    asset.fullUrl or asset.url or "",
                    asset.name,
                    prompt=asset.prompt,
                    category=asset.category.value if asset.category else None,
                    thumbnail_url=asset.thumbnailUrl,
                )
        finally:
            self._saving.discard(asset_id)

        current = self._assets.get(asset_id)
        if current is None:
            logger.info(f"Asset {asset_id} removed during save, deleting the stored copy")
            await self._discard_stored_copy(record)
            return None
        self._local_files.pop(asset_id, None)
        saved = self._store(self._saved(current, record))
        logger.info(f"Saved asset {asset_id} as {record.id}")
        return saved

    async def _discard_stored_copy(self, record: StoredAssetRecord) -> None:
        """Delete a backend copy nothing in the session points to any more."""
        try:
            await self.storage.delete(record.id)
        except AssetDeleteError as e:
            logger.error(f"Orphaned stored asset {record.id} could not be deleted: {e}")

    def _saved(self, asset: Asset, record: StoredAssetRecord) -> Asset:
        return self._transition(
            asset,
            AssetStatus.saved,
            dbId=record.id,
            url=record.publicUrl,
            fullUrl=record.publicUrl,
            thumbnailUrl=record.thumbnailUrl or record.publicUrl,
            storagePath=record.storagePath,
            isSelected=False,
        )

    async def delete_asset(self, asset_id: str) -> bool:
        """Remove an asset, deleting its backend copy first if it has one.

        The local entry is only removed after the backend confirms. An
        ``AssetDeleteError`` propagates with the asset still tracked.
        """
        asset = self._assets.get(asset_id)
        if asset is None:
            return False
        if asset.dbId:
            await self.storage.delete(asset.dbId)
        self._assets.pop(asset_id, None)
        self._local_files.pop(asset_id, None)
        logger.info(f"Deleted asset {asset_id}")
        return True

    def set_selected(self, asset_id: str, selected: bool) -> bool:
        """Toggle batch-save selection. Saved assets cannot be selected."""
        asset = self._assets.get(asset_id)
        if asset is None or asset.status == AssetStatus.saved:
            return False
        self._assets[asset_id] = asset.model_copy(update={"isSelected": selected})
        return True

    async def save_selected(self) -> int:
        """Save every selected, not-yet-saved asset.

        A failing asset is logged and skipped. Returns how many were saved.
        """
        selected = [
            asset.id
            for asset in self._assets.values()
            if asset.isSelected and asset.status != AssetStatus.saved
        ]
        saved_count = 0
        for asset_id in selected:
            try:
                result = await self.save_to_storage(asset_id)
            except AssetStorageError as e:
                logger.warning(f"Batch save skipped asset {asset_id}: {e}")
                continue
            if result is not None and result.status == AssetStatus.saved:
                saved_count += 1
        return saved_count

    def clear(self) -> None:
        """Drop all assets and local files."""
        self._assets.clear()
        self._local_files.clear()
        self._saving.clear()
