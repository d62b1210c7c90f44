"""Asset models.

An Asset is one media item attached to a product: an uploaded file or an
AI-generated image. It moves through a small state machine (see
``services/asset_lifecycle.py``); this module only holds the data shape and
the invariant that a saved asset always carries its backend id.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

# Scheme used for locally-scoped preview URLs. These are never durable.
LOCAL_URL_SCHEME = "blob:"


def is_local_url(url: Optional[str]) -> bool:
    """True if the URL only resolves inside the current editing session."""
    return bool(url) and url.startswith(LOCAL_URL_SCHEME)


class AssetType(str, Enum):
    image = "image"
    document = "document"
    video = "video"
    audio = "audio"
    other = "other"


class AssetStatus(str, Enum):
    """Lifecycle status of an asset."""

    pending = "pending"        # Chosen locally, upload in flight
    uploaded = "uploaded"      # Viewable locally, not durable
    generating = "generating"  # Image being produced
    error = "error"            # Reserved, no transition leads here
    saved = "saved"            # Persisted, has dbId


class AssetCategory(str, Enum):
    cover = "cover"
    chapter = "chapter"
    illustration = "illustration"
    diagram = "diagram"
    icon = "icon"
    uploaded = "uploaded"


DOCUMENT_MEDIA_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}


def asset_type_for(media_type: Optional[str]) -> AssetType:
    """Derive the asset type from a MIME type."""
    if not media_type:
        return AssetType.other
    major = media_type.split("/", 1)[0].lower()
    if major == "image":
        return AssetType.image
    if major == "video":
        return AssetType.video
    if major == "audio":
        return AssetType.audio
    if media_type in DOCUMENT_MEDIA_TYPES or major == "text":
        return AssetType.document
    return AssetType.other


class Asset(BaseModel):
    """A media item tracked by the asset lifecycle manager."""

    id: str = Field(description="Client-assigned id, stable for the session")
    dbId: Optional[str] = Field(default=None, description="Backend id, assigned once persisted")
    name: str
    type: AssetType = AssetType.image
    status: AssetStatus = AssetStatus.pending
    category: Optional[AssetCategory] = None
    prompt: Optional[str] = Field(default=None, description="Generation prompt for AI images")

    thumbnailUrl: Optional[str] = None
    fullUrl: Optional[str] = None
    url: Optional[str] = None
    storagePath: Optional[str] = None

    # Transient batch-save selection, never persisted
    isSelected: bool = False

    @model_validator(mode="after")
    def validate_saved_has_db_id(self) -> "Asset":
        """A saved asset must carry its backend id and only durable URLs."""
        if self.status != AssetStatus.saved:
            return self
        if not self.dbId:
            raise ValueError("dbId required when status is 'saved'")
        if any(is_local_url(url) for url in (self.url, self.thumbnailUrl, self.fullUrl)):
            raise ValueError("saved asset cannot have a local URL")
        return self

    @property
    def is_durable(self) -> bool:
        return self.dbId is not None

    @property
    def display_url(self) -> Optional[str]:
        """Best URL for showing the full asset."""
        return self.fullUrl or self.url or self.thumbnailUrl


class StoredAssetRecord(BaseModel):
    """What the storage backend returns after creating an asset."""

    id: str
    publicUrl: str
    thumbnailUrl: Optional[str] = None
    storagePath: str = ""
