"""Export checklist and user-facing notifications."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ExportChecklist(BaseModel):
    """Five independent readiness flags.

    Flags only ever go from False to True within a session; see
    ``services/checklist.py``.
    """

    contentComplete: bool = False
    structureComplete: bool = False
    assetsReady: bool = False
    pricingSet: bool = False
    previewReviewed: bool = False


class NotificationLevel(str, Enum):
    success = "success"
    info = "info"
    warning = "warning"
    error = "error"


class Notification(BaseModel):
    """User-facing outcome message for a session operation."""

    level: NotificationLevel
    title: str
    message: str

    @classmethod
    def success(cls, title: str, message: str) -> "Notification":
        return cls(level=NotificationLevel.success, title=title, message=message)

    @classmethod
    def info(cls, title: str, message: str) -> "Notification":
        return cls(level=NotificationLevel.info, title=title, message=message)

    @classmethod
    def warning(cls, title: str, message: str) -> "Notification":
        return cls(level=NotificationLevel.warning, title=title, message=message)

    @classmethod
    def error(cls, title: str, message: str) -> "Notification":
        return cls(level=NotificationLevel.error, title=title, message=message)
