"""Response envelope helpers for consistent API responses."""

from typing import Any, Iterable, Optional

from pydantic import BaseModel

from product_studio.models import Notification, NotificationLevel


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str


class ApiResponse(BaseModel):
    """Standard API response envelope."""

    data: Any | None = None
    error: ErrorDetail | None = None


def success_response(data: Any) -> dict[str, Any]:
    """Create a success response envelope."""
    return {"data": data, "error": None}


def error_response(code: str, message: str) -> dict[str, Any]:
    """Create an error response envelope."""
    return {"data": None, "error": {"code": code, "message": message}}


def dump_notifications(notifications: Iterable[Notification]) -> list[dict[str, Any]]:
    return [notification.model_dump(mode="json") for notification in notifications]


def first_error(notifications: Iterable[Notification]) -> Optional[Notification]:
    """The first error-level notification, if any."""
    for notification in notifications:
        if notification.level == NotificationLevel.error:
            return notification
    return None
