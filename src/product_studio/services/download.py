"""Delivery boundaries and the post-download follow-up.

``FileDownloadBoundary`` saves an artifact as a file. ``PrintBoundary`` opens
the print view in a browser tab and always schedules removal of its temp
file, whether or not the user ever prints. ``finalize_download`` turns the
download result plus the best-effort "mark completed" update into
notifications.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import webbrowser
from pathlib import Path
from typing import Optional, Protocol

from product_studio import config
from product_studio.errors import DeliveryError, PopupBlockedError
from product_studio.models import ExportArtifact, Notification, ProductStatus

logger = logging.getLogger(__name__)


class FileDownloadBoundary:
    """Writes artifacts into a downloads directory."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory is not None else config.DOWNLOADS_DIR

    def deliver(self, artifact: ExportArtifact) -> Path:
        """Write the artifact atomically and return its path.

        Raises:
            DeliveryError: If the file cannot be written.
        """
        target = self.directory / artifact.filename
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".download-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(artifact.content)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write {target}: {e}")
            raise DeliveryError(f"Could not save {artifact.filename}: {e}") from e

        logger.info(f"Downloaded {artifact.filename} to {target}")
        return target


class PrintBoundary:
    """Opens the print view in a new browser tab.

    The temp file backing the tab is removed after ``ttl_seconds`` on every
    path, including a failed open.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, opener=None):
        self.ttl_seconds = config.PRINT_HANDLE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._opener = opener or (lambda url: webbrowser.open(url, new=2))
        self._pending: set[Path] = set()

    @property
    def pending_files(self) -> set[Path]:
        return set(self._pending)

    def deliver(self, artifact: ExportArtifact) -> Path:
        """Open the artifact for printing.

        Must be called from a running event loop, which owns the cleanup.

        Raises:
            PopupBlockedError: If no browser tab could be opened.
        """
        fd, tmp_name = tempfile.mkstemp(suffix=".html", prefix="print-")
        path = Path(tmp_name)
        with os.fdopen(fd, "wb") as f:
            f.write(artifact.content)
        self._pending.add(path)
        asyncio.get_running_loop().call_later(self.ttl_seconds, self._cleanup, path)

        try:
            opened = self._opener(path.as_uri())
        except webbrowser.Error as e:
            raise PopupBlockedError(f"Print window was blocked: {e}") from e
        if not opened:
            raise PopupBlockedError()

        logger.info(f"Opened print view for {artifact.filename}")
        return path

    def _cleanup(self, path: Path) -> None:
        self._pending.discard(path)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove print file {path}: {e}")


class ProductStatusUpdater(Protocol):
    async def update_status(self, product_id: str, status: ProductStatus) -> None: ...


async def finalize_download(
    download_succeeded: bool,
    repository: ProductStatusUpdater,
    product_id: str,
) -> list[Notification]:
    """Report the download and mark the product completed.

    The status update is attempted even when the download failed. Its failure
    is only a warning when the user already has the file.
    """
    notifications: list[Notification] = []
    if download_succeeded:
        notifications.append(
            Notification.success("Download Complete", "Your product has been downloaded.")
        )

    try:
        await repository.update_status(product_id, ProductStatus.completed)
    except Exception as e:
        logger.warning(f"Failed to mark product {product_id} completed: {e}")
        if download_succeeded:
            notifications.append(
                Notification.warning(
                    "Downloaded",
                    "Downloaded successfully, but failed to mark product as completed.",
                )
            )
        else:
            notifications.append(
                Notification.error(
                    "Download Failed",
                    "Failed to download or update product. Please try again.",
                )
            )
    return notifications
