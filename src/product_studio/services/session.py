"""Editing sessions.

An ``EditingSession`` owns everything one product needs while it is being
built: the content model, the asset lifecycle manager, the generation
orchestrator and the export checklist. Its methods run a component
operation and turn the outcome into user-facing notifications.

Sessions live in an in-memory store keyed by product id. They are lost on
server restart; the product record itself is saved after every change that
affects it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol

from pymongo.errors import PyMongoError

from product_studio.errors import (
    AssetDeleteError,
    AssetStorageError,
    DeliveryError,
    PopupBlockedError,
    ProductStudioError,
)
from product_studio.models import (
    Asset,
    AssetCategory,
    AssetStatus,
    Delivery,
    ExportChecklist,
    ExportFormat,
    ExportOutcome,
    GenerationIntent,
    GenerationOutcome,
    GenerationOutcomeStatus,
    Notification,
    Product,
    ProductStatus,
    UpdateProductRequest,
)
from product_studio.services import checklist as checklist_gate
from product_studio.services import product_service
from product_studio.services.asset_lifecycle import AssetLifecycleManager, AssetStorage
from product_studio.services.content_model import ContentModel
from product_studio.services.download import (
    FileDownloadBoundary,
    PrintBoundary,
    finalize_download,
)
from product_studio.services.export_service import ExportService
from product_studio.services.generation_service import GenerationService
from product_studio.services.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

INTENT_LABELS: dict[GenerationIntent, str] = {
    GenerationIntent.outline: "Outline",
    GenerationIntent.structure: "Structure",
    GenerationIntent.chapter_content: "Chapter content",
    GenerationIntent.all_chapters: "All chapters",
}


class ProductRepository(Protocol):
    async def save_product(self, product: Product, assets: Optional[Iterable[Asset]] = None) -> Product: ...

    async def update_status(self, product_id: str, status: ProductStatus) -> None: ...


class EditingSession:
    """Aggregate for one product being edited.

    Usage:
        session = EditingSession(product, LLMGenerationService(), GridFSAssetStorage())
        outcome, notifications = await session.generate(GenerationIntent.outline)
        outcome, notifications = await session.export(ExportFormat.html)
        session.close()
    """

    def __init__(
        self,
        product: Product,
        generation_service: GenerationService,
        asset_storage: AssetStorage,
        repository: ProductRepository = product_service,
        export_service: Optional[ExportService] = None,
        file_boundary: Optional[FileDownloadBoundary] = None,
        print_boundary: Optional[PrintBoundary] = None,
        pricing_enabled: Optional[bool] = None,
    ):
        self.model = ContentModel(product)
        self.assets = AssetLifecycleManager(product.id, asset_storage)
        self.assets.load(list(product.analysis.assets))
        self.repository = repository
        self.export_service = export_service or ExportService()
        self.file_boundary = file_boundary or FileDownloadBoundary()
        self.print_boundary = print_boundary or PrintBoundary()
        self.pricing_enabled = pricing_enabled

        self.checklist: ExportChecklist = checklist_gate.new_checklist(pricing_enabled)
        checklist_gate.record_content(self.checklist, self.model)
        checklist_gate.record_structure(self.checklist, self.model)
        checklist_gate.record_assets(self.checklist, self.assets.assets)
        checklist_gate.record_pricing(self.checklist, product.price_point, pricing_enabled)

        self.orchestrator = GenerationOrchestrator(self.model, generation_service, self.checklist)
        self._closed = False

    @property
    def product(self) -> Product:
        return self.model.product

    @property
    def product_id(self) -> str:
        return self.model.product.id

    @property
    def is_closed(self) -> bool:
        return self._closed

    def is_export_ready(self) -> bool:
        return checklist_gate.is_export_ready(self.checklist)

    def view(self) -> dict[str, Any]:
        """JSON-ready state of the session."""
        return {
            "product": self.product.model_dump(mode="json", exclude={"analysis": {"assets"}}),
            "assets": [asset.model_dump(mode="json") for asset in self.assets.assets],
            "checklist": self.checklist.model_dump(mode="json"),
            "exportReady": self.is_export_ready(),
            "chapterCompletion": self.model.chapter_completion_ratio(),
            "generation": {
                intent.value: status.value for intent, status in self.orchestrator.statuses().items()
            },
        }

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    async def save(self) -> Product:
        """Write the full product snapshot, with durable assets only."""
        return await self.repository.save_product(self.product, self.assets.durable_assets())

    async def _save_quietly(self, notifications: list[Notification], done: str) -> None:
        if self._closed:
            # Assets were cleared on close
            logger.info(f"Session for {self.product_id} is closed, not saving")
            return
        try:
            await self.save()
        except (ProductStudioError, PyMongoError) as e:
            logger.error(f"Failed to save product {self.product_id}: {e}")
            notifications.append(
                Notification.warning("Not Saved", f"{done}, but failed to save your changes.")
            )

    async def update_status(self, product_id: str, status: ProductStatus) -> None:
        """Persist a status change and mirror it on the session's product."""
        await self.repository.update_status(product_id, status)
        self.product.status = status

    # -------------------------------------------------------------------------
    # Product details and checklist
    # -------------------------------------------------------------------------

    async def update_details(self, request: UpdateProductRequest) -> list[Notification]:
        product = self.product
        product.name = request.name
        product.tagline = request.tagline
        product.description = request.description
        product.notes = request.notes
        product.price_point = request.price_point
        checklist_gate.record_pricing(self.checklist, product.price_point, self.pricing_enabled)

        notifications: list[Notification] = []
        await self._save_quietly(notifications, "Details updated")
        if not notifications:
            notifications.append(Notification.success("Saved", "Product details saved."))
        return notifications

    async def set_price(self, price_point: Optional[str]) -> list[Notification]:
        self.product.price_point = price_point
        priced = checklist_gate.record_pricing(self.checklist, price_point, self.pricing_enabled)
        notifications: list[Notification] = []
        await self._save_quietly(notifications, "Price updated")
        if not priced:
            notifications.append(
                Notification.warning("Price Not Set", "Enter a price greater than zero, e.g. $12.")
            )
        return notifications

    def mark_preview_reviewed(self) -> ExportChecklist:
        checklist_gate.record_preview_reviewed(self.checklist)
        return self.checklist

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    async def generate(
        self,
        intent: GenerationIntent,
        context: Optional[dict] = None,
    ) -> tuple[GenerationOutcome, list[Notification]]:
        """Run a generation intent and save the product when it merged."""
        label = INTENT_LABELS[intent]
        outcome = await self.orchestrator.generate(intent, context)
        notifications: list[Notification] = []

        if outcome.status == GenerationOutcomeStatus.completed:
            message = f"{label} generated."
            if outcome.stats is not None:
                message = (
                    f"Generated {outcome.stats.chaptersGenerated} chapters "
                    f"({outcome.stats.totalWordCount} words)."
                )
            notifications.append(Notification.success("Generation Complete", message))
            await self._save_quietly(notifications, f"{label} generated")
        elif outcome.status == GenerationOutcomeStatus.failed:
            notifications.append(
                Notification.error(
                    "Generation Failed",
                    f"Failed to generate {label.lower()}: {outcome.message}",
                )
            )
        elif outcome.status == GenerationOutcomeStatus.skipped:
            notifications.append(Notification.warning("Cannot Generate", outcome.message or ""))
        else:
            notifications.append(Notification.info("Please Wait", outcome.message or ""))
        return outcome, notifications

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------

    def _record_assets(self) -> None:
        checklist_gate.record_assets(self.checklist, self.assets.assets)

    async def upload_asset(
        self,
        filename: str,
        content: bytes,
        media_type: str,
        category: AssetCategory = AssetCategory.uploaded,
    ) -> tuple[Asset, list[Notification]]:
        asset = await self.assets.add_upload(filename, content, media_type, category)
        notifications: list[Notification] = []
        if asset.status == AssetStatus.saved:
            self._record_assets()
            notifications.append(Notification.success("Uploaded", f"{filename} was uploaded."))
            await self._save_quietly(notifications, f"{filename} was uploaded")
        else:
            notifications.append(
                Notification.warning(
                    "Upload Failed",
                    f"{filename} is kept in this session only. Save it to try again.",
                )
            )
        return asset, notifications

    def generate_image(
        self,
        prompt: str,
        category: AssetCategory = AssetCategory.illustration,
        name: Optional[str] = None,
    ) -> tuple[Optional[Asset], list[Notification]]:
        try:
            asset = self.assets.add_generated_image(prompt, category, name)
        except ValueError as e:
            return None, [Notification.error("Image Generation Failed", str(e))]
        return asset, [Notification.info("Image Ready", "Save the image to keep it with your product.")]

    async def save_asset(self, asset_id: str) -> tuple[Optional[Asset], list[Notification]]:
        try:
            asset = await self.assets.save_to_storage(asset_id)
        except AssetStorageError as e:
            return self.assets.get(asset_id), [Notification.error("Save Failed", e.message)]
        if asset is None:
            return None, [Notification.error("Save Failed", "Asset not found.")]
        if asset.status != AssetStatus.saved:
            return asset, [Notification.info("Please Wait", "This asset is still being uploaded.")]

        self._record_assets()
        notifications = [Notification.success("Asset Saved", f"{asset.name} was saved.")]
        await self._save_quietly(notifications, f"{asset.name} was saved")
        return asset, notifications

    def set_selected(self, asset_id: str, selected: bool) -> bool:
        return self.assets.set_selected(asset_id, selected)

    async def save_selected(self) -> tuple[int, list[Notification]]:
        requested = sum(
            1
            for asset in self.assets.assets
            if asset.isSelected and asset.status != AssetStatus.saved
        )
        if requested == 0:
            return 0, [Notification.info("Nothing Selected", "Select assets to save first.")]

        saved = await self.assets.save_selected()
        if saved == 0:
            return 0, [Notification.error("Save Failed", "None of the selected assets could be saved.")]

        self._record_assets()
        if saved < requested:
            notifications = [Notification.warning("Partially Saved", f"Saved {saved} of {requested} assets.")]
        else:
            notifications = [Notification.success("Assets Saved", f"Saved {saved} assets.")]
        await self._save_quietly(notifications, f"Saved {saved} assets")
        return saved, notifications

    async def delete_asset(self, asset_id: str) -> tuple[bool, list[Notification]]:
        asset = self.assets.get(asset_id)
        try:
            deleted = await self.assets.delete_asset(asset_id)
        except AssetDeleteError as e:
            return False, [Notification.error("Delete Failed", e.message)]
        if not deleted:
            return False, [Notification.error("Delete Failed", "Asset not found.")]

        notifications = [Notification.success("Deleted", f"{asset.name} was deleted.")]
        if asset.dbId:
            await self._save_quietly(notifications, f"{asset.name} was deleted")
        return True, notifications

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def render_export(self, format: ExportFormat) -> ExportOutcome:
        return self.export_service.export(self.product, self.assets.assets, format)

    async def export(self, format: ExportFormat) -> tuple[ExportOutcome, list[Notification]]:
        """Render, deliver, then run the download follow-up.

        The follow-up runs even when rendering or delivery failed.
        """
        outcome = self.render_export(format)
        notifications: list[Notification] = []
        delivered = False

        if not outcome.ok:
            notifications.append(
                Notification.error("Export Failed", f"Could not export as {format.value}: {outcome.error_message}")
            )
        else:
            artifact = outcome.artifact
            try:
                if artifact.delivery == Delivery.print:
                    self.print_boundary.deliver(artifact)
                else:
                    self.file_boundary.deliver(artifact)
                delivered = True
            except PopupBlockedError:
                notifications.append(
                    Notification.error(
                        "Print Blocked",
                        "Allow pop-ups for printing, or choose another format such as HTML or Word.",
                    )
                )
            except DeliveryError as e:
                notifications.append(Notification.error("Download Failed", str(e)))

        notifications.extend(await finalize_download(delivered, self, self.product_id))
        return outcome, notifications

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Drop local state. Results still in flight are discarded on arrival."""
        self.model.detach()
        self.assets.clear()
        self._closed = True
        logger.info(f"Closed editing session for {self.product_id}")


SessionFactory = Callable[[], Awaitable[EditingSession]]


class SessionStore:
    """In-memory editing sessions, one per product id.

    Usage:
        store = SessionStore()
        session = await store.open(product_id, factory)
        await store.close(product_id)
    """

    def __init__(self):
        self._sessions: dict[str, EditingSession] = {}
        self._lock = asyncio.Lock()

    async def get(self, product_id: str) -> Optional[EditingSession]:
        async with self._lock:
            return self._sessions.get(product_id)

    async def open(self, product_id: str, factory: SessionFactory) -> EditingSession:
        """Return the open session for a product, creating it if needed."""
        async with self._lock:
            session = self._sessions.get(product_id)
            if session is None:
                session = await factory()
                self._sessions[product_id] = session
                logger.info(f"Opened editing session for {product_id}")
            return session

    async def close(self, product_id: str) -> bool:
        async with self._lock:
            session = self._sessions.pop(product_id, None)
        if session is None:
            return False
        session.close()
        return True

    async def close_all(self) -> int:
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()
        return len(sessions)

    def __len__(self) -> int:
        return len(self._sessions)


_default_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get the default session store singleton."""
    global _default_store
    if _default_store is None:
        _default_store = SessionStore()
    return _default_store


def set_session_store(store: Optional[SessionStore]) -> None:
    """Replace the default session store (for testing)."""
    global _default_store
    _default_store = store
