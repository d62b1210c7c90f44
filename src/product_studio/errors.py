"""Domain error hierarchy.

Every operation in the builder core catches these at the boundary it owns
and turns them into a notification or an outcome object. The API layer maps
the ones that do escape to error envelopes.
"""


class ProductStudioError(Exception):
    """Base exception for product studio operations."""


class ProductNotFoundError(ProductStudioError):
    """Raised when a product record does not exist."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product with ID '{product_id}' not found")


class GenerationServiceError(ProductStudioError):
    """The generation service failed or returned an unusable payload."""

    def __init__(self, intent: str, message: str):
        self.intent = intent
        self.message = message
        super().__init__(f"{intent}: {message}")


class AssetStorageError(ProductStudioError):
    """Creating an asset record in the storage backend failed."""

    def __init__(self, message: str, asset_id: str | None = None):
        self.asset_id = asset_id
        self.message = message
        super().__init__(message)


class AssetDeleteError(AssetStorageError):
    """Deleting an asset from the storage backend failed."""


class InvalidAssetTransitionError(ProductStudioError):
    """An asset was asked to move along an edge the state machine forbids."""

    def __init__(self, asset_id: str, current: str, target: str):
        self.asset_id = asset_id
        self.current = current
        self.target = target
        super().__init__(f"Asset '{asset_id}' cannot move from '{current}' to '{target}'")


class ExportError(ProductStudioError):
    """A renderer could not produce a complete artifact."""

    def __init__(self, format: str, message: str):
        self.format = format
        self.message = message
        super().__init__(f"{format} export failed: {message}")


class DeliveryError(ProductStudioError):
    """The artifact was rendered but could not be handed to the user."""


class PopupBlockedError(DeliveryError):
    """The print view could not be opened (blocked pop-up or no browser)."""

    def __init__(self, message: str = "Print window was blocked"):
        super().__init__(message)
