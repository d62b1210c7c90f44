"""Product studio models package.

Note: keep these models as the source-of-truth schemas for OpenAPI + frontend types.
"""

from .assets import (
    Asset,
    AssetCategory,
    AssetStatus,
    AssetType,
    StoredAssetRecord,
    LOCAL_URL_SCHEME,
    asset_type_for,
    is_local_url,
)
from .checklist import (
    ExportChecklist,
    Notification,
    NotificationLevel,
)
from .export import (
    Delivery,
    ExportArtifact,
    ExportFormat,
    ExportOutcome,
    FORMAT_EXTENSIONS,
    DOCX_MEDIA_TYPE,
)
from .generation import (
    ChapterContentContext,
    GenerationIntent,
    GenerationOutcome,
    GenerationOutcomeStatus,
    GenerationRequest,
    GenerationResponse,
    GenerationStats,
    IntentStatus,
)
from .product import (
    BonusContent,
    Chapter,
    ChapterContent,
    ContentItem,
    ContentItemType,
    ContentOutline,
    ContentProduct,
    CreateProductRequest,
    Deliverable,
    Module,
    Part,
    Product,
    ProductAnalysis,
    ProductKind,
    ProductStatus,
    ProductStructure,
    Section,
    SoftwareProduct,
    UpdateProductRequest,
    parse_product,
    product_kind_for,
)

__all__ = [
    # Assets
    "Asset",
    "AssetCategory",
    "AssetStatus",
    "AssetType",
    "StoredAssetRecord",
    "LOCAL_URL_SCHEME",
    "asset_type_for",
    "is_local_url",
    # Checklist
    "ExportChecklist",
    "Notification",
    "NotificationLevel",
    # Export
    "Delivery",
    "ExportArtifact",
    "ExportFormat",
    "ExportOutcome",
    "FORMAT_EXTENSIONS",
    "DOCX_MEDIA_TYPE",
    # Generation
    "ChapterContentContext",
    "GenerationIntent",
    "GenerationOutcome",
    "GenerationOutcomeStatus",
    "GenerationRequest",
    "GenerationResponse",
    "GenerationStats",
    "IntentStatus",
    # Product
    "BonusContent",
    "Chapter",
    "ChapterContent",
    "ContentItem",
    "ContentItemType",
    "ContentOutline",
    "ContentProduct",
    "CreateProductRequest",
    "Deliverable",
    "Module",
    "Part",
    "Product",
    "ProductAnalysis",
    "ProductKind",
    "ProductStatus",
    "ProductStructure",
    "Section",
    "SoftwareProduct",
    "UpdateProductRequest",
    "parse_product",
    "product_kind_for",
]
