"""Product persistence in the ``product_ideas`` collection.

Saves always write the full snapshot of the fields the builder owns. The one
partial update is ``update_status``, used after a download.
"""

from datetime import UTC, datetime
from typing import Any, Iterable, Optional

from bson import ObjectId

from product_studio.db.mongo import get_database
from product_studio.errors import ProductNotFoundError
from product_studio.models import (
    Asset,
    CreateProductRequest,
    Product,
    ProductAnalysis,
    ProductStatus,
    parse_product,
)

COLLECTION_NAME = "product_ideas"

# Fields excluded from the persisted snapshot
_SNAPSHOT_EXCLUDE: dict[str, Any] = {
    "id": True,
    "kind": True,
    "analysis": {"assets": {"__all__": {"isSelected"}}},
}


def _object_id(product_id: str) -> ObjectId:
    try:
        return ObjectId(product_id)
    except Exception:
        raise ProductNotFoundError(product_id) from None


def _to_product(doc: dict) -> Product:
    """Convert a MongoDB document to a Product variant."""
    data = {key: value for key, value in doc.items() if key not in ("_id", "createdAt", "updatedAt")}
    data["id"] = str(doc["_id"])
    data["raw_analysis"] = doc.get("raw_analysis") or {}
    return parse_product(data)


def product_snapshot(product: Product, assets: Optional[Iterable[Asset]] = None) -> dict[str, Any]:
    """Persisted shape of a product. Only durable assets are included."""
    if assets is None:
        assets = product.analysis.assets
    durable = [asset for asset in assets if asset.is_durable]
    to_save = product.model_copy(
        update={"analysis": product.analysis.model_copy(update={"assets": durable})}
    )
    return to_save.model_dump(mode="json", by_alias=True, exclude=_SNAPSHOT_EXCLUDE)


async def list_products() -> list[Product]:
    """List all products, most recently updated first."""
    db = await get_database()
    cursor = db[COLLECTION_NAME].find().sort("updatedAt", -1)
    docs = await cursor.to_list(length=None)
    return [_to_product(doc) for doc in docs]


async def create_product(request: CreateProductRequest) -> Product:
    """Create a new product idea."""
    db = await get_database()
    collection = db[COLLECTION_NAME]

    now = datetime.now(UTC)
    analysis = ProductAnalysis(
        targetAudience=request.targetAudience,
        problemSolved=request.problemSolved,
    )
    doc = {
        "name": request.name,
        "tagline": request.tagline,
        "description": request.description,
        "notes": "",
        "product_type": request.product_type,
        "status": ProductStatus.idea.value,
        "price_point": request.price_point,
        "raw_analysis": analysis.model_dump(mode="json", exclude_none=True),
        "createdAt": now,
        "updatedAt": now,
    }

    result = await collection.insert_one(doc)
    doc["_id"] = result.inserted_id
    return _to_product(doc)


async def get_product(product_id: str) -> Product:
    """Get a product by ID."""
    db = await get_database()
    doc = await db[COLLECTION_NAME].find_one({"_id": _object_id(product_id)})
    if doc is None:
        raise ProductNotFoundError(product_id)
    return _to_product(doc)


async def save_product(product: Product, assets: Optional[Iterable[Asset]] = None) -> Product:
    """Overwrite the stored product with the full snapshot of ``product``."""
    db = await get_database()
    collection = db[COLLECTION_NAME]
    object_id = _object_id(product.id)

    update_doc = product_snapshot(product, assets)
    update_doc["updatedAt"] = datetime.now(UTC)

    result = await collection.update_one({"_id": object_id}, {"$set": update_doc})
    if result.matched_count == 0:
        raise ProductNotFoundError(product.id)

    updated_doc = await collection.find_one({"_id": object_id})
    return _to_product(updated_doc)


async def update_status(product_id: str, status: ProductStatus) -> None:
    """Set only the status of a product."""
    db = await get_database()
    result = await db[COLLECTION_NAME].update_one(
        {"_id": _object_id(product_id)},
        {"$set": {"status": status.value, "updatedAt": datetime.now(UTC)}},
    )
    if result.matched_count == 0:
        raise ProductNotFoundError(product_id)


async def delete_product(product_id: str) -> bool:
    """Delete a product by ID."""
    db = await get_database()
    result = await db[COLLECTION_NAME].delete_one({"_id": _object_id(product_id)})
    if result.deleted_count == 0:
        raise ProductNotFoundError(product_id)
    return True
