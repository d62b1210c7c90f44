"""Asset endpoints.

Endpoints:
- GET /api/products/{product_id}/assets - Assets of the editing session
- POST /api/products/{product_id}/assets/upload - Upload a file
- POST /api/products/{product_id}/assets/generate-image - Add an AI image
- POST /api/products/{product_id}/assets/save-selected - Batch save
- POST /api/products/{product_id}/assets/{asset_id}/save - Save one asset
- PUT /api/products/{product_id}/assets/{asset_id}/selected - Toggle selection
- DELETE /api/products/{product_id}/assets/{asset_id} - Delete an asset
- GET /api/products/{product_id}/assets/{db_id}/content - Serve stored bytes
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from product_studio.api.dependencies import SessionDep, get_asset_storage
from product_studio.api.response import (
    dump_notifications,
    error_response,
    first_error,
    success_response,
)
from product_studio.models import Asset, AssetCategory, Notification

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products/{product_id}/assets", tags=["Assets"])


def _asset_response(
    asset: Optional[Asset],
    notifications: list[Notification],
    error_code: str,
    status_code: int = 502,
) -> JSONResponse:
    failure = first_error(notifications)
    if failure is not None:
        return JSONResponse(
            status_code=404 if asset is None else status_code,
            content=error_response(error_code, failure.message),
        )
    data: dict[str, Any] = {
        "asset": asset.model_dump(mode="json") if asset else None,
        "notifications": dump_notifications(notifications),
    }
    return JSONResponse(content=success_response(data))


def _parse_category(value: Optional[str], default: AssetCategory) -> Optional[AssetCategory]:
    if not value:
        return default
    try:
        return AssetCategory(value)
    except ValueError:
        return None


@router.get("")
async def list_assets(session: SessionDep) -> JSONResponse:
    """All assets of the session, saved or not."""
    return JSONResponse(
        content=success_response([asset.model_dump(mode="json") for asset in session.assets.assets])
    )


@router.post("/upload")
async def upload_asset(
    session: SessionDep,
    file: Annotated[UploadFile, File(description="File to attach to the product")],
    category: Annotated[Optional[str], Form()] = None,
) -> JSONResponse:
    """Upload a file. A failed upload keeps the file in the session as ``uploaded``."""
    asset_category = _parse_category(category, AssetCategory.uploaded)
    if asset_category is None:
        return JSONResponse(
            status_code=400,
            content=error_response("INVALID_CATEGORY", f"Unknown asset category '{category}'"),
        )

    content = await file.read()
    asset, notifications = await session.upload_asset(
        file.filename or "untitled",
        content,
        file.content_type or "application/octet-stream",
        asset_category,
    )
    return _asset_response(asset, notifications, "UPLOAD_FAILED")


@router.post("/generate-image")
async def generate_image(session: SessionDep, request: Request) -> JSONResponse:
    """Add an AI image from a prompt: ``{"prompt": ..., "category"?: ..., "name"?: ...}``."""
    try:
        body = await request.json()
    except Exception as e:
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", str(e)),
        )

    prompt = body.get("prompt") if isinstance(body, dict) else None
    if not isinstance(prompt, str) or not prompt.strip():
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", "Prompt is required"),
        )
    category = _parse_category(body.get("category"), AssetCategory.illustration)
    if category is None:
        return JSONResponse(
            status_code=400,
            content=error_response("INVALID_CATEGORY", f"Unknown asset category '{body.get('category')}'"),
        )

    asset, notifications = session.generate_image(prompt, category, body.get("name"))
    return _asset_response(asset, notifications, "IMAGE_GENERATION_FAILED", status_code=400)


@router.post("/save-selected")
async def save_selected(session: SessionDep) -> JSONResponse:
    """Save every selected asset. Partial success is reported as a warning."""
    saved, notifications = await session.save_selected()
    failure = first_error(notifications)
    if failure is not None:
        return JSONResponse(
            status_code=502,
            content=error_response("ASSET_SAVE_FAILED", failure.message),
        )
    return JSONResponse(
        content=success_response(
            {
                "saved": saved,
                "assets": [asset.model_dump(mode="json") for asset in session.assets.assets],
                "notifications": dump_notifications(notifications),
            }
        )
    )


@router.post("/{asset_id}/save")
async def save_asset(session: SessionDep, asset_id: str) -> JSONResponse:
    """Make one asset durable."""
    asset, notifications = await session.save_asset(asset_id)
    return _asset_response(asset, notifications, "ASSET_SAVE_FAILED")


@router.put("/{asset_id}/selected")
async def set_selected(session: SessionDep, asset_id: str, request: Request) -> JSONResponse:
    """Toggle batch-save selection: ``{"selected": true}``."""
    try:
        body = await request.json()
        selected = bool(body.get("selected", True))
    except Exception as e:
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", str(e)),
        )

    if not session.set_selected(asset_id, selected):
        return JSONResponse(
            status_code=400,
            content=error_response("NOT_SELECTABLE", f"Asset '{asset_id}' is missing or already saved"),
        )
    return JSONResponse(content=success_response(session.assets.get(asset_id).model_dump(mode="json")))


@router.delete("/{asset_id}")
async def delete_asset(session: SessionDep, asset_id: str) -> JSONResponse:
    """Delete an asset. A stored copy is deleted first; on failure the asset stays."""
    deleted, notifications = await session.delete_asset(asset_id)
    failure = first_error(notifications)
    if failure is not None:
        return JSONResponse(
            status_code=404 if session.assets.get(asset_id) is None else 502,
            content=error_response("ASSET_DELETE_FAILED", failure.message),
        )
    return JSONResponse(
        content=success_response(
            {"deleted": deleted, "notifications": dump_notifications(notifications)}
        )
    )


@router.get("/{db_id}/content")
async def serve_asset_content(
    product_id: str,
    db_id: str,
    storage: Annotated[Any, Depends(get_asset_storage)],
    size: Annotated[str, Query(description="Size variant: 'thumb' or 'full'")] = "full",
) -> Response:
    """Serve the stored bytes of an asset.

    Ownership is checked against the storage metadata, so content is served
    as soon as the upload finishes, before the product is saved.
    """
    result = await storage.get_content(product_id, db_id, variant=size)
    if result is None:
        return JSONResponse(
            status_code=404,
            content=error_response("ASSET_NOT_FOUND", f"Asset '{db_id}' not found for product"),
        )

    content, media_type = result
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Cache-Control": "public, max-age=86400",  # Cache for 1 day
        },
    )
