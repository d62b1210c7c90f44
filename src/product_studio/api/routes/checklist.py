"""Export checklist endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from product_studio.api.dependencies import SessionDep
from product_studio.api.response import dump_notifications, error_response, success_response

router = APIRouter(prefix="/api/products/{product_id}/checklist", tags=["Checklist"])


def _checklist_data(session) -> dict:
    return {
        "checklist": session.checklist.model_dump(mode="json"),
        "exportReady": session.is_export_ready(),
    }


@router.get("")
async def get_checklist(session: SessionDep) -> JSONResponse:
    """Current checklist flags and overall readiness."""
    return JSONResponse(content=success_response(_checklist_data(session)))


@router.put("/price")
async def set_price(session: SessionDep, request: Request) -> JSONResponse:
    """Set the product's price point, e.g. ``{"price_point": "$12"}``."""
    try:
        body = await request.json()
        price_point = body.get("price_point")
    except Exception as e:
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", str(e)),
        )
    if price_point is not None and not isinstance(price_point, str):
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", "price_point must be a string"),
        )

    notifications = await session.set_price(price_point)
    return JSONResponse(
        content=success_response(
            {**_checklist_data(session), "notifications": dump_notifications(notifications)}
        )
    )


@router.post("/preview-reviewed")
async def mark_preview_reviewed(session: SessionDep) -> JSONResponse:
    """Acknowledge that the export preview was reviewed."""
    session.mark_preview_reviewed()
    return JSONResponse(content=success_response(_checklist_data(session)))
