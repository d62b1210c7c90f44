"""Generation endpoint.

POST /api/products/{product_id}/generate with ``{"type": <intent>, ...context}``.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from product_studio.api.dependencies import SessionDep
from product_studio.api.response import dump_notifications, error_response, success_response
from product_studio.models import GenerationIntent, GenerationOutcomeStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products/{product_id}", tags=["Generation"])

# Error code and HTTP status for outcomes that did not merge
_OUTCOME_ERRORS = {
    GenerationOutcomeStatus.rejected: ("GENERATION_IN_PROGRESS", 409),
    GenerationOutcomeStatus.skipped: ("PRECONDITION_FAILED", 400),
    GenerationOutcomeStatus.failed: ("GENERATION_FAILED", 502),
}


@router.post("/generate")
async def generate(session: SessionDep, request: Request) -> JSONResponse:
    """Run one generation intent and merge the result into the product.

    Returns:
        {data: {outcome, notifications, product state}, error: null} on success
        {data: null, error: {code, message}} when rejected, skipped or failed
    """
    try:
        body = await request.json()
    except Exception as e:
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", str(e)),
        )
    if not isinstance(body, dict):
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", "Request body must be an object"),
        )

    context = dict(body)
    try:
        intent = GenerationIntent(context.pop("type", None))
    except ValueError:
        return JSONResponse(
            status_code=400,
            content=error_response("INVALID_GENERATION_TYPE", "Invalid generation type"),
        )

    outcome, notifications = await session.generate(intent, context)
    if outcome.status in _OUTCOME_ERRORS:
        code, status_code = _OUTCOME_ERRORS[outcome.status]
        return JSONResponse(
            status_code=status_code,
            content=error_response(code, outcome.message or notifications[0].message),
        )

    return JSONResponse(
        content=success_response(
            {
                "outcome": outcome.model_dump(mode="json"),
                "notifications": dump_notifications(notifications),
                **session.view(),
            }
        )
    )
