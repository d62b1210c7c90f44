"""Health check endpoint."""

from fastapi import APIRouter

from product_studio.api.response import success_response
from product_studio.config import pricing_enabled

router = APIRouter(tags=["System"])


@router.get("/health")
async def health_check() -> dict:
    """Return system health status."""
    return success_response({"status": "ok", "pricingEnabled": pricing_enabled()})
