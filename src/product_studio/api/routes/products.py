"""Product endpoints.

Reading a product opens its editing session; every later call for the same
product works on that session until it is closed.
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from product_studio.api.dependencies import SessionDep
from product_studio.api.response import dump_notifications, error_response, success_response
from product_studio.models import CreateProductRequest, UpdateProductRequest
from product_studio.services import product_service
from product_studio.services.session import get_session_store

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("")
async def list_products() -> JSONResponse:
    """List all products."""
    products = await product_service.list_products()
    return JSONResponse(
        content=success_response([p.model_dump(mode="json") for p in products])
    )


@router.post("", status_code=201)
async def create_product(request: Request) -> JSONResponse:
    """Create a new product idea."""
    try:
        body = await request.json()
        create_request = CreateProductRequest(**body)
    except PydanticValidationError as e:
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", str(e)),
        )
    except Exception as e:
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", str(e)),
        )

    product = await product_service.create_product(create_request)
    return JSONResponse(
        status_code=201,
        content=success_response(product.model_dump(mode="json")),
    )


@router.get("/{product_id}")
async def get_product(session: SessionDep) -> JSONResponse:
    """Get a product with its session state (assets, checklist, generation status)."""
    return JSONResponse(content=success_response(session.view()))


@router.put("/{product_id}")
async def update_product(session: SessionDep, request: Request) -> JSONResponse:
    """Update the editable details of a product."""
    try:
        body = await request.json()
        update_request = UpdateProductRequest(**body)
    except PydanticValidationError as e:
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", str(e)),
        )
    except Exception as e:
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", str(e)),
        )

    notifications = await session.update_details(update_request)
    return JSONResponse(
        content=success_response(
            {**session.view(), "notifications": dump_notifications(notifications)}
        ),
    )


@router.post("/{product_id}/save")
async def save_product(session: SessionDep) -> JSONResponse:
    """Write the full product snapshot."""
    product = await session.save()
    return JSONResponse(content=success_response(product.model_dump(mode="json")))


@router.delete("/{product_id}/session")
async def close_session(product_id: str) -> JSONResponse:
    """Close the editing session. Results still in flight are discarded."""
    closed = await get_session_store().close(product_id)
    return JSONResponse(content=success_response({"closed": closed}))


@router.delete("/{product_id}")
async def delete_product(product_id: str) -> JSONResponse:
    """Delete a product and close its session."""
    await get_session_store().close(product_id)
    await product_service.delete_product(product_id)
    return JSONResponse(content=success_response({"deleted": True}))
