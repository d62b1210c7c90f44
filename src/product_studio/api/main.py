"""FastAPI application setup."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from product_studio.api.response import error_response
from product_studio.api.routes import assets, checklist, export, generate, health, products
from product_studio.db.mongo import close_database
from product_studio.errors import (
    AssetStorageError,
    DeliveryError,
    ExportError,
    InvalidAssetTransitionError,
    ProductNotFoundError,
)
from product_studio.llm import LLMError
from product_studio.services.session import get_session_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    yield
    # Shutdown
    closed = await get_session_store().close_all()
    if closed:
        logger.info(f"Closed {closed} editing sessions")
    await close_database()


app = FastAPI(
    title="Product Studio API",
    description="Backend API for building and exporting digital products",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:5174",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:5174",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(ProductNotFoundError)
async def product_not_found_handler(request: Request, exc: ProductNotFoundError) -> JSONResponse:
    """Handle product not found errors."""
    return JSONResponse(
        status_code=404,
        content=error_response("PRODUCT_NOT_FOUND", str(exc)),
    )


@app.exception_handler(ServerSelectionTimeoutError)
async def mongo_timeout_handler(request: Request, exc: ServerSelectionTimeoutError) -> JSONResponse:
    """Handle MongoDB connection timeout."""
    return JSONResponse(
        status_code=503,
        content=error_response("DATABASE_UNAVAILABLE", "Database is not available. Please try again later."),
    )


@app.exception_handler(ConnectionFailure)
async def mongo_connection_handler(request: Request, exc: ConnectionFailure) -> JSONResponse:
    """Handle MongoDB connection failure."""
    return JSONResponse(
        status_code=503,
        content=error_response("DATABASE_UNAVAILABLE", "Database connection failed. Please try again later."),
    )


@app.exception_handler(ExportError)
async def export_error_handler(request: Request, exc: ExportError) -> JSONResponse:
    """Handle renderer failures. No partial artifact is ever returned."""
    return JSONResponse(
        status_code=500,
        content=error_response("EXPORT_FAILED", f"Could not export as {exc.format}: {exc.message}"),
    )


@app.exception_handler(DeliveryError)
async def delivery_error_handler(request: Request, exc: DeliveryError) -> JSONResponse:
    """Handle delivery failures."""
    return JSONResponse(
        status_code=500,
        content=error_response("DELIVERY_FAILED", str(exc)),
    )


@app.exception_handler(InvalidAssetTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidAssetTransitionError) -> JSONResponse:
    """Handle forbidden asset state changes."""
    return JSONResponse(
        status_code=409,
        content=error_response("INVALID_ASSET_TRANSITION", str(exc)),
    )


@app.exception_handler(AssetStorageError)
async def asset_storage_handler(request: Request, exc: AssetStorageError) -> JSONResponse:
    """Handle asset storage failures that escape the session."""
    return JSONResponse(
        status_code=502,
        content=error_response("ASSET_STORAGE_ERROR", exc.message),
    )


@app.exception_handler(LLMError)
async def llm_error_handler(request: Request, exc: LLMError) -> JSONResponse:
    """Handle LLM/AI service errors."""
    return JSONResponse(
        status_code=503,
        content=error_response("AI_SERVICE_ERROR", "AI service is temporarily unavailable. Please try again."),
    )


# Register routes
app.include_router(health.router)
app.include_router(products.router)
app.include_router(generate.router)
app.include_router(assets.router)
app.include_router(checklist.router)
app.include_router(export.router)
