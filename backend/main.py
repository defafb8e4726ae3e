"""
Component Builder FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.config import settings
from backend.middleware.rate_limit import rate_limiter
from backend.routes import components as component_routes
from backend.routes import generate as generate_routes
from backend.routes import preview as preview_routes

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Routes whose validation failures are reported as 400 with details
_BAD_REQUEST_PATHS = {"/api/generate"}


# Background task for cleanup
async def cleanup_task():
    """
    Background task to clean up old rate limit entries.

    Runs every 60 seconds.
    """
    while True:
        rate_limiter.cleanup_old_entries(max_age_minutes=10)
        await asyncio.sleep(60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Starts the rate limit cleanup task; on shutdown stops it and tears
    down every mounted preview.
    """
    if not settings.llm_configured and not settings.USE_MOCK_LLM:
        logger.warning("No LLM API key configured; generation serves the fallback component")

    cleanup_task_handle = asyncio.create_task(cleanup_task())
    logger.info("Background cleanup task started")

    yield

    cleanup_task_handle.cancel()
    try:
        await cleanup_task_handle
    except asyncio.CancelledError:
        logger.info("Background cleanup task stopped")

    preview_routes.renderer.clear()


app = FastAPI(
    title="Component Builder",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """400 with the validation issues for generation requests; default 422 elsewhere."""
    if request.url.path in _BAD_REQUEST_PATHS:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )
    return await request_validation_exception_handler(request, exc)


# Register routes
app.include_router(generate_routes.router)
app.include_router(component_routes.router)
app.include_router(preview_routes.router)


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok", "message": "Component Builder is running"}
