# src/civic_align/main.py
"""Main FastAPI application entry point for the Civic Align service."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from civic_align.api.v1 import (
    admin_router,
    candidates_router,
    endorsements_router,
    feed_router,
    preferences_router,
)
from civic_align.core.logging_config import configure_logging
from civic_align.core.settings import settings
from civic_align.services.events import OutboxRelay, OutboxRelayWorker, get_event_hub

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Civic Align API",
    description="Voter and candidate alignment, endorsement and ranking engine",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(feed_router, prefix="/api/v1")
app.include_router(endorsements_router, prefix="/api/v1")
app.include_router(candidates_router, prefix="/api/v1")
app.include_router(preferences_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings.log_level)
    if settings.event_relay_enabled:
        worker = OutboxRelayWorker(
            OutboxRelay(get_event_hub()),
            interval_seconds=settings.event_relay_interval_seconds,
        )
        await worker.start()
        app.state.relay_worker = worker
        logger.info("Outbox relay started (interval %.2fs)", worker.interval)
    else:
        app.state.relay_worker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: OutboxRelayWorker | None = getattr(app.state, "relay_worker", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Voter and candidate alignment, endorsement and ranking engine",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("civic_align.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
