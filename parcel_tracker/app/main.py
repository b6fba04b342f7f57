"""
FastAPI Application Entry Point.

This is the main application file for the Parcel Tracker Backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from parcel_tracker.app.core.config import settings
from parcel_tracker.app.core.observability import ObservabilityMiddleware
from parcel_tracker.app.api.v1.router import router as api_v1_router
from parcel_tracker.app.db.session import engine, Base
from parcel_tracker.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from parcel_tracker.app.services.tracking_gateway import tracking_gateway

# Import models to ensure they are registered with Base
from parcel_tracker.app.models.parcel import TrackedParcel

logger = logging.getLogger("parcel_tracker")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Warns when the carrier API token is missing.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if not tracking_gateway.is_configured():
        logger.warning("THAILAND_POST_API_TOKEN is not set; carrier lookups will fail")

    yield


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Track international parcels against the Thailand Post API",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "carrier_configured": tracking_gateway.is_configured(),
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to Parcel Tracker Backend API",
        "docs": "/docs",
        "health": "/health",
    }
