"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes for the carrier integration and
global exception handlers for the API layer.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict, Optional

logger = logging.getLogger("parcel_tracker.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class UpstreamError(AppException):
    """
    Raised when the carrier API call fails.

    Carries the upstream HTTP status (if any) and the upstream message.
    Whether it is worth retrying depends on `upstream_status`.
    """

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        error_code: str = "ERR_UPSTREAM_001",
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        details: Dict[str, Any] = None
    ):
        self.upstream_status = upstream_status
        details = dict(details or {})
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status_code,
            details=details
        )


class ConfigurationError(UpstreamError):
    """Raised when the carrier API credential is missing. Needs operator action."""

    def __init__(self, message: str = "Thailand Post API is not configured. Set THAILAND_POST_API_TOKEN."):
        super().__init__(
            message=message,
            error_code="ERR_CONFIG_001",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


class UpstreamTimeoutError(UpstreamError):
    """Raised when the carrier API does not answer before the deadline. Safe to retry."""

    def __init__(self, timeout_ms: int):
        super().__init__(
            message="Request timeout: Thailand Post API did not respond in time",
            error_code="ERR_UPSTREAM_TIMEOUT",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            details={"timeout_ms": timeout_ms}
        )


class MalformedResponseError(UpstreamError):
    """Raised when the carrier payload does not have the expected shape."""

    def __init__(self, message: str = "Malformed response from Thailand Post API", upstream_status: Optional[int] = None):
        super().__init__(
            message=message,
            upstream_status=upstream_status,
            error_code="ERR_UPSTREAM_PAYLOAD"
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        404: "ERR_NOT_FOUND",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_encoder(exc.errors())
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
