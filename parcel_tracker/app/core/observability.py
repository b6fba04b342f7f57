"""
Observability Middleware.

Tags every request with a correlation ID, times it and logs the outcome.
The ID is kept in a context variable for the duration of the request so
that service-level logs (carrier calls in particular) can carry it too.
"""

import time
import uuid
import logging
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("parcel_tracker.http")

CORRELATION_HEADER = "X-Correlation-ID"

# "-" outside of a request (startup, scripts, direct service calls)
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


def current_correlation_id() -> str:
    return correlation_id_var.get()


def _log_request(request: Request, status_code: int, correlation_id: str, duration_ms: float) -> None:
    log_data = {
        "correlation_id": correlation_id,
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
        "ip": request.client.host if request.client else "unknown"
    }

    # Upstream failures surface as 5xx, missing parcels as 4xx
    if status_code >= 500:
        logger.error("Request Failed", extra=log_data)
    elif status_code >= 400:
        logger.warning("Request Error", extra=log_data)
    else:
        logger.info("Request API", extra=log_data)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        token = correlation_id_var.set(correlation_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"

        _log_request(request, response.status_code, correlation_id, duration_ms)
        return response
