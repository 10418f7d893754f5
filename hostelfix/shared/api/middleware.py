"""
Shared API Middleware
=====================

Request plumbing for every router:
- correlation ids (``X-Correlation-ID`` in, echoed out)
- one access log line per request, tagged with the acting user
- mapping of application exceptions to HTTP status codes
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from hostelfix.core import (
    ApplicationException,
    ConcurrentTransitionException,
    ConfigurationException,
    ExternalServiceException,
    ResourceNotFoundException,
    TransitionException,
    ValidationException,
)
from hostelfix.shared.infrastructure.logging import get_context_logger, get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "unknown")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Reuses the caller's correlation id or mints one, and echoes it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = request.state.correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log: one line per request with status and latency."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        log = get_context_logger(__name__, _correlation_id(request))
        route = {
            "method": request.method,
            "path": request.url.path,
            "actor_id": request.headers.get("X-Actor-Id"),
        }
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            log.error("Request failed", extra={
                **route,
                "error": str(e),
                "response_time_ms": int((time.perf_counter() - started) * 1000),
            })
            raise

        log.info("Request served", extra={
            **route,
            "status_code": response.status_code,
            "response_time_ms": int((time.perf_counter() - started) * 1000),
        })
        return response


# ========== Exception Handlers ==========

_STATUS_BY_EXCEPTION = (
    (ValidationException, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ResourceNotFoundException, status.HTTP_404_NOT_FOUND),
    (TransitionException, status.HTTP_409_CONFLICT),
    (ConcurrentTransitionException, status.HTTP_409_CONFLICT),
    (ExternalServiceException, status.HTTP_502_BAD_GATEWAY),
    (ConfigurationException, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: ApplicationException) -> int:
    """HTTP status for an application exception."""
    for exc_type, code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """
    Translate application exceptions into JSON error responses.

    The message is meant for the user; ``details`` carries the machine-
    readable context (field name, issue id, rejected action).
    """
    correlation_id = _correlation_id(request)
    status_code = status_for(exc)

    logger.warning(
        "Request rejected",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error_message": exc.message,
            "status_code": status_code
        }
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "detail": exc.message,
            "error_type": type(exc).__name__,
            "details": exc.details,
            "correlation_id": correlation_id
        }
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the failure and answer 500 without leaking internals."""
    correlation_id = _correlation_id(request)

    logger.error(
        "Unhandled exception",
        extra={
            "correlation_id": correlation_id,
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc)
        }
    )

    is_dev = getattr(getattr(request.app.state, "settings", None), "environment", None) == "development"

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if is_dev else None
        }
    )
