"""Global exception handlers for consistent error responses.

Every error body has the same shape: ``{"error": <message>, "code": <code>,
"request_id": <id>}``; throttled responses add ``retryAfter`` and
``resetTime``.

Design:
- AppError subclasses → the status carried by the class (400, 429, 500)
- Malformed request bodies → 400
- Unexpected Exception → generic 500 (safety net)
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import AppError, ThrottledAppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str) -> dict:
    return {
        "error": message,
        "code": code,
        "request_id": get_request_id(),
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with a consistent JSON format.

    Stages log their own failures at the severity they warrant; this
    handler only adds a debug line so each outcome is logged once.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the error's status code.
    """
    status_code = exc.status_code
    logger.debug(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    content = _error_body(exc.code, exc.message)
    headers: dict[str, str] = {}

    if isinstance(exc, ThrottledAppError):
        details = exc.details or {}
        retry_after = int(details.get("retry_after", 1))
        content["retryAfter"] = retry_after
        content["resetTime"] = details.get("reset_time")
        headers["Retry-After"] = str(retry_after)

    return JSONResponse(status_code=status_code, content=content, headers=headers or None)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map unparseable or mistyped request bodies to 400."""

    logger.debug(
        "request_validation_failed",
        extra={"request_path": request.url.path, "error_count": len(exc.errors())},
    )
    return JSONResponse(
        status_code=400,
        content=_error_body("invalid_request_body", "Invalid request body."),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message; no stack traces or exception text reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
