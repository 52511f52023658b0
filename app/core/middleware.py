"""HTTP middleware for request correlation and rate-limit headers.

- ``request_id_middleware`` accepts an incoming X-Request-ID header (or
  generates a UUID), binds it to the logging context for the lifetime of the
  request and echoes it back with the request duration.
- ``rate_limit_headers_middleware`` attaches the X-RateLimit-* headers
  computed during admission to the response, whatever produced it.

Usage:
    app.middleware("http")(rate_limit_headers_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.logging import clear_request_id, set_request_id


async def request_id_middleware(request: Request, call_next) -> Response:
    """Generate or propagate the request correlation id.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with X-Request-ID and
            X-Request-Duration-ms headers added.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def rate_limit_headers_middleware(request: Request, call_next) -> Response:
    """Copy rate-limit headers recorded during admission onto the response."""

    response: Response = await call_next(request)
    headers = getattr(request.state, "rate_limit_headers", None)
    if headers:
        for name, value in headers.items():
            response.headers[name] = value
    return response
