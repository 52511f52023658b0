"""Rate limiting dependency for FastAPI routes.

This module wires the intake service's limiter into the HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency function only.
- Short-circuit: the dependency runs before the request body is validated,
  so a throttled client never reaches the submission pipeline.
- Headers on every outcome: the decision is stashed on ``request.state``
  and ``rate_limit_headers_middleware`` copies it onto the final response,
  including error responses produced by exception handlers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.services.intake_service import IntakeService, get_intake_service


async def enforce_rate_limit(
    request: Request,
    service: Annotated[IntakeService, Depends(get_intake_service)],
) -> None:
    """FastAPI dependency enforcing the per-client admission limit.

    Consumes one unit from the caller's window budget.

    Args:
        request: FastAPI request.
        service: Intake service owning the limiter.

    Raises:
        ThrottledAppError: 429 Too Many Requests when the budget is exhausted.
    """

    service.admit(request)
