"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses. Each subclass carries
the HTTP status it maps to, so the exception handler never needs to know the
full taxonomy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep shapes stable while allowing each error
    type to attach what it knows.
    """

    code: str
    hint: str
    retry_after: int
    reset_time: str
    endpoint: str
    stage: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message, safe to return to clients.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code: ClassVar[int] = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when a submission fails structural validation."""


class ThrottledAppError(AppError):
    """Raised when a client exceeded its admission budget."""

    status_code = 429


class VerificationAppError(AppError):
    """Raised when the human verification token is missing or rejected."""


class VerificationConfigAppError(VerificationAppError):
    """Raised when verification is required but the server secret is missing."""

    status_code = 500


class PersistenceAppError(AppError):
    """Raised by content stores when a record cannot be created.

    Recovered inside the submission pipeline; never reaches a client.
    """

    status_code = 500


class NotificationAppError(AppError):
    """Raised when the outbound notification could not be sent."""

    status_code = 500
