"""Pydantic schemas for the intake endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class SubmissionPayload(BaseModel):
    """Inbound submission body shared by both intake endpoints.

    Every field is optional at parse time: required-field and email checks
    belong to the submission pipeline, so a bad submission is reported as a
    400 with a readable message instead of a schema error dump. Strings are
    trimmed and blank strings are treated as absent.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    name: str | None = Field(None, description="Submitter name (required).")
    email: str | None = Field(None, description="Submitter email (required).")
    phone: str | None = Field(None, description="Optional phone number.")
    message: str | None = Field(None, description="Message body (required).")
    verification_token: str | None = Field(
        None,
        validation_alias=AliasChoices("verificationToken", "recaptchaToken", "verification_token"),
        description="Human verification token from the client widget.",
    )
    source: str | None = Field(None, description="Form identifier, defaults per endpoint.")
    page: str | None = Field(None, description="Page the form was submitted from.")
    client_address: str | None = Field(
        None,
        validation_alias=AliasChoices("ipAddress", "clientAddress", "client_address"),
        description="Client-reported address, only recorded when overrides are allowed.",
    )
    work_name: str | None = Field(
        None,
        validation_alias=AliasChoices("workName", "work_name"),
        description="Requested work (private work view requests).",
    )

    @model_validator(mode="before")
    @classmethod
    def _unwrap_data_envelope(cls, value: Any) -> Any:
        # Content-backend clients post {"data": {...}}
        if isinstance(value, dict) and set(value) == {"data"} and isinstance(value["data"], dict):
            return value["data"]
        return value

    @field_validator("*", mode="after")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value:
            return None
        return value


class SubmissionRecord(BaseModel):
    """Document created in the content backend for each submission.

    Serialized with camelCase keys (``contactStatus``, ``ipAddress``,
    ``userAgent``) to match the content backend's collection schema.
    ``created_at`` stays on the model but is never posted: the backend stamps
    its own creation time.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    email: str
    message: str
    phone: str | None = None
    work_name: str | None = None
    contact_status: str = "new"
    ip_address: str = "unknown"
    user_agent: str = "unknown"
    source: str
    page: str | None = None
    created_at: datetime = Field(..., exclude=True)
    published_at: datetime | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class IntakeSuccessResponse(BaseModel):
    """Body returned when the notification was dispatched."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    message_id: str = Field(..., alias="messageId")


class ErrorResponse(BaseModel):
    """Error body shared by every non-2xx intake response."""

    error: str = Field(..., description="Human-readable error message.")
    code: str = Field(..., description="Stable, machine-readable error code.")
    request_id: str | None = Field(None, description="Correlation id of the request.")


class ThrottledResponse(ErrorResponse):
    """429 body with retry metadata."""

    retry_after: int = Field(..., alias="retryAfter", description="Seconds until retry.")
    reset_time: str = Field(..., alias="resetTime", description="ISO-8601 window reset time.")
