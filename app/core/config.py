"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file and not os.getenv("TESTING"):
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int | None = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (None disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Per-client admission limits for the intake endpoints."""

    enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on intake endpoints",
    )
    max_requests: int = Field(
        2,
        description="Maximum number of submissions allowed per window (per client address)",
        ge=1,
    )
    window_seconds: int = Field(
        3600,
        description="Rate limit window size in seconds, started by the first request",
        ge=1,
    )
    sweep_interval_seconds: float = Field(
        600.0,
        description="Interval between background sweeps of expired windows",
        gt=0,
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers on intake responses",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class RecaptchaSettings(BaseSettings):
    """Human verification provider configuration.

    The secret is optional at startup; requests to endpoints that require
    verification fail with a configuration error when it is missing.
    """

    secret_key: str | None = Field(None, description="reCAPTCHA server-side secret")
    verify_url: str = Field(
        "https://www.google.com/recaptcha/api/siteverify",
        description="Token verification endpoint",
    )
    timeout_seconds: float = Field(5.0, description="Verification request timeout", gt=0)

    model_config = SettingsConfigDict(
        env_prefix="RECAPTCHA_",
        case_sensitive=False,
    )


class EmailSettings(BaseSettings):
    """Outbound notification transport and sender identity."""

    provider: str = Field("ses", description="Notification transport: 'ses' or 'log'")
    from_email: str = Field("noreply@example.com", description="Sender address")
    recipient_email: str | None = Field(
        None,
        description="Address that receives submissions (defaults to from_email)",
    )
    aws_region: str = Field("us-east-1", description="AWS region for SES")
    aws_access_key_id: str | None = Field(None, description="AWS access key id")
    aws_secret_access_key: str | None = Field(None, description="AWS secret access key")
    timeout_seconds: float = Field(5.0, description="Transport connect/read timeout", gt=0)
    company_name: str = Field("Shadowine", description="Name shown in notification footers")
    company_address: str = Field("", description="Address shown in notification footers")
    dashboard_url: str | None = Field(None, description="Link to the submissions dashboard")

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_",
        case_sensitive=False,
    )

    @property
    def resolved_recipient(self) -> str:
        return self.recipient_email or self.from_email


class ContentStoreSettings(BaseSettings):
    """External content backend used to persist submission records."""

    base_url: str | None = Field(
        None,
        description="Content backend base URL; in-memory storage is used when unset",
    )
    api_token: str | None = Field(None, description="Bearer token for the content backend")
    timeout_seconds: float = Field(5.0, description="Document creation timeout", gt=0)
    contact_collection: str = Field(
        "contact-submissions",
        description="Collection receiving contact form submissions",
    )
    work_view_collection: str = Field(
        "work-view-requests",
        description="Collection receiving private work view requests",
    )

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_STORE_",
        case_sensitive=False,
    )


class IntakeSettings(BaseSettings):
    """Per-endpoint intake policy."""

    contact_requires_verification: bool = Field(
        True,
        description="Require a human verification token on /send-email",
    )
    work_view_requires_verification: bool = Field(
        False,
        description="Require a human verification token on /request-work-view",
    )
    trust_forwarded_for: bool = Field(
        False,
        description=(
            "Read the client address from X-Forwarded-For. Enable only behind "
            "proxies that append to the header; otherwise the connection peer is used."
        ),
    )
    trusted_proxy_count: int = Field(
        1,
        description="Number of trusted proxies appending to X-Forwarded-For (hop taken from the right)",
        ge=1,
    )
    allow_client_address_override: bool = Field(
        False,
        description=(
            "Record the body-supplied ipAddress on stored submissions. "
            "Never used for rate limiting."
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="INTAKE_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=LogSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    recaptcha: RecaptchaSettings = Field(default_factory=RecaptchaSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    content_store: ContentStoreSettings = Field(default_factory=ContentStoreSettings)
    intake: IntakeSettings = Field(default_factory=IntakeSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
