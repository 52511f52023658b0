"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING (so no .env file is loaded) and points every adapter at a
local, side-effect free implementation before settings are imported.
"""

import os

# CRITICAL: Set this before any imports that might load settings
# This prevents Pydantic from loading the .env file in tests
os.environ["TESTING"] = "true"

# Set default env vars that all tests might need
os.environ.setdefault("EMAIL_PROVIDER", "log")
os.environ.setdefault("EMAIL_FROM_EMAIL", "noreply@example.com")
os.environ.setdefault("RECAPTCHA_SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402

from app.adapters.content_store.base import AbstractContentStore  # noqa: E402
from app.adapters.notification.base import (  # noqa: E402
    AbstractNotifier,
    NotificationMessage,
    NotificationResult,
)
from app.adapters.verification.base import AbstractHumanVerifier  # noqa: E402
from app.core.config import EmailSettings, IntakeSettings  # noqa: E402
from app.services.notification_content import (  # noqa: E402
    build_contact_message,
    build_work_view_message,
)
from app.services.submission_pipeline import EndpointPolicy  # noqa: E402

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeVerifier(AbstractHumanVerifier):
    """Verifier returning a fixed verdict and recording calls."""

    def __init__(self, verdict: bool = True) -> None:
        self.verdict = verdict
        self.calls: list[dict[str, Any]] = []

    async def verify(self, token: str, secret: str, *, remote_ip: str | None = None) -> bool:
        self.calls.append({"token": token, "secret": secret, "remote_ip": remote_ip})
        return self.verdict


class FakeContentStore(AbstractContentStore):
    """Content store recording documents, optionally failing every write."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.fail_with = fail_with
        self.created: list[tuple[str, dict[str, Any]]] = []

    async def create(self, collection: str, document: dict[str, Any]) -> str | None:
        if self.fail_with is not None:
            raise self.fail_with
        self.created.append((collection, document))
        return f"doc-{len(self.created)}"


class FakeNotifier(AbstractNotifier):
    """Notifier recording messages, optionally failing every send."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.fail_with = fail_with
        self.sent: list[NotificationMessage] = []

    async def send(self, message: NotificationMessage) -> NotificationResult:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)
        return NotificationResult(message_id=f"msg-{len(self.sent)}")


@pytest.fixture
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def content_store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def email_settings() -> EmailSettings:
    return EmailSettings(
        provider="log",
        from_email="noreply@example.com",
        recipient_email="team@example.com",
        company_name="Shadowine",
        company_address="1 Gallery Lane",
    )


@pytest.fixture
def intake_settings() -> IntakeSettings:
    return IntakeSettings(trust_forwarded_for=True, allow_client_address_override=False)


@pytest.fixture
def contact_policy() -> EndpointPolicy:
    return EndpointPolicy(
        name="contact",
        collection="contact-submissions",
        default_source="contact-form",
        require_verification=True,
        success_message="Message received!",
        message_builder=build_contact_message,
    )


@pytest.fixture
def work_view_policy() -> EndpointPolicy:
    return EndpointPolicy(
        name="work_view",
        collection="work-view-requests",
        default_source="work-view-request",
        require_verification=False,
        success_message="Request received!",
        message_builder=build_work_view_message,
    )



@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
