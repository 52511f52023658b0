"""Tests for the ordered submission pipeline.

Validation and verification failures must leave no side effects, persistence
is best-effort and notification failures are terminal.
"""

import asyncio

import pytest

from app.core.errors import (
    NotificationAppError,
    PersistenceAppError,
    ValidationAppError,
    VerificationAppError,
    VerificationConfigAppError,
)
from app.schemas.intake import SubmissionPayload
from app.services.submission_pipeline import (
    SubmissionContext,
    SubmissionPipeline,
)

CONTEXT = SubmissionContext(client_address="203.0.113.7", user_agent="pytest-agent")


@pytest.fixture
def make_pipeline(verifier, content_store, notifier, email_settings, fixed_now):
    def _make(policy, secret: str | None = "test-secret") -> SubmissionPipeline:
        return SubmissionPipeline(
            policy,
            verifier=verifier,
            store=content_store,
            notifier=notifier,
            email_settings=email_settings,
            verification_secret=secret,
            now=lambda: fixed_now,
        )

    return _make


def _payload(**overrides) -> SubmissionPayload:
    data = {
        "name": "Ann",
        "email": "ann@example.com",
        "message": "Hello",
        "recaptchaToken": "tok",
    }
    data.update(overrides)
    return SubmissionPayload.model_validate({k: v for k, v in data.items() if v is not None})


class TestValidation:
    """Structural checks run before anything else."""

    @pytest.mark.parametrize("missing", ["name", "email", "message"])
    def test_missing_field_is_rejected_without_side_effects(
        self, make_pipeline, contact_policy, verifier, content_store, notifier, missing
    ):
        pipeline = make_pipeline(contact_policy)

        with pytest.raises(ValidationAppError) as exc_info:
            asyncio.run(pipeline.process(_payload(**{missing: None}), CONTEXT))

        assert exc_info.value.code == "missing_required_fields"
        assert verifier.calls == []
        assert content_store.created == []
        assert notifier.sent == []

    def test_whitespace_only_field_counts_as_missing(self, make_pipeline, contact_policy):
        pipeline = make_pipeline(contact_policy)

        with pytest.raises(ValidationAppError):
            asyncio.run(pipeline.process(_payload(message="   "), CONTEXT))

    @pytest.mark.parametrize("email", ["foo@bar", "no-at-sign.com", "a b@example.com", "a@@example.com"])
    def test_invalid_email_is_rejected(self, make_pipeline, contact_policy, notifier, email):
        pipeline = make_pipeline(contact_policy)

        with pytest.raises(ValidationAppError) as exc_info:
            asyncio.run(pipeline.process(_payload(email=email), CONTEXT))

        assert exc_info.value.code == "invalid_email"
        assert exc_info.value.status_code == 400
        assert notifier.sent == []


class TestVerification:
    """Human verification gate."""

    def test_missing_token_is_rejected(self, make_pipeline, contact_policy, verifier, notifier):
        pipeline = make_pipeline(contact_policy)

        with pytest.raises(VerificationAppError) as exc_info:
            asyncio.run(pipeline.process(_payload(recaptchaToken=None), CONTEXT))

        assert exc_info.value.code == "verification_required"
        assert verifier.calls == []
        assert notifier.sent == []

    def test_missing_secret_is_server_error(self, make_pipeline, contact_policy, verifier, content_store):
        pipeline = make_pipeline(contact_policy, secret=None)

        with pytest.raises(VerificationConfigAppError) as exc_info:
            asyncio.run(pipeline.process(_payload(), CONTEXT))

        assert exc_info.value.code == "verification_not_configured"
        assert exc_info.value.status_code == 500
        assert verifier.calls == []
        assert content_store.created == []

    def test_rejected_token_leaves_no_side_effects(
        self, make_pipeline, contact_policy, verifier, content_store, notifier
    ):
        verifier.verdict = False
        pipeline = make_pipeline(contact_policy)

        with pytest.raises(VerificationAppError) as exc_info:
            asyncio.run(pipeline.process(_payload(), CONTEXT))

        assert exc_info.value.code == "verification_failed"
        assert content_store.created == []
        assert notifier.sent == []

    def test_verifier_receives_token_secret_and_address(self, make_pipeline, contact_policy, verifier):
        asyncio.run(make_pipeline(contact_policy).process(_payload(), CONTEXT))

        assert verifier.calls == [{"token": "tok", "secret": "test-secret", "remote_ip": "203.0.113.7"}]

    def test_unknown_address_is_not_sent_to_verifier(self, make_pipeline, contact_policy, verifier):
        asyncio.run(make_pipeline(contact_policy).process(_payload(), SubmissionContext()))

        assert verifier.calls[0]["remote_ip"] is None

    def test_policy_without_verification_skips_token(
        self, make_pipeline, work_view_policy, verifier, notifier
    ):
        pipeline = make_pipeline(work_view_policy, secret=None)

        result = asyncio.run(pipeline.process(_payload(recaptchaToken=None, workName="Nocturne"), CONTEXT))

        assert result.success is True
        assert verifier.calls == []
        assert notifier.sent[0].subject == "Private Work View Request - Nocturne from Ann"


class TestPersistenceAndNotification:
    """Best-effort persistence followed by the terminal notification."""

    def test_success_persists_record_and_notifies(
        self, make_pipeline, contact_policy, content_store, notifier
    ):
        result = asyncio.run(make_pipeline(contact_policy).process(_payload(page="/contact"), CONTEXT))

        assert result.success is True
        assert result.message_id == "msg-1"
        assert result.persisted is True

        collection, document = content_store.created[0]
        assert collection == "contact-submissions"
        assert document["name"] == "Ann"
        assert document["contactStatus"] == "new"
        assert "status" not in document
        assert document["source"] == "contact-form"
        assert document["page"] == "/contact"
        assert document["ipAddress"] == "203.0.113.7"
        assert document["userAgent"] == "pytest-agent"
        assert document["publishedAt"].startswith("2025-03-01T12:00:00")
        assert "createdAt" not in document
        assert "verificationToken" not in document
        assert len(notifier.sent) == 1

    def test_persistence_failure_still_notifies(self, make_pipeline, contact_policy, content_store, notifier):
        content_store.fail_with = PersistenceAppError(code="content_store_rejected", message="HTTP 500")

        result = asyncio.run(make_pipeline(contact_policy).process(_payload(), CONTEXT))

        assert result.success is True
        assert result.persisted is False
        assert len(notifier.sent) == 1

    def test_unexpected_persistence_error_still_notifies(
        self, make_pipeline, contact_policy, content_store, notifier
    ):
        content_store.fail_with = RuntimeError("disk on fire")

        result = asyncio.run(make_pipeline(contact_policy).process(_payload(), CONTEXT))

        assert result.persisted is False
        assert result.message_id == "msg-1"

    def test_notification_failure_is_terminal_after_persisting(
        self, make_pipeline, contact_policy, content_store, notifier
    ):
        notifier.fail_with = NotificationAppError(code="notification_transport_error", message="SES down")

        with pytest.raises(NotificationAppError) as exc_info:
            asyncio.run(make_pipeline(contact_policy).process(_payload(), CONTEXT))

        assert exc_info.value.code == "notification_failed"
        assert exc_info.value.message == "Failed to send email. Please try again later."
        assert len(content_store.created) == 1

    def test_unexpected_notification_error_is_wrapped(self, make_pipeline, contact_policy, notifier):
        notifier.fail_with = TimeoutError()

        with pytest.raises(NotificationAppError) as exc_info:
            asyncio.run(make_pipeline(contact_policy).process(_payload(), CONTEXT))

        assert exc_info.value.status_code == 500
