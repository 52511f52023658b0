"""Tests for sensitive data filtering and request correlation in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_sensitive_filter_redacts_secrets_and_tokens():
    """Ensure verification tokens and provider secrets never reach the sink."""

    logger, stream = _capture("test_redaction")

    logger.info(
        "verification_event",
        extra={
            "recaptcha_token": "03AGdBq-token",
            "secret_key": "6Lc-secret",
            "api_token": "cms-token",
            "safe_field": "visible",
        },
    )

    output = stream.getvalue()

    assert "03AGdBq-token" not in output
    assert "6Lc-secret" not in output
    assert "cms-token" not in output
    assert "[REDACTED]" in output
    assert "visible" in output


def test_sensitive_filter_redacts_submitter_content():
    """Ensure phone numbers and message bodies are redacted."""

    logger, stream = _capture("test_submission_redaction")

    logger.info(
        "notification.logged",
        extra={
            "phone": "+1 555 0100",
            "text_body": "NAME: Ann\nMESSAGE: call me",
            "message_id": "local-1",
        },
    )

    output = stream.getvalue()

    assert "555 0100" not in output
    assert "call me" not in output
    assert "local-1" in output


def test_sensitive_filter_allows_safe_fields():
    """Verify safe fields pass through unmodified."""

    logger, stream = _capture("test_safe_fields")

    logger.info(
        "safe_event",
        extra={
            "request_id": "req-123",
            "endpoint": "contact",
            "status_code": 200,
            "retry_after_s": 3600,
        },
    )

    payload = json.loads(stream.getvalue())

    assert payload["request_id"] == "req-123"
    assert payload["endpoint"] == "contact"
    assert payload["retry_after_s"] == 3600
    assert "[REDACTED]" not in stream.getvalue()


def test_sensitive_filter_redacts_nested_dicts():
    """Ensure nested sensitive fields are redacted."""

    logger, stream = _capture("test_nested")

    logger.info(
        "nested_event",
        extra={
            "headers": {
                "authorization": "Bearer secret-key",
                "user-agent": "pytest",
            },
        },
    )

    output = stream.getvalue()

    assert "secret-key" not in output
    assert "[REDACTED]" in output
    assert "pytest" in output


def test_request_id_from_context_is_attached():
    logger, stream = _capture("test_request_id")

    set_request_id("ctx-req-1")
    try:
        logger.info("with_context")
    finally:
        clear_request_id()
    logger.info("without_context")

    first, second = (json.loads(line) for line in stream.getvalue().splitlines())
    assert first["request_id"] == "ctx-req-1"
    assert "request_id" not in second


def test_hash_identifier_is_stable_and_opaque():
    digest = hash_identifier("203.0.113.7")

    assert digest == hash_identifier("203.0.113.7")
    assert digest != hash_identifier("203.0.113.8")
    assert "203.0.113.7" not in digest
    assert len(digest) == 16
