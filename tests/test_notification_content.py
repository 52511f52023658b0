"""Tests for notification subjects and bodies."""

from app.schemas.intake import SubmissionPayload
from app.services.notification_content import build_contact_message, build_work_view_message


def test_contact_message_contains_submission(email_settings) -> None:
    payload = SubmissionPayload(name="Ann", email="ann@example.com", message="Hello", page="/about")

    message = build_contact_message(payload, email_settings)

    assert message.subject == "New Contact Form Submission from Ann"
    assert message.reply_to == "ann@example.com"
    assert "NAME: Ann" in message.text_body
    assert "EMAIL: ann@example.com" in message.text_body
    assert "PHONE: N/A" in message.text_body
    assert "PAGE: /about" in message.text_body
    assert "Hello" in message.text_body
    assert "Shadowine" in message.text_body
    assert "1 Gallery Lane" in message.text_body


def test_work_view_message_names_requested_work(email_settings) -> None:
    payload = SubmissionPayload(
        name="Bob",
        email="bob@example.com",
        message="May I see it?",
        workName="Nocturne",
    )

    message = build_work_view_message(payload, email_settings)

    assert message.subject == "Private Work View Request - Nocturne from Bob"
    assert "REQUESTED WORK: Nocturne" in message.text_body


def test_work_view_message_without_work_name(email_settings) -> None:
    payload = SubmissionPayload(name="Bob", email="bob@example.com", message="Hi")

    message = build_work_view_message(payload, email_settings)

    assert "Unspecified work" in message.subject
