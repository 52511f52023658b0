"""Plain-text notification content for each intake endpoint."""

from __future__ import annotations

from typing import Callable

from app.adapters.notification.base import NotificationMessage
from app.core.config import EmailSettings
from app.schemas.intake import SubmissionPayload

MessageBuilder = Callable[[SubmissionPayload, EmailSettings], NotificationMessage]


def _footer(email_settings: EmailSettings) -> str:
    lines = ["---", email_settings.company_name]
    if email_settings.company_address:
        lines.append(email_settings.company_address)
    if email_settings.dashboard_url:
        lines.append(f"Dashboard: {email_settings.dashboard_url}")
    return "\n".join(lines)


def build_contact_message(payload: SubmissionPayload, email_settings: EmailSettings) -> NotificationMessage:
    """Notification for a contact form submission."""

    text = "\n".join(
        [
            "New Contact Form Submission",
            "",
            "Hello Team,",
            "",
            "You have received a new message from the website contact form.",
            "",
            f"NAME: {payload.name}",
            f"EMAIL: {payload.email}",
            f"PHONE: {payload.phone or 'N/A'}",
            f"PAGE: {payload.page or 'N/A'}",
            "MESSAGE:",
            payload.message or "",
            "",
            _footer(email_settings),
        ]
    )
    return NotificationMessage(
        subject=f"New Contact Form Submission from {payload.name}",
        text_body=text,
        reply_to=payload.email or email_settings.from_email,
    )


def build_work_view_message(payload: SubmissionPayload, email_settings: EmailSettings) -> NotificationMessage:
    """Notification for a private work view request."""

    work_name = payload.work_name or "Unspecified work"
    text = "\n".join(
        [
            "Private Viewing Access Request",
            "",
            "Hello Team,",
            "",
            "A visitor has requested private viewing access for one of your works.",
            "",
            f"REQUESTED WORK: {work_name}",
            f"NAME: {payload.name}",
            f"EMAIL: {payload.email}",
            "MESSAGE:",
            payload.message or "",
            "",
            "Reply directly to this email to share the secure viewing link.",
            "",
            _footer(email_settings),
        ]
    )
    return NotificationMessage(
        subject=f"Private Work View Request - {work_name} from {payload.name}",
        text_body=text,
        reply_to=payload.email or email_settings.from_email,
    )
