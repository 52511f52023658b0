"""Notification adapter that only logs, for local development."""

from __future__ import annotations

import logging
import uuid

from app.adapters.notification.base import (
    AbstractNotifier,
    NotificationMessage,
    NotificationResult,
)
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


class LogNotifier(AbstractNotifier):
    """Record notifications in the log instead of sending them."""

    def __init__(self, recipient_email: str) -> None:
        self.recipient_email = recipient_email

    async def send(self, message: NotificationMessage) -> NotificationResult:
        message_id = f"local-{uuid.uuid4().hex}"
        logger.info(
            "notification.logged",
            extra={
                "message_id": message_id,
                "subject": message.subject,
                "recipient_hash": hash_identifier(self.recipient_email),
                "text_body": message.text_body,
            },
        )
        return NotificationResult(message_id=message_id)
