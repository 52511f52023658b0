"""Notification transports - abstracts over the outbound email provider."""

from app.adapters.notification.base import (
    AbstractNotifier,
    NotificationMessage,
    NotificationResult,
)
from app.adapters.notification.factory import create_notifier
from app.adapters.notification.log_notifier import LogNotifier
from app.adapters.notification.ses import SesNotifier

__all__ = [
    "AbstractNotifier",
    "LogNotifier",
    "NotificationMessage",
    "NotificationResult",
    "SesNotifier",
    "create_notifier",
]
