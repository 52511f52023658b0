"""Factory for the configured notification transport."""

from app.adapters.notification.base import AbstractNotifier
from app.adapters.notification.log_notifier import LogNotifier
from app.adapters.notification.ses import SesNotifier
from app.core.config import EmailSettings
from app.core.errors import ValidationAppError


def create_notifier(email_settings: EmailSettings) -> AbstractNotifier:
    """Instantiate the notification transport named by ``EMAIL_PROVIDER``.

    Returns:
        AbstractNotifier: Configured transport.

    Raises:
        ValidationAppError: If the provider is unknown.
    """
    provider = email_settings.provider.lower()

    if provider == "ses":
        return SesNotifier(
            from_email=email_settings.from_email,
            recipient_email=email_settings.resolved_recipient,
            region=email_settings.aws_region,
            access_key_id=email_settings.aws_access_key_id,
            secret_access_key=email_settings.aws_secret_access_key,
            timeout_seconds=email_settings.timeout_seconds,
        )

    if provider == "log":
        return LogNotifier(recipient_email=email_settings.resolved_recipient)

    raise ValidationAppError(
        code="notification_unknown_provider",
        message=f"Unknown notification provider: '{provider}'. Supported providers: ses, log",
    )
