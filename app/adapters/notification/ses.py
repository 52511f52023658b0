"""AWS SES notification adapter."""

from __future__ import annotations

import anyio
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.adapters.notification.base import (
    AbstractNotifier,
    NotificationMessage,
    NotificationResult,
)
from app.core.errors import NotificationAppError


class SesNotifier(AbstractNotifier):
    """Send notifications through SES ``SendEmail``.

    boto3 is synchronous, so each send runs in a worker thread. Connect and
    read timeouts are bounded and botocore retries are disabled: a slow or
    failing transport surfaces as a failure instead of stalling the request.
    """

    def __init__(
        self,
        *,
        from_email: str,
        recipient_email: str,
        region: str,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        timeout_seconds: float = 5.0,
        client=None,
    ) -> None:
        """Initialize the SES client.

        Args:
            from_email: Verified SES sender address.
            recipient_email: Address receiving the notifications.
            region: AWS region hosting the SES identity.
            access_key_id: Explicit credentials; the default chain is used when omitted.
            secret_access_key: Secret matching ``access_key_id``.
            timeout_seconds: Connect and read timeout for the SES call.
            client: Prebuilt SES client (tests inject a stub).
        """
        self.from_email = from_email
        self.recipient_email = recipient_email
        self._client = client or boto3.client(
            "ses",
            region_name=region,
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_access_key or None,
            config=Config(
                connect_timeout=timeout_seconds,
                read_timeout=timeout_seconds,
                retries={"max_attempts": 1, "mode": "standard"},
            ),
        )

    async def send(self, message: NotificationMessage) -> NotificationResult:
        def _send_email() -> dict:
            return self._client.send_email(
                Source=self.from_email,
                Destination={"ToAddresses": [self.recipient_email]},
                Message={
                    "Subject": {"Data": message.subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": message.text_body, "Charset": "UTF-8"}},
                },
                ReplyToAddresses=[message.reply_to],
            )

        try:
            response = await anyio.to_thread.run_sync(_send_email)
        except (BotoCoreError, ClientError) as exc:
            raise NotificationAppError(
                code="notification_transport_error",
                message=f"SES send failed: {type(exc).__name__}",
            ) from exc

        message_id = response.get("MessageId")
        if not message_id:
            raise NotificationAppError(
                code="notification_missing_id",
                message="SES response did not include a MessageId",
            )
        return NotificationResult(message_id=message_id)
