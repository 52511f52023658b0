"""Submission pipeline: validate → verify human → persist → notify.

Each stage is a gate with its own failure criticality:
- Validation and human verification are terminal and run before any side
  effect, so a rejected submission never touches the store or the transport.
- Persistence is best-effort: a failed write is logged and the pipeline
  continues.
- Notification is terminal: its failure is the caller's failure.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from app.adapters.content_store.base import AbstractContentStore
from app.adapters.notification.base import AbstractNotifier
from app.adapters.verification.base import AbstractHumanVerifier
from app.core.config import EmailSettings
from app.core.errors import (
    NotificationAppError,
    PersistenceAppError,
    ValidationAppError,
    VerificationAppError,
    VerificationConfigAppError,
)
from app.core.logging import hash_identifier
from app.schemas.intake import SubmissionPayload, SubmissionRecord
from app.services.notification_content import MessageBuilder

logger = logging.getLogger(__name__)

# local-part@domain.tld, no whitespace, exactly one "@"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MISSING_FIELDS_MESSAGE = "Missing required fields. Please provide name, email and message."
INVALID_EMAIL_MESSAGE = "Invalid email format."
TOKEN_REQUIRED_MESSAGE = "reCAPTCHA verification is required."
TOKEN_REJECTED_MESSAGE = "reCAPTCHA verification failed. Please try again."
SERVER_CONFIG_MESSAGE = "Server configuration error. Please contact administrator."
NOTIFICATION_FAILED_MESSAGE = "Failed to send email. Please try again later."


@dataclass(frozen=True)
class EndpointPolicy:
    """What one intake endpoint requires and produces.

    Attributes:
        name: Endpoint identifier used in logs ("contact", "work_view").
        collection: Content backend collection receiving records.
        default_source: Record ``source`` when the client sends none.
        require_verification: Whether a human verification token is mandatory.
        success_message: Message returned to the caller on success.
        message_builder: Builds the notification for a valid submission.
    """

    name: str
    collection: str
    default_source: str
    require_verification: bool
    success_message: str
    message_builder: MessageBuilder


@dataclass(frozen=True)
class SubmissionContext:
    """Request-derived values recorded alongside a submission."""

    client_address: str = "unknown"
    user_agent: str = "unknown"


@dataclass(frozen=True)
class SubmissionResult:
    """Successful pipeline outcome."""

    success: bool
    message_id: str
    persisted: bool


class SubmissionPipeline:
    """Run one submission through the ordered intake stages.

    Attributes:
        policy: Endpoint policy (verification requirement, collection, content).
        verifier: Human verification adapter.
        store: Content backend adapter.
        notifier: Outbound notification transport.
    """

    def __init__(
        self,
        policy: EndpointPolicy,
        *,
        verifier: AbstractHumanVerifier,
        store: AbstractContentStore,
        notifier: AbstractNotifier,
        email_settings: EmailSettings,
        verification_secret: str | None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        """Initialize the pipeline with its collaborators.

        Args:
            policy: Endpoint policy.
            verifier: Human verification adapter.
            store: Content backend used for best-effort persistence.
            notifier: Notification transport.
            email_settings: Sender identity and footer content for notifications.
            verification_secret: Server-held verification secret; a missing
                secret only fails submissions that require verification.
            now: Timestamp source for ``created_at``.
        """
        self.policy = policy
        self.verifier = verifier
        self.store = store
        self.notifier = notifier
        self.email_settings = email_settings
        self._verification_secret = verification_secret
        self._now = now

    def _log_extra(self, payload: SubmissionPayload, **fields: object) -> dict[str, object]:
        extra: dict[str, object] = {"endpoint": self.policy.name}
        if payload.email:
            extra["email_hash"] = hash_identifier(payload.email.lower())
        extra.update(fields)
        return extra

    def _validate(self, payload: SubmissionPayload) -> None:
        """Check required fields and email syntax.

        Raises:
            ValidationAppError: If a required field is missing or the email is malformed.
        """
        missing = [field for field in ("name", "email", "message") if not getattr(payload, field)]
        if missing:
            logger.debug("pipeline.validation_failed", extra=self._log_extra(payload, missing=missing))
            raise ValidationAppError(
                code="missing_required_fields",
                message=MISSING_FIELDS_MESSAGE,
                details={"context": {"missing": missing}},
            )

        if not EMAIL_PATTERN.match(payload.email or ""):
            logger.debug("pipeline.validation_failed", extra=self._log_extra(payload, reason="invalid_email"))
            raise ValidationAppError(code="invalid_email", message=INVALID_EMAIL_MESSAGE)

    async def _verify(self, payload: SubmissionPayload, context: SubmissionContext) -> None:
        """Check the human verification token when the policy requires it.

        Raises:
            VerificationAppError: If the token is missing or was rejected.
            VerificationConfigAppError: If the server-side secret is not configured.
        """
        if not self.policy.require_verification:
            return

        token = payload.verification_token
        if not token:
            logger.debug("pipeline.verification_missing", extra=self._log_extra(payload))
            raise VerificationAppError(code="verification_required", message=TOKEN_REQUIRED_MESSAGE)

        if not self._verification_secret:
            logger.error(
                "pipeline.verification_secret_missing",
                extra=self._log_extra(payload, hint="Set RECAPTCHA_SECRET_KEY"),
            )
            raise VerificationConfigAppError(
                code="verification_not_configured",
                message=SERVER_CONFIG_MESSAGE,
            )

        remote_ip = context.client_address if context.client_address != "unknown" else None
        verified = await self.verifier.verify(token, self._verification_secret, remote_ip=remote_ip)
        if not verified:
            logger.info("pipeline.verification_failed", extra=self._log_extra(payload))
            raise VerificationAppError(code="verification_failed", message=TOKEN_REJECTED_MESSAGE)

    def _build_record(self, payload: SubmissionPayload, context: SubmissionContext) -> SubmissionRecord:
        timestamp = self._now()
        return SubmissionRecord(
            name=payload.name or "",
            email=payload.email or "",
            message=payload.message or "",
            phone=payload.phone,
            work_name=payload.work_name,
            contact_status="new",
            ip_address=context.client_address,
            user_agent=context.user_agent,
            source=payload.source or self.policy.default_source,
            page=payload.page,
            created_at=timestamp,
            published_at=timestamp,
        )

    async def _persist(self, payload: SubmissionPayload, context: SubmissionContext) -> bool:
        """Best-effort record creation; never raises.

        Returns:
            True when the content backend accepted the record.
        """
        record = self._build_record(payload, context)
        try:
            document_id = await self.store.create(self.policy.collection, record.to_document())
        except PersistenceAppError as exc:
            logger.error(
                "pipeline.persist_failed",
                extra=self._log_extra(payload, error_code=exc.code, error_message=exc.message),
            )
            return False
        except Exception as exc:
            # Any store failure is recovered here; the notification still goes out
            logger.error(
                "pipeline.persist_failed",
                extra=self._log_extra(payload, error_type=type(exc).__name__),
                exc_info=True,
            )
            return False

        logger.info(
            "pipeline.persisted",
            extra=self._log_extra(payload, collection=self.policy.collection, document_id=document_id),
        )
        return True

    async def _notify(self, payload: SubmissionPayload) -> str:
        """Send the notification and return the transport message id.

        Raises:
            NotificationAppError: Generic failure; transport details stay in the logs.
        """
        message = self.policy.message_builder(payload, self.email_settings)
        try:
            result = await self.notifier.send(message)
        except Exception as exc:
            error_code = exc.code if isinstance(exc, NotificationAppError) else type(exc).__name__
            logger.error(
                "pipeline.notify_failed",
                extra=self._log_extra(payload, error_code=error_code),
                exc_info=not isinstance(exc, NotificationAppError),
            )
            raise NotificationAppError(
                code="notification_failed",
                message=NOTIFICATION_FAILED_MESSAGE,
            ) from exc

        logger.info("pipeline.notified", extra=self._log_extra(payload, message_id=result.message_id))
        return result.message_id

    async def process(
        self,
        payload: SubmissionPayload,
        context: SubmissionContext | None = None,
    ) -> SubmissionResult:
        """Run the submission through all stages in order.

        Args:
            payload: Parsed submission body.
            context: Request-derived address and user agent.

        Returns:
            SubmissionResult carrying the transport message id.

        Raises:
            ValidationAppError: Missing fields or malformed email (400).
            VerificationAppError: Token missing or rejected (400).
            VerificationConfigAppError: Verification secret not configured (500).
            NotificationAppError: Notification could not be sent (500).
        """
        context = context or SubmissionContext()

        # Step 1: Structural validation
        self._validate(payload)

        # Step 2: Human verification (per endpoint policy)
        await self._verify(payload, context)

        # Step 3: Persist (best-effort)
        persisted = await self._persist(payload, context)

        # Step 4: Notify (terminal on failure)
        message_id = await self._notify(payload)

        return SubmissionResult(success=True, message_id=message_id, persisted=persisted)
