"""Composition root for the intake endpoints.

Wires the rate limiter in front of one submission pipeline per endpoint and
turns pipeline outcomes into HTTP-facing bodies. This is the only service
that looks at the transport request (addresses, user agent, request state).
"""

from __future__ import annotations

import logging
from typing import Mapping

from fastapi import Request

from app.adapters.content_store.base import AbstractContentStore
from app.adapters.content_store.http_store import HttpContentStore
from app.adapters.content_store.in_memory import InMemoryContentStore
from app.adapters.notification.factory import create_notifier
from app.adapters.rate_limit.in_memory import InMemoryRateLimitStore
from app.adapters.verification.recaptcha import RecaptchaVerifier
from app.core.config import ContentStoreSettings, IntakeSettings, Settings
from app.core.errors import ThrottledAppError
from app.schemas.intake import IntakeSuccessResponse, SubmissionPayload
from app.services.notification_content import build_contact_message, build_work_view_message
from app.services.rate_limiter import RateLimitDecision, RateLimiter
from app.services.submission_pipeline import (
    EndpointPolicy,
    SubmissionContext,
    SubmissionPipeline,
)
from app.utils.client_address import (
    resolve_client_address,
    resolve_rate_limit_key,
    resolve_user_agent,
)

logger = logging.getLogger(__name__)

CONTACT_ENDPOINT = "contact"
WORK_VIEW_ENDPOINT = "work_view"

THROTTLED_MESSAGE = "Too many requests. Please try again later."


class IntakeService:
    """Admission and submission entry point used by the intake routes.

    Attributes:
        limiter: Per-client rate limiter, or None when rate limiting is disabled.
        pipelines: Submission pipeline per endpoint name.
        include_headers: Whether X-RateLimit-* headers are attached to responses.
    """

    def __init__(
        self,
        *,
        limiter: RateLimiter | None,
        pipelines: Mapping[str, SubmissionPipeline],
        intake_settings: IntakeSettings,
        include_headers: bool = True,
    ) -> None:
        self.limiter = limiter
        self.pipelines = dict(pipelines)
        self.intake_settings = intake_settings
        self.include_headers = include_headers

    def admit(self, request: Request) -> RateLimitDecision | None:
        """Apply the rate limiter to the current request.

        The decision is stored on ``request.state`` so middleware can attach
        rate-limit headers to whatever response the request ends with.

        Raises:
            ThrottledAppError: When the client exhausted its window budget.
        """
        if self.limiter is None:
            return None

        key = resolve_rate_limit_key(
            request,
            trust_forwarded_for=self.intake_settings.trust_forwarded_for,
            trusted_proxy_count=self.intake_settings.trusted_proxy_count,
        )
        decision = self.limiter.admit(key)

        if self.include_headers:
            request.state.rate_limit_headers = decision.headers()

        if not decision.allowed:
            raise ThrottledAppError(
                code="rate_limited",
                message=THROTTLED_MESSAGE,
                details={
                    "retry_after": decision.retry_after_seconds or 1,
                    "reset_time": decision.reset_at_iso,
                },
            )
        return decision

    def build_context(self, payload: SubmissionPayload, request: Request) -> SubmissionContext:
        return SubmissionContext(
            client_address=resolve_client_address(
                request,
                override=payload.client_address,
                allow_override=self.intake_settings.allow_client_address_override,
                trust_forwarded_for=self.intake_settings.trust_forwarded_for,
                trusted_proxy_count=self.intake_settings.trusted_proxy_count,
            ),
            user_agent=resolve_user_agent(request),
        )

    async def submit(
        self,
        endpoint: str,
        payload: SubmissionPayload,
        request: Request,
    ) -> IntakeSuccessResponse:
        """Run the endpoint's pipeline and shape the success body.

        Pipeline errors propagate unchanged; the exception handlers map them
        to status codes.
        """
        pipeline = self.pipelines[endpoint]
        result = await pipeline.process(payload, self.build_context(payload, request))
        return IntakeSuccessResponse(
            success=result.success,
            message=pipeline.policy.success_message,
            messageId=result.message_id,
        )


def _build_content_store(store_settings: ContentStoreSettings) -> AbstractContentStore:
    if store_settings.base_url:
        return HttpContentStore(
            store_settings.base_url,
            api_token=store_settings.api_token,
            timeout_seconds=store_settings.timeout_seconds,
        )
    logger.warning(
        "intake.content_store_in_memory",
        extra={"hint": "Set CONTENT_STORE_BASE_URL to persist submissions"},
    )
    return InMemoryContentStore()


def build_intake_service(settings: Settings) -> IntakeService:
    """Build the intake service and its collaborators from settings."""

    limiter = None
    if settings.rate_limit.enabled:
        limiter = RateLimiter(
            InMemoryRateLimitStore(),
            limit=settings.rate_limit.max_requests,
            window_seconds=settings.rate_limit.window_seconds,
        )

    verifier = RecaptchaVerifier(
        verify_url=settings.recaptcha.verify_url,
        timeout_seconds=settings.recaptcha.timeout_seconds,
    )
    store = _build_content_store(settings.content_store)
    notifier = create_notifier(settings.email)

    policies = [
        EndpointPolicy(
            name=CONTACT_ENDPOINT,
            collection=settings.content_store.contact_collection,
            default_source="contact-form",
            require_verification=settings.intake.contact_requires_verification,
            success_message="Message received! We'll get back to you faster than your coffee gets cold.",
            message_builder=build_contact_message,
        ),
        EndpointPolicy(
            name=WORK_VIEW_ENDPOINT,
            collection=settings.content_store.work_view_collection,
            default_source="work-view-request",
            require_verification=settings.intake.work_view_requires_verification,
            success_message="Request received! We'll review it and get back to you shortly.",
            message_builder=build_work_view_message,
        ),
    ]

    pipelines = {
        policy.name: SubmissionPipeline(
            policy,
            verifier=verifier,
            store=store,
            notifier=notifier,
            email_settings=settings.email,
            verification_secret=settings.recaptcha.secret_key,
        )
        for policy in policies
    }

    return IntakeService(
        limiter=limiter,
        pipelines=pipelines,
        intake_settings=settings.intake,
        include_headers=settings.rate_limit.include_headers,
    )


def get_intake_service(request: Request) -> IntakeService:
    """FastAPI dependency returning the app's intake service."""

    return request.app.state.intake_service
