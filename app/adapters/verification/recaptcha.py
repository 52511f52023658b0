"""Google reCAPTCHA verification adapter."""

from __future__ import annotations

import logging

import httpx

from app.adapters.verification.base import AbstractHumanVerifier

logger = logging.getLogger(__name__)

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class RecaptchaVerifier(AbstractHumanVerifier):
    """Verify reCAPTCHA (v2 or v3) tokens against the ``siteverify`` API.

    A single POST per token with a bounded timeout; any failure is reported
    as "not verified" so callers only ever deal with a boolean.
    """

    def __init__(
        self,
        *,
        verify_url: str = RECAPTCHA_VERIFY_URL,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            verify_url: Provider verification endpoint.
            timeout_seconds: Total timeout for the verification request.
            transport: Optional httpx transport (tests use ``httpx.MockTransport``).
        """
        self.verify_url = verify_url
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def verify(self, token: str, secret: str, *, remote_ip: str | None = None) -> bool:
        if not token:
            return False

        form = {"secret": secret, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(self.verify_url, data=form)
        except httpx.TimeoutException:
            logger.warning("verification.timeout", extra={"timeout_s": self.timeout_seconds})
            return False
        except httpx.HTTPError as exc:
            logger.warning("verification.transport_error", extra={"error_type": type(exc).__name__})
            return False

        if not response.is_success:
            logger.warning("verification.bad_status", extra={"status_code": response.status_code})
            return False

        try:
            result = response.json()
        except ValueError:
            logger.warning("verification.invalid_body")
            return False

        if not isinstance(result, dict) or result.get("success") is not True:
            error_codes = result.get("error-codes", []) if isinstance(result, dict) else []
            logger.debug("verification.rejected", extra={"error_codes": error_codes})
            return False

        return True
