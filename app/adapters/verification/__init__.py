"""Human verification adapters."""

from app.adapters.verification.base import AbstractHumanVerifier
from app.adapters.verification.recaptcha import RecaptchaVerifier

__all__ = [
    "AbstractHumanVerifier",
    "RecaptchaVerifier",
]
