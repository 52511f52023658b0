"""Rate limit storage adapters.

The limiter starts with an in-process store; a shared store (e.g., Redis)
can replace it behind the same interface without changing the policy layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimitStore, RateWindowEntry
from app.adapters.rate_limit.in_memory import InMemoryRateLimitStore

__all__ = [
    "AbstractRateLimitStore",
    "InMemoryRateLimitStore",
    "RateWindowEntry",
]
