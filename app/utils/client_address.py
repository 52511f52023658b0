"""Client address resolution for rate limiting and submission records.

``X-Forwarded-For`` is only consulted when the operator declares the service
is behind trusted proxies. Each trusted proxy appends the address it saw, so
the client is the ``trusted_proxy_count``-th hop from the right; anything to
its left was written by the client and is ignored.
"""

from __future__ import annotations

from fastapi import Request

UNKNOWN_ADDRESS = "unknown"


def forwarded_client_hop(header_value: str | None, trusted_proxy_count: int = 1) -> str | None:
    """Return the hop appended by the outermost trusted proxy.

    Examples:
        >>> forwarded_client_hop("198.51.100.9, 203.0.113.7")
        '203.0.113.7'
        >>> forwarded_client_hop("198.51.100.9, 203.0.113.7, 10.0.0.1", trusted_proxy_count=2)
        '203.0.113.7'
        >>> forwarded_client_hop("203.0.113.7", trusted_proxy_count=2) is None
        True
    """
    if not header_value or trusted_proxy_count < 1:
        return None
    hops = [hop.strip() for hop in header_value.split(",")]
    if len(hops) < trusted_proxy_count:
        return None
    return hops[-trusted_proxy_count] or None


def transport_address(request: Request) -> str | None:
    """Peer address of the connection, if the server reported one."""

    return request.client.host if request.client and request.client.host else None


def observed_address(
    request: Request,
    *,
    trust_forwarded_for: bool,
    trusted_proxy_count: int = 1,
) -> str | None:
    """Address seen by the infrastructure: trusted forwarded hop, else the peer."""

    if trust_forwarded_for:
        forwarded = forwarded_client_hop(request.headers.get("x-forwarded-for"), trusted_proxy_count)
        if forwarded:
            return forwarded
    return transport_address(request)


def resolve_rate_limit_key(
    request: Request,
    *,
    trust_forwarded_for: bool,
    trusted_proxy_count: int = 1,
) -> str:
    """Client key used to bucket rate-limit state.

    Body-supplied addresses are never consulted here.

    Returns:
        Normalized address, or ``"unknown"`` when none is available.
    """
    address = observed_address(
        request,
        trust_forwarded_for=trust_forwarded_for,
        trusted_proxy_count=trusted_proxy_count,
    )
    return address.lower() if address else UNKNOWN_ADDRESS


def resolve_client_address(
    request: Request,
    *,
    override: str | None,
    allow_override: bool,
    trust_forwarded_for: bool,
    trusted_proxy_count: int = 1,
) -> str:
    """Address recorded on a stored submission.

    Precedence: body override (when allowed) > trusted forwarded hop >
    connection peer > ``"unknown"``.
    """
    if allow_override and override:
        return override
    return (
        observed_address(
            request,
            trust_forwarded_for=trust_forwarded_for,
            trusted_proxy_count=trusted_proxy_count,
        )
        or UNKNOWN_ADDRESS
    )


def resolve_user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or UNKNOWN_ADDRESS
