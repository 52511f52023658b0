from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe.

    Not rate limited and touches no adapter, so it stays cheap for load
    balancers polling the instance.

    Returns:
        dict: ``{"status": "ok"}``.
    """

    return {"status": "ok"}
