from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.intake import router as intake_router

__all__ = ["health_router", "intake_router"]
