from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (services, lifespan, middleware, handlers,
routers) so tests can build an app around their own intake service.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import health_router, intake_router
from app.core.config import Settings, settings as default_settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import rate_limit_headers_middleware, request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.services.intake_service import IntakeService, build_intake_service
from app.services.rate_limiter import RateLimitSweeper

logger = logging.getLogger(__name__)


def _build_sweeper(service: IntakeService, app_settings: Settings) -> RateLimitSweeper | None:
    if service.limiter is None:
        return None
    return RateLimitSweeper(
        service.limiter.store,
        interval_seconds=app_settings.rate_limit.sweep_interval_seconds,
        clock=service.limiter.clock,
    )


def create_app(
    intake_service: IntakeService | None = None,
    app_settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        intake_service: Prebuilt intake service (tests inject fakes); built
            from settings when omitted.
        app_settings: Settings to use; defaults to the global settings.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    service = intake_service or build_intake_service(cfg)
    sweeper = _build_sweeper(service, cfg)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        if sweeper is not None:
            sweeper.start()
            logger.info(
                "rate_limit.sweeper_started",
                extra={"interval_s": cfg.rate_limit.sweep_interval_seconds},
            )
        try:
            yield
        finally:
            if sweeper is not None:
                await sweeper.stop()
                logger.info("rate_limit.sweeper_stopped")

    app = FastAPI(
        title="Contact Intake API",
        description=(
            "Public write endpoints for contact form submissions and private "
            "work view requests. Each client address may submit a limited "
            "number of times per window; submissions are validated, checked "
            "for human origin, stored in the content backend and forwarded "
            "to the site owners by email."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.intake_service = service
    app.state.rate_limit_sweeper = sweeper

    # Middleware (last registered runs first)
    app.middleware("http")(rate_limit_headers_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(intake_router)
    app.include_router(health_router)

    # OpenAPI customizations (tags, documented headers)
    apply_openapi_customizations(app)

    return app
