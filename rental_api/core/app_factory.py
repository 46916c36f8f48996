"""Application factory for the FastAPI app.

The factory is the composition root: it builds the per-process rate limiter
and the in-memory services once, stores them on ``app.state``, and every
request handler reaches them from there.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from rental_api.adapters.rate_limit.base import AbstractRateLimiter
from rental_api.api.routes import auth_router, health_router, properties_router
from rental_api.core.config import settings
from rental_api.core.exception_handlers import setup_exception_handlers
from rental_api.core.logging import configure_logging
from rental_api.core.middleware import request_id_middleware
from rental_api.core.openapi import apply_openapi_customizations
from rental_api.core.rate_limit import build_rate_limiter
from rental_api.services.accounts import AccountDirectory
from rental_api.services.property_views import PropertyViewCounter

logger = logging.getLogger(__name__)


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter to use instead of one built from settings
            (tests inject limiters with a controllable clock).
        configure_logs: Whether to (re)configure the root logger.

    Returns:
        Configured FastAPI app with state, middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(settings.log)

    app = FastAPI(
        title="Rental Marketplace API",
        description=(
            "Auth and property endpoints of the rental marketplace. Sensitive "
            "endpoints are protected by per-route fixed-window rate limits and "
            "report their quota through X-RateLimit-* headers."
        ),
        version="0.1.0",
    )

    # Per-process state owned by this app instance
    app.state.rate_limiter = (
        rate_limiter if rate_limiter is not None else build_rate_limiter(settings.app)
    )
    app.state.accounts = AccountDirectory()
    app.state.property_views = PropertyViewCounter()

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(properties_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    logger.info(
        "app.created",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "rate_limiter": type(app.state.rate_limiter).__name__,
        },
    )
    return app
