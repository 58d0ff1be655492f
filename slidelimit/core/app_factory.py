"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated app instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from slidelimit.api.routes import health_router, limits_router
from slidelimit.core.config import settings
from slidelimit.core.exception_handlers import setup_exception_handlers
from slidelimit.core.logging import configure_logging
from slidelimit.core.middleware import request_id_middleware


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="slidelimit",
        description=(
            "Dual-threshold sliding-window rate limiting. Requests are counted per "
            "API key (X-API-Key) or client IP and checked against a short window "
            "limit and a long observation-period quota."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(limits_router, prefix="/v1")
    app.include_router(health_router)

    return app
