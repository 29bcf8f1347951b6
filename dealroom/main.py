"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, middleware, routers.
Settings are loaded inside create_app() so tests can set env first.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from dealroom.api.v1 import api_router
from dealroom.core.config import get_settings
from dealroom.core.exception_handlers import register_exception_handlers
from dealroom.core.lifespan import create_lifespan
from dealroom.core.limiter import limiter
from dealroom.shared.telemetry.logging import setup_logging
from dealroom.shared.telemetry.telemetry import instrument_fastapi


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api/v1")

    if settings.telemetry_enabled:
        instrument_fastapi(app)

    return app


app = create_app()
