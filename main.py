"""
PayPal IPN Verifier - Main Application Entry Point

This module initializes the FastAPI application that listens for PayPal
Instant Payment Notifications and verifies each one with PayPal before
acknowledging it.
"""

import structlog
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from api import webhooks
from api.middleware import log_api_entry
from core.dependencies import clear_settings, get_settings, init_settings
from core.logging import configure_logging
from core.metrics import init_metrics
from core.settings import Settings

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application startup and shutdown events."""
    settings = init_settings()
    log.info(
        "startup",
        app_name=settings.APP_NAME,
        sandbox=settings.PAYPAL_IPN_SANDBOX,
        ssl=settings.PAYPAL_IPN_SSL,
    )
    yield
    clear_settings()


async def health(settings: Settings = Depends(get_settings)):
    """Health check endpoint to verify API status."""
    return {
        "status": "ok",
        "app_name": settings.APP_NAME,
        "sandbox": settings.PAYPAL_IPN_SANDBOX,
        "environment": settings.ENVIRONMENT,
    }


API_PREFIX = "/api/v1"


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the listener application.

    ``settings`` decides what is wired at build time (debug mode, metrics);
    request handlers read the settings loaded by the lifespan.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="PayPal IPN Verifier",
        description="Receives PayPal Instant Payment Notifications and verifies them with PayPal.",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    if settings.METRICS_ENABLED:
        init_metrics(app)

    app.middleware("http")(log_api_entry)
    app.get("/health")(health)
    app.include_router(webhooks.router, prefix=API_PREFIX)
    return app


app = create_app()


def main():
    configure_logging()
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
