"""Application lifespan: startup and shutdown wiring.

No business logic here: shared HTTP client, Redis change feed and its
WebSocket relay, telemetry, and the database engine.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from dealroom.api.websocket import ConnectionManager
from dealroom.core.config import get_settings
from dealroom.infrastructure.messaging.redis_pubsub import (
    DocumentChangePublisher,
    run_document_change_broadcast,
    set_change_publisher,
)
from dealroom.infrastructure.persistence import database
from dealroom.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    set_telemetry,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup, yield, then shut down in reverse order."""
    settings = get_settings()

    # ---- Startup ----
    # Shared client for signed-URL fetches (connection reuse).
    app.state.http_client = httpx.AsyncClient(timeout=settings.download_timeout_seconds)
    app.state.ws_manager = ConnectionManager()
    app.state.change_publisher = None
    app.state.change_broadcast_task = None

    if settings.redis_enabled:
        publisher = DocumentChangePublisher()
        await publisher.connect()
        set_change_publisher(publisher)
        app.state.change_publisher = publisher
        app.state.change_broadcast_task = asyncio.create_task(
            run_document_change_broadcast(app)
        )

    if settings.telemetry_enabled:
        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_sqlalchemy(database.get_engine())
        logger.info("Telemetry initialized")

    yield

    # ---- Shutdown ----
    await app.state.http_client.aclose()
    app.state.http_client = None

    task = app.state.change_broadcast_task
    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Document change broadcast task stopped")

    if app.state.change_publisher is not None:
        await app.state.change_publisher.disconnect()
        set_change_publisher(None)

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)

    await database.dispose_engine()
