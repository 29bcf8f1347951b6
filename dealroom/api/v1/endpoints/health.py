"""Health check endpoints for liveness and readiness probes."""

import logging

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from dealroom.infrastructure.persistence.database import get_session_factory
from dealroom.schemas.health import HealthResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse:
    """Check the metadata database; report whether the change feed is connected."""
    database_ok = True
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Readiness check: database unreachable")
        database_ok = False
    publisher = getattr(request.app.state, "change_publisher", None)
    return ReadinessResponse(
        status="ok" if database_ok else "not_ready",
        database=database_ok,
        change_feed=publisher is not None and publisher.is_available(),
    )
