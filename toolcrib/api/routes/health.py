"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Depends

from toolcrib.api.dependencies import get_container
from toolcrib.application.dto.responses import HealthResponse
from toolcrib.application.services import ServiceContainer
from toolcrib.config import get_logger
from toolcrib.core.exceptions import PersistenceError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check(
    container: ServiceContainer = Depends(get_container),
) -> HealthResponse:
    """
    Service status, uptime and database reachability.

    Reports "degraded" rather than failing when the database is unreachable.
    """
    database = "unknown"
    if container.pool is not None:
        try:
            async with container.pool.acquire() as conn:
                await conn.execute("SELECT 1")
            database = "ok"
        except PersistenceError as e:
            logger.warning("health_database_unreachable", error=str(e))
            database = "unavailable"

    return HealthResponse(
        status="healthy" if database != "unavailable" else "degraded",
        version=container.settings.app_version,
        uptime_seconds=time.time() - _start_time,
        database=database,
    )
