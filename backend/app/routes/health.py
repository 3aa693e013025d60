"""
Blog Backend — Health Check Route
===================================

What:  Liveness endpoint for container health checks.
How:   Checks the two things every write path needs: the document store
       (SELECT 1) and a writable upload directory. Either one failing makes
       the service unhealthy and the endpoint answers 503.
"""

import logging
import os
import time
from pathlib import Path

from fastapi import APIRouter, Response
from sqlalchemy import text

from app import __version__
from app.config import settings
from app.database import engine
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

STARTED_AT = time.monotonic()


async def _store_reachable() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Health check: document store unreachable: %s", str(e))
        return False
    return True


def _storage_writable() -> bool:
    root = Path(settings.storage_root)
    if root.is_dir() and os.access(root, os.W_OK):
        return True
    logger.warning("Health check: storage root %s is not a writable directory", root)
    return False


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(response: Response) -> HealthResponse:
    database_ok = await _store_reachable()
    storage_ok = _storage_writable()

    if not (database_ok and storage_ok):
        response.status_code = 503

    return HealthResponse(
        status="healthy" if database_ok and storage_ok else "unhealthy",
        version=__version__,
        database="connected" if database_ok else "disconnected",
        storage="writable" if storage_ok else "unavailable",
        uptime_seconds=round(time.monotonic() - STARTED_AT, 2),
    )
