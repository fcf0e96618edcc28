"""Health endpoint."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from app.telemetry.tracing import SERVICE_VERSION

router = APIRouter(prefix="/api/v1")
logger = logging.getLogger("problems_api")

_start_time = datetime.now(timezone.utc)


@router.get("/health")
async def health(request: Request):
    uptime = (datetime.now(timezone.utc) - _start_time).total_seconds()

    store = getattr(request.app.state, "store", None)
    if store is None:
        database = "not_configured"
    else:
        try:
            await store.ping()
            database = "connected"
        except Exception:
            logger.exception("Database ping failed")
            database = "unreachable"

    return {
        "status": "healthy" if database != "unreachable" else "degraded",
        "database": database,
        "uptime_seconds": round(uptime, 2),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": SERVICE_VERSION,
    }
