from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from projectdesk.api.deps import get_database
from projectdesk.db.base import Database

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness check.

    Returns 503 once shutdown has begun so the load balancer stops routing traffic.
    """
    timestamp = datetime.now(UTC).isoformat()
    if getattr(request.app.state, "shutting_down", False):
        return JSONResponse(
            status_code=503,
            content={"status": "shutting_down", "timestamp": timestamp},
        )
    return {"status": "ok", "timestamp": timestamp}


@router.get("/ready")
async def readiness_check(database: Database = Depends(get_database)):
    """Readiness check - verifies the store is reachable."""
    checks = {"store": False}

    if await database.connect():
        checks["store"] = await database.ping()
    if not checks["store"]:
        logger.warning("readiness_store_unavailable")

    all_healthy = all(checks.values())
    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content={"status": "ready" if all_healthy else "degraded", "checks": checks},
    )
