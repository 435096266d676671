from __future__ import annotations

import os

from fastapi import APIRouter, Response, status

from guestmeals.infrastructure.db.session import ping_database
from guestmeals.infrastructure.messaging.redis_client import ping_redis, redis_configured

router = APIRouter()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(response: Response) -> dict[str, object]:
    # Only backends that are configured take part in readiness.
    checks: dict[str, bool] = {}
    if os.getenv("DATABASE_URL"):
        checks["database"] = ping_database(timeout_seconds=1.0)
    if redis_configured():
        checks["redis"] = ping_redis(timeout_seconds=1.0)

    if all(checks.values()):
        return {"status": "ok", "checks": checks}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "unavailable", "checks": checks}
