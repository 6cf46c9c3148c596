"""Health & Readiness Probes for container orchestration.

Invariants:
    - GET /health/ always returns 200 while the process is up (liveness)
    - GET /health/ready returns 503 when no store is configured or it is unreachable
    - Readiness reports the current lease holder so an operator can see a run in flight
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from slot_rotation.api.deps import get_clock, get_db_manager
from slot_rotation.core.errors import StoreError
from slot_rotation.core.period_clock import PeriodClock
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.infrastructure.rotation_lease import SqlRotationLease

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": "slot-rotation-api", "version": "1.0.0"}


@router.get("/ready")
async def readiness(
    db: DatabaseSessionManager | None = Depends(get_db_manager),
    clock: PeriodClock = Depends(get_clock),
):
    if db is None or not await db.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    try:
        holder = await SqlRotationLease(db).current_holder(clock.now())
    except StoreError as exc:
        logger.warning(f"Lease table unreadable: {exc.message}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "schema_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "rotationInProgress": holder is not None,
    }
