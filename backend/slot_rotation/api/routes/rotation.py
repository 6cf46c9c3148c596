"""Rotation Routes: trigger a rotation, read stats, health and run history.

Invariants:
    - POST /trigger surfaces RotationError through the global handler as
      {success: false, error, errorCode} with the error's HTTP status
    - GET /stats and GET /health always return 200
"""

import logging

from fastapi import APIRouter, Depends, Query

from slot_rotation.api.deps import (
    get_db_manager, get_orchestrator, get_stats_reporter,
)
from slot_rotation.core.errors import NotConfiguredError
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.infrastructure.rotation_runs import SqlRotationRunLog
from slot_rotation.schemas.rotation import (
    RotationHealthResponse, RotationRunResponse, RotationStatsResponse,
    RotationTriggerResponse,
)
from slot_rotation.services.rotation_orchestrator import RotationOrchestrator
from slot_rotation.services.rotation_stats import RotationStatsReporter

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/rotation", tags=["rotation"])


@router.post("/trigger", response_model=RotationTriggerResponse)
async def trigger_rotation(
    orchestrator: RotationOrchestrator = Depends(get_orchestrator),
):
    """Run one rotation now."""
    logger.info("Manual rotation trigger received")
    result = await orchestrator.run()
    return RotationTriggerResponse.from_result(result)


@router.get("/stats", response_model=RotationStatsResponse)
async def rotation_stats(
    reporter: RotationStatsReporter = Depends(get_stats_reporter),
):
    return RotationStatsResponse.from_stats(await reporter.stats())


@router.get("/health", response_model=RotationHealthResponse)
async def rotation_health(
    reporter: RotationStatsReporter = Depends(get_stats_reporter),
):
    """Public health check built on the stats path."""
    stats = await reporter.stats()
    return RotationHealthResponse(
        status="operational" if stats.success else "degraded",
        stats=RotationStatsResponse.from_stats(stats),
    )


@router.get("/runs", response_model=list[RotationRunResponse])
async def list_rotation_runs(
    limit: int = Query(20, ge=1, le=200),
    db: DatabaseSessionManager | None = Depends(get_db_manager),
):
    """Recent rotation runs, newest first."""
    if db is None:
        raise NotConfiguredError()
    runs = await SqlRotationRunLog(db).latest(limit)
    return [RotationRunResponse(**run) for run in runs]
