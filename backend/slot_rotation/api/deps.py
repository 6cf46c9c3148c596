"""Request dependencies: services built from the session manager on app.state.

Invariants:
    - The session manager is read from request.app.state, never from a module global
    - A missing manager is passed through as None; the services decide how to fail
"""

from fastapi import Depends, Request

from slot_rotation.config import Settings, get_settings
from slot_rotation.core.period_clock import PeriodClock
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.services.rotation_factory import (
    build_clock, build_orchestrator, build_stats_reporter,
)
from slot_rotation.services.rotation_orchestrator import RotationOrchestrator
from slot_rotation.services.rotation_stats import RotationStatsReporter


def get_db_manager(request: Request) -> DatabaseSessionManager | None:
    return getattr(request.app.state, "db_manager", None)


def get_clock(settings: Settings = Depends(get_settings)) -> PeriodClock:
    return build_clock(settings)


def get_orchestrator(
    db: DatabaseSessionManager | None = Depends(get_db_manager),
    settings: Settings = Depends(get_settings),
    clock: PeriodClock = Depends(get_clock),
) -> RotationOrchestrator:
    return build_orchestrator(db, settings, clock)


def get_stats_reporter(
    db: DatabaseSessionManager | None = Depends(get_db_manager),
    settings: Settings = Depends(get_settings),
    clock: PeriodClock = Depends(get_clock),
) -> RotationStatsReporter:
    return build_stats_reporter(db, settings, clock)
