"""Rotation wiring: builds services from settings and an explicit session manager.

Invariants:
    - A None session manager yields services without a store: the orchestrator
      then raises NotConfiguredError and the stats reporter degrades to defaults
"""

from slot_rotation.config import Settings
from slot_rotation.core.period_clock import PeriodClock
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.infrastructure.rotation_lease import SqlRotationLease
from slot_rotation.infrastructure.rotation_runs import SqlRotationRunLog
from slot_rotation.infrastructure.slot_repository import SqlSlotRecordRepository
from slot_rotation.services.rotation_orchestrator import RotationOrchestrator
from slot_rotation.services.rotation_stats import RotationStatsReporter


def build_clock(settings: Settings) -> PeriodClock:
    return PeriodClock(settings.rotation_interval_ms)


def build_orchestrator(
    db: DatabaseSessionManager | None,
    settings: Settings,
    clock: PeriodClock | None = None,
) -> RotationOrchestrator:
    clock = clock or build_clock(settings)
    if db is None:
        return RotationOrchestrator(None, clock, settings.rotation_policy())
    return RotationOrchestrator(
        SqlSlotRecordRepository(db),
        clock,
        settings.rotation_policy(),
        lease=SqlRotationLease(db),
        lease_ttl_seconds=settings.rotation_lease_ttl_seconds,
        run_log=SqlRotationRunLog(db),
    )


def build_stats_reporter(
    db: DatabaseSessionManager | None,
    settings: Settings,
    clock: PeriodClock | None = None,
) -> RotationStatsReporter:
    repository = SqlSlotRecordRepository(db) if db is not None else None
    return RotationStatsReporter(repository, clock or build_clock(settings))
