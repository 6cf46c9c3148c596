"""Rotation Stats Reporter: point-in-time rotation statistics for health checks.

Invariants:
    - Read-only: one fetch_active call, never a write
    - Never raises: a missing store or a failed read returns zeroed defaults
      with success=False, because a public health check must not 500
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from slot_rotation.core.period_clock import PeriodClock, describe_interval
from slot_rotation.core.repository_protocols import SlotRecordRepository
from slot_rotation.core.rotation_stats import RotationCounts, compute_rotation_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RotationStats:
    success: bool
    total_active: int
    total_rotated: int
    without_rotation: int
    last_rotation: datetime | None
    needs_rotation: bool
    next_seed: int
    interval: str
    interval_ms: int
    error: str | None = None


class RotationStatsReporter:

    def __init__(
        self, repository: SlotRecordRepository | None, clock: PeriodClock,
    ):
        self.repository = repository
        self.clock = clock

    async def stats(self) -> RotationStats:
        if self.repository is None:
            return self._build(RotationCounts(), error="Slot store is not configured")
        try:
            records = await self.repository.fetch_active()
        except Exception as e:
            logger.error(f"Rotation stats read failed: {e}", exc_info=True)
            return self._build(RotationCounts(), error=str(e))
        return self._build(compute_rotation_stats(records))

    def _build(self, counts: RotationCounts, error: str | None = None) -> RotationStats:
        return RotationStats(
            success=error is None,
            total_active=counts.total_active,
            total_rotated=counts.total_rotated,
            without_rotation=counts.without_rotation,
            last_rotation=counts.last_rotation,
            needs_rotation=counts.needs_rotation,
            next_seed=self.clock.next_seed(),
            interval=describe_interval(self.clock.interval_ms),
            interval_ms=self.clock.interval_ms,
            error=error,
        )
