"""Rotation Schemas: wire shapes for trigger, stats, health and run history.

Invariants:
    - camelCase on the wire (alias_generator), snake_case in Python
    - Trigger response keeps the marketplace's field names: shuffledCount, batches
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from slot_rotation.services.rotation_orchestrator import RotationResult
from slot_rotation.services.rotation_stats import RotationStats


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RotationTriggerResponse(_CamelModel):
    """Result of POST /rotation/trigger."""
    success: bool
    rotated_count: int = Field(alias="shuffledCount")
    batch_count: int = Field(alias="batches")
    duration_ms: int
    seed: int
    overflow_count: int = 0
    reserved_count: int = 0
    skipped_count: int = 0
    message: str = ""
    timestamp: datetime
    run_id: str | None = None
    assignments: list[dict] = []

    @classmethod
    def from_result(cls, result: RotationResult) -> "RotationTriggerResponse":
        return cls(
            success=result.success,
            rotated_count=result.rotated_count,
            batch_count=result.batch_count,
            duration_ms=result.duration_ms,
            seed=result.seed,
            overflow_count=result.overflow_count,
            reserved_count=result.reserved_count,
            skipped_count=result.skipped_count,
            message=result.message,
            timestamp=result.timestamp,
            run_id=result.run_id,
            assignments=list(result.preview),
        )


class RotationStatsResponse(_CamelModel):
    """Point-in-time rotation statistics; zeroed with success=False on failure."""
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

    @classmethod
    def from_stats(cls, stats: RotationStats) -> "RotationStatsResponse":
        return cls(
            success=stats.success,
            total_active=stats.total_active,
            total_rotated=stats.total_rotated,
            without_rotation=stats.without_rotation,
            last_rotation=stats.last_rotation,
            needs_rotation=stats.needs_rotation,
            next_seed=stats.next_seed,
            interval=stats.interval,
            interval_ms=stats.interval_ms,
            error=stats.error,
        )


class RotationHealthResponse(_CamelModel):
    success: bool = True
    service: str = "rotation"
    status: str
    stats: RotationStatsResponse


class RotationRunResponse(_CamelModel):
    id: str
    seed: int | None
    status: str
    rotated_count: int
    overflow_count: int
    batch_count: int
    committed_batches: int
    error_code: str | None
    error_message: str | None
    duration_ms: int
    started_at: datetime
    finished_at: datetime
