"""Rotation Orchestrator: one complete rotation run.

Invariants:
    - Sequence: lease -> seed -> one read -> filter -> permute -> assign ->
      verify -> batched commit -> release lease -> run log
    - Verification covers the whole assignment set before the first write;
      a verifier failure means zero writes
    - Empty eligible set succeeds with rotated_count 0 and no slot record writes;
      the lease row and the run log row are still written
    - Active records that sit out the run keep their slots: those slots are
      removed from the permutation and capacity shrinks to match, so no two
      active records share a slot after a successful run
    - The lease is released whether the run succeeds or fails
    - The run log never changes a run's outcome: a failed audit write is logged

Design Decisions:
    - The full slot space 1..N is permuted and the first M slots are handed out,
      so listings spread over every page; compact_slots permutes 1..M and maps
      it onto the M lowest free slots instead
    - Store handle, clock, lease and run log are constructor arguments; nothing
      is memoized behind a module global
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from slot_rotation.core.consistency import verify_assignments
from slot_rotation.core.domain_types import RunId, RunStatus
from slot_rotation.core.eligibility import filter_eligible, reserved_slots
from slot_rotation.core.errors import (
    NotConfiguredError, RotationError, RotationInProgressError, ErrorContext,
)
from slot_rotation.core.period_clock import PeriodClock
from slot_rotation.core.permuter import permute
from slot_rotation.core.random_source import LcgRandomSource, SeededSourceFactory
from slot_rotation.core.repository_protocols import (
    RotationLease, RotationRunLog, SlotRecordRepository,
)
from slot_rotation.core.rotation_policy import RotationPolicy
from slot_rotation.core.slot_assigner import (
    assign, compact_slot_order, free_slot_order,
)
from slot_rotation.services.rotation_committer import BatchedCommitter

logger = logging.getLogger(__name__)

PREVIEW_SIZE = 10


@dataclass(frozen=True)
class RotationResult:
    """Summary of a successful run."""
    success: bool
    rotated_count: int
    batch_count: int
    seed: int
    duration_ms: int
    overflow_count: int = 0
    reserved_count: int = 0
    skipped_count: int = 0
    message: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    preview: tuple[dict, ...] = ()
    run_id: str | None = None


class RotationOrchestrator:
    """Composes the pure rotation pipeline with the store."""

    def __init__(
        self,
        repository: SlotRecordRepository | None,
        clock: PeriodClock,
        policy: RotationPolicy | None = None,
        lease: RotationLease | None = None,
        lease_ttl_seconds: int = 600,
        run_log: RotationRunLog | None = None,
        source_factory: SeededSourceFactory = LcgRandomSource,
    ):
        self.repository = repository
        self.clock = clock
        self.policy = policy or RotationPolicy()
        self.lease = lease
        self.lease_ttl_seconds = lease_ttl_seconds
        self.run_log = run_log
        self.source_factory = source_factory

    async def run(self) -> RotationResult:
        if self.repository is None:
            raise NotConfiguredError()

        run_id = RunId(uuid4().hex)
        started_at = self.clock.now()
        started = time.monotonic()
        await self._acquire_lease(run_id, started_at)
        try:
            result = await self._rotate(run_id, started)
        except Exception as exc:
            await self._record_failure(run_id, started_at, started, exc)
            raise
        finally:
            await self._release_lease(run_id)

        logger.info(
            f"Rotation completed: {result.rotated_count} records in "
            f"{result.batch_count} batches ({result.duration_ms}ms)",
            extra={
                "run_id": run_id, "seed": result.seed,
                "rotated_count": result.rotated_count,
                "overflow_count": result.overflow_count,
                "duration_ms": result.duration_ms,
            },
        )
        await self._record(_run_row(
            run_id, result.seed, RunStatus.SUCCEEDED, started_at,
            self.clock.now(), result.duration_ms,
            rotated_count=result.rotated_count,
            overflow_count=result.overflow_count,
            batch_count=result.batch_count,
            committed_batches=result.batch_count,
        ))
        return result

    async def _rotate(self, run_id: str, started: float) -> RotationResult:
        policy = self.policy
        seed = self.clock.current_seed()
        now = self.clock.now()
        logger.info(
            "Starting slot rotation", extra={"run_id": run_id, "seed": seed},
        )

        candidates = await self.repository.fetch_active()
        reserved = reserved_slots(
            candidates, now, policy.slot_count, policy.allowed_asset_prefixes,
        )
        selection = filter_eligible(
            candidates, now, policy.slot_count - len(reserved),
            policy.allowed_asset_prefixes,
        )
        eligible = selection.eligible
        logger.info(
            f"{len(eligible)} of {len(candidates)} active records eligible, "
            f"{len(reserved)} slots held by records sitting out",
            extra={"run_id": run_id, "overflow_count": selection.overflow_count},
        )
        if not eligible:
            return RotationResult(
                success=True, rotated_count=0, batch_count=0, seed=seed,
                duration_ms=_elapsed_ms(started),
                reserved_count=len(reserved),
                message="No eligible records to rotate", run_id=run_id,
            )

        if policy.compact_slots:
            order = permute(len(eligible), seed, self.source_factory)
            slots = compact_slot_order(order, policy.slot_count, reserved)
        else:
            order = permute(policy.slot_count, seed, self.source_factory)
            slots = free_slot_order(order, reserved)
        assignments = assign(eligible, slots, policy.group_size)
        verify_assignments(
            assignments, policy.slot_count, policy.group_size, reserved,
        )

        committer = BatchedCommitter(self.repository, policy.batch_limit)
        commit = await committer.commit(assignments, seed, now, run_id=run_id)
        return RotationResult(
            success=True,
            rotated_count=commit.committed_count,
            batch_count=commit.batch_count,
            seed=seed,
            duration_ms=_elapsed_ms(started),
            overflow_count=selection.overflow_count,
            reserved_count=len(reserved),
            skipped_count=commit.skipped_count,
            message=f"Successfully rotated {commit.committed_count} records",
            preview=tuple(a.to_preview() for a in assignments[:PREVIEW_SIZE]),
            run_id=run_id,
        )

    async def _acquire_lease(self, run_id: str, now: datetime) -> None:
        if self.lease is None:
            return
        if await self.lease.try_acquire(run_id, now, self.lease_ttl_seconds):
            return
        holder = await self.lease.current_holder(now)
        logger.warning(
            f"Rotation skipped: lease held by {holder}", extra={"run_id": run_id},
        )
        raise RotationInProgressError(holder, ErrorContext(run_id=run_id))

    async def _release_lease(self, run_id: str) -> None:
        if self.lease is None:
            return
        try:
            await self.lease.release(run_id)
        except RotationError as exc:
            # Lease expires on its own after the TTL
            logger.error(
                f"Failed to release rotation lease: {exc.message}",
                extra={"run_id": run_id, "error_code": exc.code},
            )

    async def _record_failure(
        self, run_id: str, started_at: datetime, started: float, exc: Exception,
    ) -> None:
        if isinstance(exc, RotationError):
            ctx = exc.context
            ctx.run_id = ctx.run_id or run_id
            code, message = exc.code, exc.message
        else:
            ctx = ErrorContext(run_id=run_id)
            code, message = "INTERNAL_ERROR", str(exc)
        seed = ctx.seed if ctx.seed is not None else self.clock.current_seed()
        ctx.seed = seed
        logger.error(
            f"Rotation failed: {message}",
            extra={"run_id": run_id, "seed": seed, "error_code": code},
        )
        await self._record(_run_row(
            run_id, seed, RunStatus.FAILED, started_at, self.clock.now(),
            _elapsed_ms(started),
            rotated_count=ctx.committed_count or 0,
            batch_count=(ctx.batch_index + 1) if ctx.batch_index is not None else 0,
            committed_batches=ctx.committed_batches or 0,
            error_code=code,
            error_message=message,
        ))

    async def _record(self, row: dict) -> None:
        if self.run_log is None:
            return
        try:
            await self.run_log.record(row)
        except RotationError as exc:
            logger.error(
                f"Failed to record rotation run: {exc.message}",
                extra={"run_id": row["id"], "error_code": exc.code},
            )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _run_row(
    run_id: str,
    seed: int,
    status: RunStatus,
    started_at: datetime,
    finished_at: datetime,
    duration_ms: int,
    **counts,
) -> dict:
    return {
        "id": run_id,
        "seed": seed,
        "status": status.value,
        "started_at": started_at,
        "finished_at": finished_at,
        "duration_ms": duration_ms,
        **counts,
    }
