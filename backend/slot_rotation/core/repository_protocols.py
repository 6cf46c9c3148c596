"""Boundary Protocols: contracts between the rotation core and the store.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - apply_batch is one atomic unit of the store: all of its updates land or none do
    - apply_batch skips records deleted since they were read and returns how many
      rows it updated
    - apply_batch touches only slot_number, group_number, last_rotation_at and
      last_rotation_seed

Design Decisions:
    - Protocol over ABC: structural subtyping, the in-memory test store needs no base class
    - Async in Protocol: implementations do IO; the pure functions that consume
      their results never are
"""

from datetime import datetime
from typing import Protocol, Sequence

from slot_rotation.core.slot_assigner import SlotAssignment
from slot_rotation.core.slot_record import SlotRecord


class SlotRecordRepository(Protocol):
    """Contract for slot record persistence, implemented by the shell."""
    async def fetch_active(self) -> list[SlotRecord]: ...
    async def apply_batch(
        self,
        batch: Sequence[SlotAssignment],
        seed: int,
        rotated_at: datetime,
    ) -> int: ...


class RotationLease(Protocol):
    """Contract for the run-level mutual exclusion record."""
    async def try_acquire(
        self, holder: str, now: datetime, ttl_seconds: int,
    ) -> bool: ...
    async def current_holder(self, now: datetime) -> str | None: ...
    async def release(self, holder: str) -> None: ...


class RotationRunLog(Protocol):
    """Contract for the audit history of rotation runs."""
    async def record(self, run: dict) -> None: ...
    async def latest(self, limit: int = 20) -> list[dict]: ...
