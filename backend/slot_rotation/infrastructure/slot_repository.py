"""SQL Slot Repository: reads candidates and applies rotation batches.

Invariants:
    - fetch_active is a single read, ordered by (created_at, id) so overflow
      truncation is stable between runs
    - apply_batch runs in one transaction and updates only the four rotation columns
    - A record deleted between the read and its batch is skipped, not an error:
      the purchase flow's cleanup deletes rows while a run is in flight

Design Decisions:
    - Core executemany UPDATE ... WHERE id = :id instead of the ORM bulk update
      by primary key, which rejects a batch whose matched row count falls short
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import bindparam, select, update

from slot_rotation.core.domain_types import RecordStatus
from slot_rotation.core.slot_assigner import SlotAssignment
from slot_rotation.core.slot_record import SlotRecord
from slot_rotation.infrastructure.database import DatabaseSessionManager
from slot_rotation.models.purchased_slot import PurchasedSlot

_slots = PurchasedSlot.__table__

# Bind names must differ from the column names they set
_APPLY_ROTATION = (
    update(_slots)
    .where(_slots.c.id == bindparam("b_id"))
    .values(
        slot_number=bindparam("b_slot_number"),
        group_number=bindparam("b_group_number"),
        last_rotation_at=bindparam("b_rotated_at"),
        last_rotation_seed=bindparam("b_seed"),
    )
)


class SqlSlotRecordRepository:
    """SlotRecordRepository over the purchased_slots table."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def fetch_active(self) -> list[SlotRecord]:
        async with self._db.session("fetch_active") as session:
            result = await session.execute(
                select(PurchasedSlot)
                .where(PurchasedSlot.status == RecordStatus.ACTIVE.value)
                .order_by(PurchasedSlot.created_at, PurchasedSlot.id),
            )
            return [row.to_record() for row in result.scalars().all()]

    async def apply_batch(
        self,
        batch: Sequence[SlotAssignment],
        seed: int,
        rotated_at: datetime,
    ) -> int:
        """Apply one batch; returns the number of records still present and updated."""
        if not batch:
            return 0
        async with self._db.session("apply_batch") as session:
            async with session.begin():
                result = await session.execute(
                    select(_slots.c.id).where(
                        _slots.c.id.in_([a.record_id for a in batch]),
                    ),
                )
                present = set(result.scalars().all())
                rows = [
                    {
                        "b_id": a.record_id,
                        "b_slot_number": a.slot_number,
                        "b_group_number": a.group_number,
                        "b_rotated_at": rotated_at,
                        "b_seed": seed,
                    }
                    for a in batch
                    if a.record_id in present
                ]
                if rows:
                    await session.execute(_APPLY_ROTATION, rows)
        return len(rows)
