"""Consistency Verifier: structural checks on a proposed assignment set.

Invariants:
    - Runs over the entire set before any write is issued: batches are not
      atomic across the whole set, so a verify-as-you-write scheme could leave
      half a rotation on disk
    - Fails fast on the first collision, naming the offending slot or record
    - A slot in `reserved` is still held by a record outside the run, so
      assigning it is a collision too
"""

from typing import Collection, Iterable

from slot_rotation.core.errors import (
    DuplicateRecordError, DuplicateSlotError, InvalidAssignmentError,
)
from slot_rotation.core.slot_assigner import SlotAssignment, group_for_slot


def verify_assignments(
    assignments: Iterable[SlotAssignment],
    slot_count: int | None = None,
    group_size: int | None = None,
    reserved: Collection[int] = (),
) -> int:
    """Raise on the first violation; return the number of assignments checked."""
    seen_slots: set[int] = set()
    seen_records: set[str] = set()
    for a in assignments:
        if a.record_id in seen_records:
            raise DuplicateRecordError(a.record_id)
        if a.slot_number in seen_slots or a.slot_number in reserved:
            raise DuplicateSlotError(a.slot_number, a.record_id)
        if slot_count is not None and not 1 <= a.slot_number <= slot_count:
            raise InvalidAssignmentError(
                f"Slot {a.slot_number} outside 1..{slot_count}",
                a.record_id, a.slot_number,
            )
        if group_size is not None and a.group_number != group_for_slot(
            a.slot_number, group_size,
        ):
            raise InvalidAssignmentError(
                f"Group {a.group_number} does not match slot {a.slot_number}",
                a.record_id, a.slot_number,
            )
        seen_records.add(a.record_id)
        seen_slots.add(a.slot_number)
    return len(seen_records)
