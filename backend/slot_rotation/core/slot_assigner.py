"""Slot Assigner: pairs eligible records with permuted slot numbers.

Invariants:
    - eligible[i] receives permutation[i]; the eligible order itself is not shuffled
    - group_number == ceil(slot_number / group_size) for every assignment
    - At most len(permutation) assignments are produced
"""

from dataclasses import dataclass
from typing import Collection, Sequence

from slot_rotation.core.domain_types import GroupNumber, RecordId, SlotNumber
from slot_rotation.core.errors import InvalidRotationParameterError
from slot_rotation.core.slot_record import SlotRecord


@dataclass(frozen=True)
class SlotAssignment:
    """New slot for one record, with where it sat before the run."""
    record_id: RecordId
    slot_number: SlotNumber
    group_number: GroupNumber
    previous_slot_number: SlotNumber | None = None
    previous_group_number: GroupNumber | None = None

    def to_preview(self) -> dict:
        return {
            "recordId": self.record_id,
            "oldSlotNumber": self.previous_slot_number,
            "newSlotNumber": self.slot_number,
            "oldGroupNumber": self.previous_group_number,
            "newGroupNumber": self.group_number,
        }


def group_for_slot(slot_number: int, group_size: int) -> GroupNumber:
    """ceil(slot_number / group_size) for positive integers."""
    if group_size <= 0:
        raise InvalidRotationParameterError(
            f"group_size must be positive, got {group_size}", "group_size",
        )
    return GroupNumber(-(-slot_number // group_size))


def assign(
    eligible: Sequence[SlotRecord],
    permutation: Sequence[int],
    group_size: int,
) -> tuple[SlotAssignment, ...]:
    if len(eligible) > len(permutation):
        raise InvalidRotationParameterError(
            f"{len(eligible)} records cannot fit in {len(permutation)} slots",
            "eligible",
        )
    return tuple(
        SlotAssignment(
            record_id=record.record_id,
            slot_number=slot,
            group_number=group_for_slot(slot, group_size),
            previous_slot_number=record.slot_number,
            previous_group_number=record.group_number,
        )
        for record, slot in zip(eligible, permutation)
    )


def free_slot_order(
    permutation: Sequence[int], reserved: Collection[int] = (),
) -> list[int]:
    """The permutation with reserved slots dropped, order preserved."""
    if not reserved:
        return list(permutation)
    return [slot for slot in permutation if slot not in reserved]


def compact_slot_order(
    order: Sequence[int], slot_count: int, reserved: Collection[int] = (),
) -> list[int]:
    """Map a permutation of 1..M onto the M lowest unreserved slots."""
    free = [s for s in range(1, slot_count + 1) if s not in reserved]
    if len(order) > len(free):
        raise InvalidRotationParameterError(
            f"{len(order)} records cannot fit in {len(free)} free slots", "order",
        )
    return [free[i - 1] for i in order]
