"""Rotation Stats: pure summary of persisted rotation state.

Invariants:
    - Only active records with confirmed payment are counted (a missing
      payment flag counts as confirmed), matching what a run can rotate
    - A record counts as rotated when it carries last_rotation_at
    - Never raises: an empty input yields zero counts and last_rotation None
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from slot_rotation.core.slot_record import SlotRecord


@dataclass(frozen=True)
class RotationCounts:
    total_active: int = 0
    total_rotated: int = 0
    without_rotation: int = 0
    last_rotation: datetime | None = None

    @property
    def needs_rotation(self) -> bool:
        return self.without_rotation > 0


def compute_rotation_stats(records: Iterable[SlotRecord]) -> RotationCounts:
    total = rotated = 0
    last: datetime | None = None
    for record in records:
        if not record.active or not record.payment_is_confirmed:
            continue
        total += 1
        if record.has_rotated:
            rotated += 1
            if last is None or record.last_rotation_at > last:
                last = record.last_rotation_at
    return RotationCounts(
        total_active=total,
        total_rotated=rotated,
        without_rotation=total - rotated,
        last_rotation=last,
    )
