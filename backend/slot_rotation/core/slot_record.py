"""Slot Record: the store-independent view of one purchased slot.

Invariants:
    - record_id never changes; slot_number and group_number are what rotation moves
    - payment_confirmed is tri-state: None means the legacy record never carried
      the field and is treated as confirmed; only an explicit False excludes
    - Datetimes are timezone-aware UTC
"""

from dataclasses import dataclass
from datetime import datetime

from slot_rotation.core.domain_types import (
    GroupNumber, RecordId, RecordStatus, Seed, SlotNumber,
)

PAYMENT_CONFIRMED_WHEN_ABSENT = True


@dataclass(frozen=True)
class SlotRecord:
    """One purchased slot as the rotation engine sees it."""
    record_id: RecordId
    slot_number: SlotNumber
    group_number: GroupNumber
    status: str = RecordStatus.ACTIVE.value
    payment_confirmed: bool | None = None
    expires_at: datetime | None = None
    display_asset: str | None = None
    last_rotation_seed: Seed | None = None
    last_rotation_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def active(self) -> bool:
        return self.status == RecordStatus.ACTIVE.value

    @property
    def payment_is_confirmed(self) -> bool:
        if self.payment_confirmed is None:
            return PAYMENT_CONFIRMED_WHEN_ABSENT
        return self.payment_confirmed

    @property
    def has_rotated(self) -> bool:
        return self.last_rotation_at is not None
