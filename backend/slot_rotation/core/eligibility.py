"""Eligibility Filter: decides which candidate records take part in a run.

Invariants:
    - Pure and side-effect free apart from the overflow warning log
    - Input order is preserved; overflow keeps the first `capacity` eligible
      records and reports the rest, it never raises
    - A record is eligible iff active, payment not explicitly refused,
      unexpired (expires_at > now) and carrying an allow-listed display asset
    - Active records that are not eligible keep their slot: reserved_slots
      reports those slots so the run can keep them out of the permutation

Design Decisions:
    - Overflow policy is first come, first served in the order the repository
      returns candidates (created_at, then record_id)
    - display_asset is checked as an opaque prefix match, never parsed
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from slot_rotation.core.domain_types import ExclusionReason
from slot_rotation.core.rotation_policy import DEFAULT_ASSET_PREFIXES
from slot_rotation.core.slot_record import SlotRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibilityResult:
    eligible: tuple[SlotRecord, ...]
    overflow: tuple[SlotRecord, ...] = ()
    excluded: dict[str, int] = field(default_factory=dict)

    @property
    def overflow_count(self) -> int:
        return len(self.overflow)


def has_displayable_asset(
    display_asset: str | None, allowed_prefixes: Sequence[str],
) -> bool:
    if not isinstance(display_asset, str):
        return False
    asset = display_asset.strip()
    return bool(asset) and asset.startswith(tuple(allowed_prefixes))


def exclusion_reason(
    record: SlotRecord,
    now: datetime,
    allowed_prefixes: Sequence[str] = DEFAULT_ASSET_PREFIXES,
) -> ExclusionReason | None:
    """First failing predicate, or None when the record is eligible."""
    if not record.active:
        return ExclusionReason.INACTIVE
    if not record.payment_is_confirmed:
        return ExclusionReason.UNPAID
    if record.expires_at is not None and record.expires_at <= now:
        return ExclusionReason.EXPIRED
    if not has_displayable_asset(record.display_asset, allowed_prefixes):
        return ExclusionReason.MISSING_ASSET
    return None


def is_eligible(
    record: SlotRecord,
    now: datetime,
    allowed_prefixes: Sequence[str] = DEFAULT_ASSET_PREFIXES,
) -> bool:
    return exclusion_reason(record, now, allowed_prefixes) is None


def filter_eligible(
    records: Iterable[SlotRecord],
    now: datetime,
    capacity: int,
    allowed_prefixes: Sequence[str] = DEFAULT_ASSET_PREFIXES,
) -> EligibilityResult:
    """Eligible subset in input order, truncated to capacity."""
    eligible: list[SlotRecord] = []
    excluded: Counter[str] = Counter()
    for record in records:
        reason = exclusion_reason(record, now, allowed_prefixes)
        if reason is None:
            eligible.append(record)
        else:
            excluded[reason.value] += 1

    overflow = eligible[capacity:]
    if overflow:
        logger.warning(
            f"{len(eligible)} eligible records for {capacity} slots; "
            f"{len(overflow)} left out of this rotation",
            extra={"overflow_count": len(overflow)},
        )
    return EligibilityResult(
        eligible=tuple(eligible[:capacity]),
        overflow=tuple(overflow),
        excluded=dict(excluded),
    )


def reserved_slots(
    records: Iterable[SlotRecord],
    now: datetime,
    slot_count: int,
    allowed_prefixes: Sequence[str] = DEFAULT_ASSET_PREFIXES,
) -> frozenset[int]:
    """Slots inside 1..slot_count held by active records that sit out the run.

    Those records keep their slot, so the run must not hand it to anyone else.
    """
    return frozenset(
        record.slot_number
        for record in records
        if record.active
        and 1 <= record.slot_number <= slot_count
        and exclusion_reason(record, now, allowed_prefixes) is not None
    )
