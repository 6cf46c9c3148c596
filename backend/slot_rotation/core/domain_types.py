"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - RecordId is the stable store identity; it survives every rotation
    - SlotNumber ranges over 1..slot_count, GroupNumber over 1..slot_count/group_size
    - Seed is the start of a rotation window in epoch milliseconds

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

RecordId = NewType("RecordId", str)
RunId = NewType("RunId", str)


# ─── Value Types ─────────────────────────────────────────────────

SlotNumber = NewType("SlotNumber", int)
GroupNumber = NewType("GroupNumber", int)
Seed = NewType("Seed", int)


# ─── Enums ───────────────────────────────────────────────────────

class RecordStatus(str, Enum):
    """Listing lifecycle states: maps to the `status` column."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class ExclusionReason(str, Enum):
    """Why the eligibility filter left a record out of a run."""
    INACTIVE = "inactive"
    UNPAID = "unpaid"
    EXPIRED = "expired"
    MISSING_ASSET = "missing_asset"


class RunStatus(str, Enum):
    """Outcome of one rotation run, as stored in rotation_runs."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
