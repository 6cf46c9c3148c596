"""Error Hierarchy: typed, categorized exceptions for every rotation failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Verifier errors are raised before any write is issued
    - StoreError raised mid-commit carries the batch context an operator needs
      to reconcile a partial rotation
    - to_response() produces the {success: false, error, errorCode} envelope

Design Decisions:
    - Single hierarchy with RotationError base: the FastAPI global handler
      and the orchestrator's run log both catch one type
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    INVARIANT = "invariant"
    STORE = "store"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and partial-commit reconciliation."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    run_id: str | None = None
    seed: int | None = None
    record_id: str | None = None
    slot_number: int | None = None
    batch_index: int | None = None
    committed_batches: int | None = None
    committed_count: int | None = None
    debug_info: dict[str, Any] | None = None


class RotationError(Exception):
    """Base exception for all rotation engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the error payload returned by the trigger operation."""
        return {
            "success": False,
            "error": self.message,
            "errorCode": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "runId": self.context.run_id,
                "seed": self.context.seed,
                "recordId": self.context.record_id,
                "slotNumber": self.context.slot_number,
                "batchIndex": self.context.batch_index,
                "committedBatches": self.context.committed_batches,
                "committedCount": self.context.committed_count,
            },
        }


# ─── Validation Errors (400-level) ──────────────────────────────

class InvalidRotationParameterError(RotationError):
    """A pure rotation function received an argument outside its domain."""
    def __init__(self, message: str, parameter: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_PARAMETER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.parameter = parameter


# ─── Invariant Errors (raised by the verifier, zero writes) ─────

class DuplicateSlotError(RotationError):
    """Two assignments in one run target the same slot number."""
    def __init__(
        self, slot_number: int, record_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.slot_number = slot_number
        ctx.record_id = record_id
        super().__init__(
            f"Slot {slot_number} assigned more than once (second claim by record '{record_id}')",
            "DUPLICATE_SLOT", ErrorCategory.INVARIANT,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.slot_number = slot_number
        self.record_id = record_id


class DuplicateRecordError(RotationError):
    """The same record appears in more than one assignment."""
    def __init__(self, record_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.record_id = record_id
        super().__init__(
            f"Record '{record_id}' assigned more than once",
            "DUPLICATE_RECORD", ErrorCategory.INVARIANT,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.record_id = record_id


class InvalidAssignmentError(RotationError):
    """An assignment falls outside the slot space or has an inconsistent group."""
    def __init__(
        self, message: str, record_id: str, slot_number: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.record_id = record_id
        ctx.slot_number = slot_number
        super().__init__(
            message, "INVALID_ASSIGNMENT", ErrorCategory.INVARIANT,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.record_id = record_id
        self.slot_number = slot_number


# ─── Infrastructure Errors (500-level) ──────────────────────────

class NotConfiguredError(RotationError):
    """No backing store handle is available; nothing was written."""
    def __init__(self, message: str = "Slot store is not configured", context: ErrorContext | None = None):
        super().__init__(
            message, "NOT_CONFIGURED", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 503,
        )


class StoreError(RotationError):
    """A read or write against the slot store failed."""
    def __init__(
        self,
        message: str,
        operation: str,
        batch_index: int | None = None,
        committed_batches: int | None = None,
        committed_count: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.batch_index = batch_index
        ctx.committed_batches = committed_batches
        ctx.committed_count = committed_count
        super().__init__(
            f"Store {operation} failed: {message}",
            "STORE_ERROR", ErrorCategory.STORE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.detail = message
        self.operation = operation
        self.batch_index = batch_index
        self.committed_batches = committed_batches
        self.committed_count = committed_count

    @property
    def is_partial_commit(self) -> bool:
        """True when some batches were committed before the failure."""
        return bool(self.committed_batches)


class StoreConflictError(StoreError):
    """A write collided with a uniqueness constraint (e.g. two runs inserting the lease)."""


class RotationInProgressError(RotationError):
    """Another run holds the rotation lease."""
    def __init__(self, holder: str | None, context: ErrorContext | None = None):
        super().__init__(
            f"Rotation already in progress (lease held by {holder or 'unknown'})",
            "ROTATION_IN_PROGRESS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.holder = holder
