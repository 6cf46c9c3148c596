"""Batch chunking for store writes."""

from typing import Sequence, TypeVar

from slot_rotation.core.errors import InvalidRotationParameterError

T = TypeVar("T")

# Per-transaction write ceiling of the document store the marketplace started on
STORE_MAX_BATCH_OPS = 500


def chunk(items: Sequence[T], limit: int) -> list[tuple[T, ...]]:
    """Split items into ceil(len / limit) consecutive chunks of at most limit."""
    if limit < 1:
        raise InvalidRotationParameterError(
            f"Batch limit must be at least 1, got {limit}", "limit",
        )
    return [
        tuple(items[start:start + limit])
        for start in range(0, len(items), limit)
    ]


def batch_count(total: int, limit: int) -> int:
    return -(-total // limit)
