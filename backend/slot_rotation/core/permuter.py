"""Deterministic Permuter: seeded Fisher-Yates over the slot numbers.

Invariants:
    - permute(n, seed) is a bijection onto 1..n
    - Identical (n, seed) always yields an identical sequence
    - The input sequence passed to fisher_yates is never mutated
"""

from typing import Sequence, TypeVar

from slot_rotation.core.errors import InvalidRotationParameterError
from slot_rotation.core.random_source import (
    LcgRandomSource, RandomSource, SeededSourceFactory, SystemRandomSource,
)

T = TypeVar("T")


def fisher_yates(items: Sequence[T], source: RandomSource) -> list[T]:
    """Shuffled copy of items, walking i from the end down to 1."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(source.next_float() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def permute(
    n: int,
    seed: int | None = None,
    source_factory: SeededSourceFactory = LcgRandomSource,
) -> list[int]:
    """Permutation of 1..n, reproducible when a seed is given."""
    if n < 0:
        raise InvalidRotationParameterError(
            f"Cannot permute a negative count ({n})", "n",
        )
    source = SystemRandomSource() if seed is None else source_factory(seed)
    return fisher_yates(range(1, n + 1), source)
