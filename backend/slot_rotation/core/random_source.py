"""Random Sources: the PRNG interface behind the Fisher-Yates shuffle.

Invariants:
    - next_float() returns a value in [0, 1)
    - LcgRandomSource(seed) replays the same sequence for the same seed

Design Decisions:
    - The LCG (9301, 49297, 233280) is weak: it exists for reproducible
      fairness rotation only and must not back anything security-sensitive
    - Sources are built through a factory (seed -> RandomSource) so a stronger
      reproducible generator can replace the LCG without touching the shuffle
"""

import random
from typing import Callable, Protocol

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


class RandomSource(Protocol):
    def next_float(self) -> float: ...


class LcgRandomSource:
    """Seeded linear-congruential generator."""

    def __init__(self, seed: int):
        self._state = seed

    def next_float(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS


class SystemRandomSource:
    """Non-reproducible source for unseeded shuffles."""

    def __init__(self):
        self._rng = random.SystemRandom()

    def next_float(self) -> float:
        return self._rng.random()


SeededSourceFactory = Callable[[int], RandomSource]
