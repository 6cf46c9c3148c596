"""Period Clock: derives the rotation seed from wall-clock time.

Invariants:
    - seed = floor(now_ms / interval_ms) * interval_ms (epoch milliseconds)
    - Every caller inside one interval window receives the same seed, so a manual
      trigger racing the scheduled one computes the same permutation
    - now() and current_seed() read the same time source

Design Decisions:
    - Time source injected as a zero-arg callable returning epoch ms: tests pin
      time without monkeypatching the datetime module
"""

import time
from datetime import datetime, timezone
from typing import Callable

from slot_rotation.core.domain_types import Seed
from slot_rotation.core.errors import InvalidRotationParameterError


def system_now_ms() -> int:
    return time.time_ns() // 1_000_000


def compute_seed(now_ms: int, interval_ms: int) -> Seed:
    """Start of the window containing now_ms. Pure."""
    if interval_ms <= 0:
        raise InvalidRotationParameterError(
            f"interval_ms must be positive, got {interval_ms}", "interval_ms",
        )
    return Seed((now_ms // interval_ms) * interval_ms)


def describe_interval(interval_ms: int) -> str:
    """Human-readable interval, e.g. '2 hours'."""
    for unit_ms, name in (
        (3_600_000, "hour"), (60_000, "minute"), (1000, "second"),
    ):
        if interval_ms % unit_ms == 0:
            count = interval_ms // unit_ms
            return f"{count} {name}{'' if count == 1 else 's'}"
    return f"{interval_ms} ms"


class PeriodClock:
    """Quantizes wall-clock time into fixed rotation windows."""

    def __init__(
        self, interval_ms: int, now_ms: Callable[[], int] = system_now_ms,
    ):
        if interval_ms <= 0:
            raise InvalidRotationParameterError(
                f"interval_ms must be positive, got {interval_ms}", "interval_ms",
            )
        self.interval_ms = interval_ms
        self._now_ms = now_ms

    def now_ms(self) -> int:
        return self._now_ms()

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._now_ms() / 1000, tz=timezone.utc)

    def current_seed(self) -> Seed:
        return compute_seed(self._now_ms(), self.interval_ms)

    def next_seed(self) -> Seed:
        """Seed of the window after the current one."""
        return Seed(self.current_seed() + self.interval_ms)

    def ms_until_next_window(self) -> int:
        return self.next_seed() - self._now_ms()
