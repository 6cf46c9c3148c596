"""Tests for PeriodClock: seed quantization and window arithmetic."""

from datetime import datetime, timezone

import pytest

from slot_rotation.core.errors import InvalidRotationParameterError
from slot_rotation.core.period_clock import (
    PeriodClock, compute_seed, describe_interval,
)
from tests.factories import FIXED_NOW_MS, TWO_HOURS_MS, fixed_clock


def test_seed_is_start_of_window():
    assert compute_seed(7_300_000, TWO_HOURS_MS) == 7_200_000
    assert compute_seed(7_200_000, TWO_HOURS_MS) == 7_200_000
    assert compute_seed(7_199_999, TWO_HOURS_MS) == 0


def test_same_window_same_seed():
    window_start = compute_seed(FIXED_NOW_MS, TWO_HOURS_MS)
    early = fixed_clock(window_start)
    late = fixed_clock(window_start + TWO_HOURS_MS - 1)
    assert early.current_seed() == late.current_seed() == window_start


def test_next_window_changes_seed():
    clock = fixed_clock()
    later = fixed_clock(FIXED_NOW_MS + TWO_HOURS_MS)
    assert later.current_seed() == clock.current_seed() + TWO_HOURS_MS
    assert clock.next_seed() == later.current_seed()


def test_ms_until_next_window():
    seed = compute_seed(FIXED_NOW_MS, TWO_HOURS_MS)
    clock = fixed_clock()
    assert clock.ms_until_next_window() == seed + TWO_HOURS_MS - FIXED_NOW_MS
    assert 0 < clock.ms_until_next_window() <= TWO_HOURS_MS


def test_now_reads_same_time_source():
    clock = fixed_clock()
    assert clock.now() == datetime.fromtimestamp(FIXED_NOW_MS / 1000, tz=timezone.utc)
    assert clock.now().tzinfo is not None


def test_non_positive_interval_rejected():
    with pytest.raises(InvalidRotationParameterError):
        PeriodClock(0)
    with pytest.raises(InvalidRotationParameterError):
        compute_seed(1000, -5)


def test_describe_interval():
    assert describe_interval(TWO_HOURS_MS) == "2 hours"
    assert describe_interval(3_600_000) == "1 hour"
    assert describe_interval(90_000) == "90 seconds"
    assert describe_interval(1500) == "1500 ms"
