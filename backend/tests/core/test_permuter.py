"""Tests for the seeded Fisher-Yates permuter and its random sources."""

import pytest

from slot_rotation.core.errors import InvalidRotationParameterError
from slot_rotation.core.permuter import fisher_yates, permute
from slot_rotation.core.random_source import LcgRandomSource
from tests.factories import FIXED_NOW_MS, TWO_HOURS_MS


def test_lcg_sequence_matches_constants():
    source = LcgRandomSource(0)
    assert source.next_float() == 49297 / 233280
    assert source.next_float() == 165494 / 233280


def test_lcg_values_in_unit_interval():
    source = LcgRandomSource(FIXED_NOW_MS)
    for _ in range(1000):
        assert 0 <= source.next_float() < 1


def test_known_small_permutation():
    assert permute(3, 0) == [3, 2, 1]


@pytest.mark.parametrize("n", [0, 1, 2, 10, 2000])
def test_permutation_is_bijection(n):
    result = permute(n, FIXED_NOW_MS)
    assert sorted(result) == list(range(1, n + 1))


def test_same_seed_same_permutation():
    assert permute(2000, FIXED_NOW_MS) == permute(2000, FIXED_NOW_MS)


def test_unseeded_permutation_is_still_bijection():
    assert sorted(permute(500)) == list(range(1, 501))


def test_negative_count_rejected():
    with pytest.raises(InvalidRotationParameterError):
        permute(-1, 0)


def test_fisher_yates_does_not_mutate_input():
    items = ["a", "b", "c", "d"]
    shuffled = fisher_yates(items, LcgRandomSource(42))
    assert items == ["a", "b", "c", "d"]
    assert sorted(shuffled) == items


def test_different_windows_generally_differ():
    seeds = [(FIXED_NOW_MS // TWO_HOURS_MS + k) * TWO_HOURS_MS for k in range(20)]
    orderings = {tuple(permute(50, s)) for s in seeds}
    assert len(orderings) >= 19


def test_first_slot_spreads_across_slot_space():
    """Across many windows the first handed-out slot lands on every page."""
    seeds = [k * TWO_HOURS_MS for k in range(81)]
    pages = {-(-permute(2000, s)[0] // 200) for s in seeds}
    assert len(pages) >= 6


def test_custom_source_factory_replaces_lcg():
    class Reversing:
        def __init__(self, seed):
            pass

        def next_float(self):
            return 0.0

    # j is always 0: each step swaps position i with the head
    assert permute(4, 1, source_factory=Reversing) == [2, 3, 4, 1]
