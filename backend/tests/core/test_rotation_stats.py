"""Tests for compute_rotation_stats: pure counts from slot records."""

from datetime import timedelta

from slot_rotation.core.rotation_stats import compute_rotation_stats
from tests.factories import BASE_TIME, make_record


def test_empty_records_yield_zero_stats():
    counts = compute_rotation_stats([])
    assert counts.total_active == 0
    assert counts.total_rotated == 0
    assert counts.last_rotation is None
    assert not counts.needs_rotation


def test_counts_rotated_and_latest_timestamp():
    later = BASE_TIME + timedelta(hours=4)
    records = [
        make_record(1, last_rotation_at=BASE_TIME),
        make_record(2, last_rotation_at=later),
        make_record(3),
    ]
    counts = compute_rotation_stats(records)
    assert counts.total_active == 3
    assert counts.total_rotated == 2
    assert counts.without_rotation == 1
    assert counts.last_rotation == later
    assert counts.needs_rotation


def test_inactive_records_ignored():
    counts = compute_rotation_stats([
        make_record(1, status="expired", last_rotation_at=BASE_TIME),
        make_record(2, last_rotation_at=BASE_TIME),
    ])
    assert counts.total_active == 1
    assert counts.total_rotated == 1


def test_unpaid_records_not_counted():
    counts = compute_rotation_stats([
        make_record(1, payment_confirmed=False, last_rotation_at=BASE_TIME),
        make_record(2, payment_confirmed=None),
        make_record(3),
    ])
    assert counts.total_active == 2
    assert counts.total_rotated == 0
