"""Rotation Orchestrator: full runs against the in-memory store.

Invariants:
    - Same window, same layout; the store is read once per run
    - Verifier failures and empty eligible sets issue zero writes
    - A failing batch surfaces as StoreError with the partial-commit context
    - The lease is released and a run row recorded on success and on failure
"""

from datetime import timedelta

import pytest

from slot_rotation.core.errors import (
    DuplicateSlotError, NotConfiguredError, RotationInProgressError, StoreError,
)
from slot_rotation.core.rotation_policy import RotationPolicy
from slot_rotation.services.rotation_orchestrator import RotationOrchestrator
from tests.factories import TWO_HOURS_MS, FIXED_NOW_MS, fixed_clock, make_record, make_records
from tests.services.fake_store import FakeLease, FakeRunLog, InMemorySlotStore

SMALL = RotationPolicy(slot_count=10, group_size=5)


def _orchestrator(store, clock=None, policy=SMALL, **kwargs):
    return RotationOrchestrator(store, clock or fixed_clock(), policy, **kwargs)


async def test_five_records_land_on_distinct_slots_with_matching_groups():
    store = InMemorySlotStore(make_records(5, group_size=5))
    result = await _orchestrator(store).run()

    assert result.success
    assert result.rotated_count == 5
    assert result.batch_count == 1
    slots = [r.slot_number for r in store.records.values()]
    assert len(set(slots)) == 5
    assert all(1 <= s <= 10 for s in slots)
    for r in store.records.values():
        assert r.group_number == -(-r.slot_number // 5)
        assert r.last_rotation_seed == result.seed


async def test_same_window_produces_identical_layout():
    store = InMemorySlotStore(make_records(5, group_size=5))
    await _orchestrator(store).run()
    first = store.layout()
    later_in_window = fixed_clock(FIXED_NOW_MS + 60_000)
    await _orchestrator(store, later_in_window).run()
    assert store.layout() == first


async def test_layout_changes_across_windows():
    store = InMemorySlotStore(make_records(5, group_size=5))
    layouts = set()
    for window in range(5):
        await _orchestrator(store, fixed_clock(FIXED_NOW_MS + window * TWO_HOURS_MS)).run()
        layouts.add(tuple(sorted(store.layout().items())))
    assert len(layouts) > 1


async def test_store_read_once_per_run():
    store = InMemorySlotStore(make_records(5, group_size=5))
    await _orchestrator(store).run()
    assert store.read_count == 1


async def test_no_eligible_records_means_no_writes():
    store = InMemorySlotStore([
        make_record(1, status="inactive"),
        make_record(2, payment_confirmed=False),
        make_record(3, display_asset=None),
    ])
    result = await _orchestrator(store).run()
    assert result.success
    assert result.rotated_count == 0
    assert result.batch_count == 0
    assert result.message == "No eligible records to rotate"
    assert store.batches == []


async def test_overflow_rotates_capacity_in_four_batches():
    store = InMemorySlotStore(make_records(2200))
    result = await _orchestrator(store, policy=RotationPolicy()).run()

    assert result.rotated_count == 2000
    assert result.overflow_count == 200
    assert result.batch_count == 4
    assert [len(b) for b in store.batches] == [500, 500, 500, 500]
    rotated = [r for r in store.records.values() if r.last_rotation_seed is not None]
    assert len({r.slot_number for r in rotated}) == 2000
    # Latest purchases are the ones left out
    assert store.records["rec-02001"].last_rotation_seed is None
    assert store.records["rec-02200"].slot_number == 2200


async def test_compact_slots_fills_the_first_pages():
    store = InMemorySlotStore(make_records(5, group_size=5))
    policy = RotationPolicy(slot_count=10, group_size=5, compact_slots=True)
    await _orchestrator(store, policy=policy).run()
    assert sorted(store.layout().values()) == [1, 2, 3, 4, 5]


async def test_preview_describes_first_assignments():
    store = InMemorySlotStore(make_records(30))
    result = await _orchestrator(store, policy=RotationPolicy(slot_count=200, group_size=20)).run()
    assert len(result.preview) == 10
    first = result.preview[0]
    assert first["recordId"] == "rec-00001"
    assert first["oldSlotNumber"] == 1
    assert first["newSlotNumber"] == store.slot_of("rec-00001")


async def test_verifier_failure_writes_nothing(monkeypatch):
    monkeypatch.setattr(
        "slot_rotation.services.rotation_orchestrator.permute",
        lambda n, seed, factory: [1] * n,
    )
    store = InMemorySlotStore(make_records(3, group_size=5))
    lease, run_log = FakeLease(), FakeRunLog()

    with pytest.raises(DuplicateSlotError):
        await _orchestrator(store, lease=lease, run_log=run_log).run()

    assert store.batches == []
    assert lease.holder is None
    assert run_log.runs[0]["status"] == "failed"
    assert run_log.runs[0]["error_code"] == "DUPLICATE_SLOT"


async def test_failed_batch_reports_partial_commit():
    store = InMemorySlotStore(make_records(1200), fail_on_batch=1)
    run_log = FakeRunLog()
    orchestrator = _orchestrator(store, policy=RotationPolicy(), run_log=run_log)

    with pytest.raises(StoreError) as exc_info:
        await orchestrator.run()

    exc = exc_info.value
    assert exc.is_partial_commit
    assert exc.batch_index == 1
    assert exc.committed_count == 500
    assert exc.context.seed == fixed_clock().current_seed()
    assert exc.context.run_id == run_log.runs[0]["id"]
    assert store.write_count == 500
    row = run_log.runs[0]
    assert row["rotated_count"] == 500
    assert row["committed_batches"] == 1
    assert row["batch_count"] == 2


async def test_read_failure_writes_nothing():
    store = InMemorySlotStore(make_records(3), fail_on_read=True)
    with pytest.raises(StoreError):
        await _orchestrator(store).run()
    assert store.batches == []


async def test_missing_store_raises_not_configured():
    with pytest.raises(NotConfiguredError):
        await RotationOrchestrator(None, fixed_clock()).run()


async def test_held_lease_skips_run():
    store = InMemorySlotStore(make_records(3, group_size=5))
    lease = FakeLease(holder="other-run")
    with pytest.raises(RotationInProgressError) as exc_info:
        await _orchestrator(store, lease=lease).run()
    assert exc_info.value.holder == "other-run"
    assert store.read_count == 0
    assert lease.holder == "other-run"


async def test_success_releases_lease_and_records_run():
    store = InMemorySlotStore(make_records(5, group_size=5))
    lease, run_log = FakeLease(), FakeRunLog()
    result = await _orchestrator(store, lease=lease, run_log=run_log).run()

    assert lease.released == [result.run_id]
    assert lease.holder is None
    (row,) = run_log.runs
    assert row["id"] == result.run_id
    assert row["status"] == "succeeded"
    assert row["rotated_count"] == 5
    assert row["seed"] == result.seed


async def test_run_log_failure_does_not_fail_the_run():
    class BrokenRunLog(FakeRunLog):
        async def record(self, run):
            raise StoreError("audit table missing", "insert")

    store = InMemorySlotStore(make_records(5, group_size=5))
    result = await _orchestrator(store, run_log=BrokenRunLog()).run()
    assert result.rotated_count == 5


@pytest.mark.parametrize("sitting_out", [
    {"display_asset": None},
    {"payment_confirmed": False},
    {"expires_at": fixed_clock().now() - timedelta(days=1)},
])
async def test_active_records_sitting_out_keep_their_slot(sitting_out):
    store = InMemorySlotStore(
        make_records(9, group_size=5) + [make_record(10, group_size=5, **sitting_out)],
    )
    for window in range(5):
        clock = fixed_clock(FIXED_NOW_MS + window * TWO_HOURS_MS)
        result = await _orchestrator(store, clock).run()
        assert result.rotated_count == 9
        assert result.reserved_count == 1
        assert store.slot_of("rec-00010") == 10
        assert store.active_slots() == list(range(1, 11))


async def test_held_slots_shrink_capacity():
    unpaid = make_record(11, slot_number=3, group_number=1, payment_confirmed=False)
    store = InMemorySlotStore(make_records(10, group_size=5) + [unpaid])
    result = await _orchestrator(store).run()

    assert result.rotated_count == 9
    assert result.overflow_count == 1
    rotated = [r for r in store.records.values() if r.last_rotation_seed is not None]
    assert 3 not in {r.slot_number for r in rotated}
    assert store.slot_of("rec-00011") == 3


async def test_compact_slots_skip_held_slots():
    held = make_record(4, slot_number=2, group_number=1, display_asset=None)
    store = InMemorySlotStore(make_records(3, group_size=5) + [held])
    policy = RotationPolicy(slot_count=10, group_size=5, compact_slots=True)
    await _orchestrator(store, policy=policy).run()
    assert sorted(store.slot_of(f"rec-0000{i}") for i in (1, 2, 3)) == [1, 3, 4]
    assert store.slot_of("rec-00004") == 2


async def test_empty_run_writes_lease_and_run_log_only():
    store = InMemorySlotStore([make_record(1, payment_confirmed=False)])
    lease, run_log = FakeLease(), FakeRunLog()
    result = await _orchestrator(store, lease=lease, run_log=run_log).run()

    assert result.rotated_count == 0
    assert store.batches == []
    assert lease.released == [result.run_id]
    (row,) = run_log.runs
    assert row["rotated_count"] == 0
    assert row["status"] == "succeeded"
