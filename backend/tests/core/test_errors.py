"""Tests for the error hierarchy envelopes."""

from slot_rotation.core.errors import (
    ErrorCategory, NotConfiguredError, RotationError, RotationInProgressError,
    StoreError,
)


def test_store_error_carries_batch_context():
    exc = StoreError("write rejected", "commit", batch_index=2, committed_batches=2, committed_count=1000)
    body = exc.to_response()
    assert body["success"] is False
    assert body["errorCode"] == "STORE_ERROR"
    assert body["context"]["batchIndex"] == 2
    assert body["context"]["committedCount"] == 1000
    assert exc.is_partial_commit
    assert exc.detail == "write rejected"


def test_store_error_without_commits_is_not_partial():
    assert not StoreError("down", "query").is_partial_commit


def test_status_codes():
    assert NotConfiguredError().http_status == 503
    assert RotationInProgressError("abc").http_status == 409
    assert isinstance(NotConfiguredError(), RotationError)
    assert NotConfiguredError().category == ErrorCategory.CONFIGURATION
