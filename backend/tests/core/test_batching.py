"""Tests for batch chunking."""

import pytest

from slot_rotation.core.batching import batch_count, chunk
from slot_rotation.core.errors import InvalidRotationParameterError


@pytest.mark.parametrize("total,limit", [(0, 500), (1, 500), (500, 500), (501, 500), (2000, 500), (2001, 500), (7, 3)])
def test_chunk_count_is_ceiling(total, limit):
    chunks = chunk(list(range(total)), limit)
    assert len(chunks) == batch_count(total, limit) == -(-total // limit)
    assert all(len(c) <= limit for c in chunks)


def test_chunks_preserve_order():
    chunks = chunk(list(range(7)), 3)
    assert chunks == [(0, 1, 2), (3, 4, 5), (6,)]


def test_limit_must_be_positive():
    with pytest.raises(InvalidRotationParameterError):
        chunk([1, 2], 0)
