"""
Unit tests for IdentifierAllocator.

Covers:
    - Default token shape (6 symbols from the codec alphabet)
    - Token and id agree through the codec
    - Collision-then-retry with a scripted source and a small alphabet
    - Rows with an empty target still count as taken
    - Store failures propagate
    - Argument validation
"""

import random

import pytest

from linkgate.errors import StoreError
from linkgate.manager import codec
from linkgate.manager.allocator import IdentifierAllocator
from linkgate.storage.storage import Storage


def test_default_token_shape(storage):
    allocator = IdentifierAllocator(storage, rng=random.Random(7))
    for _ in range(100):
        token, link_id = allocator.allocate()
        assert len(token) == 6
        assert codec.is_valid(token)
        assert codec.decode(token) == link_id
        assert 0 <= link_id < 62**6


def test_seeded_source_is_deterministic(storage):
    a = IdentifierAllocator(storage, rng=random.Random(42))
    b = IdentifierAllocator(storage, rng=random.Random(42))
    assert [a.allocate() for _ in range(5)] == [b.allocate() for _ in range(5)]


def test_retries_past_taken_ids(storage, scripted_rng):
    # Alphabet "Aa" with length 1 gives ids 0 and 1 only.
    storage.save_link(0, "https://taken.example")
    allocator = IdentifierAllocator(storage, rng=scripted_rng("AAAa"), length=1, alphabet="Aa")
    token, link_id = allocator.allocate()
    assert (token, link_id) == ("a", 1)


def test_retry_with_seeded_random_small_space(storage):
    storage.save_link(0, "https://zero.example")
    storage.save_link(1, "https://one.example")
    allocator = IdentifierAllocator(storage, rng=random.Random(3), length=1, alphabet="AaB")
    token, link_id = allocator.allocate()
    assert token == "B"
    assert link_id == 2


def test_empty_target_row_counts_as_taken(storage, scripted_rng):
    storage.save_link(0, "")
    allocator = IdentifierAllocator(storage, rng=scripted_rng("Aa"), length=1, alphabet="Aa")
    assert allocator.allocate() == ("a", 1)


def test_store_failure_propagates():
    class BrokenStorage(Storage):
        def get_link(self, link_id):
            raise StoreError("down")

    allocator = IdentifierAllocator(BrokenStorage(), rng=random.Random(1))
    with pytest.raises(StoreError):
        allocator.allocate()


def test_allocate_does_not_write(storage):
    IdentifierAllocator(storage, rng=random.Random(9)).allocate()
    assert len(storage) == 0


@pytest.mark.parametrize("kwargs", [{"length": 0}, {"alphabet": ""}, {"alphabet": "ab-"}])
def test_rejects_bad_arguments(storage, kwargs):
    with pytest.raises(ValueError):
        IdentifierAllocator(storage, **kwargs)
