"""Tests for the FIFO bounded cache."""

import pytest

from projectmap.bounded_cache import BoundedCache, CacheEntry


def test_inserting_past_capacity_evicts_only_the_oldest_key():
    cache = BoundedCache(5000)
    for i in range(5001):
        cache.set(f"/f/{i}", i)

    assert len(cache) == 5000
    assert "/f/0" not in cache
    assert all(f"/f/{i}" in cache for i in range(1, 5001))


def test_reads_do_not_protect_a_key_from_eviction():
    cache = BoundedCache(2)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a") == 1

    cache.set("c", 3)

    assert "a" not in cache
    assert cache.keys() == ["b", "c"]


def test_overwrite_keeps_insertion_slot():
    cache = BoundedCache(2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("a", 10)
    cache.set("c", 3)

    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3


def test_pop_and_clear():
    cache = BoundedCache(3)
    cache.set("a", 1)
    assert cache.pop("a") == 1
    assert cache.pop("a") is None
    cache.set("b", 2)
    cache.clear()
    assert len(cache) == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        BoundedCache(0)


def test_cache_entry_matches_mtime_and_optional_size():
    entry = CacheEntry(value=7, mtime_ns=100, size=10)
    assert entry.matches(100, 10)
    assert not entry.matches(101, 10)
    assert not entry.matches(100, 11)

    no_size = CacheEntry(value=True, mtime_ns=5)
    assert no_size.matches(5)
    assert no_size.matches(5, 999)
