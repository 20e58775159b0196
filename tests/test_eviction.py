"""Tests for eviction policies.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from kincache_core.cache.entry import CacheEntry
from kincache_core.eviction.governor import CapacityGovernor
from kincache_core.eviction.lfu import LFUPolicy
from kincache_core.eviction.lru import LRUPolicy
from kincache_core.eviction.policy import create_policy, policy_names
from kincache_core.eviction.random_choice import RandomPolicy
from kincache_core.eviction.ttl import TTLPolicy

NOW = 1000.0


def make_entries(*specs):
    """Build an entry store from (key, created_at, last_accessed_at, access_count, ttl)."""
    entries = {}
    for key, created, accessed, count, ttl in specs:
        entries[key] = CacheEntry(
            key=key,
            value=key,
            ttl_seconds=ttl,
            created_at=created,
            last_accessed_at=accessed,
            access_count=count,
            size_bytes=10,
        )
    return entries


class TestLRUPolicy:
    """Tests for LRU eviction policy."""

    def test_oldest_access_wins(self):
        """Test least recently read key is chosen."""
        entries = make_entries(
            ("key1", 900, 990, 3, 300),
            ("key2", 910, 950, 1, 300),
            ("key3", 920, 980, 0, 300),
        )

        assert LRUPolicy().select(entries, NOW) == "key2"

    def test_tie_goes_to_first_inserted(self):
        """Test ties break on insertion order."""
        entries = make_entries(
            ("key1", 900, 900, 0, 300),
            ("key2", 900, 900, 0, 300),
        )

        assert LRUPolicy().select(entries, NOW) == "key1"

    def test_empty(self):
        """Test empty store has no victim."""
        policy = LRUPolicy()

        assert policy.select({}, NOW) is None
        assert policy.selections == 0


class TestLFUPolicy:
    """Tests for LFU eviction policy."""

    def test_least_read_wins(self):
        """Test lowest access count is chosen."""
        entries = make_entries(
            ("key1", 900, 900, 5, 300),
            ("key2", 900, 900, 1, 300),
            ("key3", 900, 900, 3, 300),
        )

        assert LFUPolicy().select(entries, NOW) == "key2"

    def test_tie_goes_to_first_inserted(self):
        """Test ties break on insertion order."""
        entries = make_entries(
            ("key1", 900, 900, 2, 300),
            ("key2", 900, 900, 0, 300),
            ("key3", 900, 900, 0, 300),
        )

        policy = LFUPolicy()
        assert policy.select(entries, NOW) == "key2"
        assert policy.selections == 1


class TestTTLPolicy:
    """Tests for expired-first eviction policy."""

    def test_expired_entry_first(self):
        """Test an expired entry is chosen over the LRU one."""
        entries = make_entries(
            ("key1", 900, 900, 0, 300),
            ("key2", 900, 990, 0, 50),
        )

        policy = TTLPolicy()
        assert policy.select(entries, NOW) == "key2"
        assert policy.fallbacks == 0

    def test_falls_back_to_lru(self):
        """Test LRU is used when nothing has expired."""
        entries = make_entries(
            ("key1", 900, 990, 0, 300),
            ("key2", 900, 950, 0, 300),
        )

        policy = TTLPolicy()
        assert policy.select(entries, NOW) == "key2"
        assert policy.fallbacks == 1


class TestRandomPolicy:
    """Tests for random eviction policy."""

    def test_chooses_live_key(self):
        """Test choice comes from the store."""
        entries = make_entries(
            ("key1", 900, 900, 0, 300),
            ("key2", 900, 900, 0, 300),
            ("key3", 900, 900, 0, 300),
        )

        policy = RandomPolicy(seed=7)
        for _ in range(20):
            assert policy.select(entries, NOW) in entries

    def test_seed_is_reproducible(self):
        """Test equal seeds give equal choices."""
        entries = make_entries(*[(f"key{i}", 900, 900, 0, 300) for i in range(10)])

        a, b = RandomPolicy(seed=3), RandomPolicy(seed=3)
        first = [a.select(entries, NOW) for _ in range(5)]
        second = [b.select(entries, NOW) for _ in range(5)]
        assert first == second


class TestPolicyRegistry:
    """Tests for policy lookup by name."""

    def test_names(self):
        """Test all built-in policies are registered."""
        assert policy_names() == ["lfu", "lru", "random", "ttl"]

    def test_create(self):
        """Test creation is case-insensitive."""
        assert isinstance(create_policy("LRU"), LRUPolicy)
        assert isinstance(create_policy("random", seed=1), RandomPolicy)

    def test_unknown(self):
        """Test unknown names are rejected."""
        with pytest.raises(ValueError):
            create_policy("fifo")


class TestCapacityGovernor:
    """Tests for capacity enforcement."""

    def _run(self, governor, entries, required):
        removed = []

        def remove(key):
            removed.append(key)
            del entries[key]

        def current_size():
            return sum(e.size_bytes for e in entries.values())

        evicted = governor.ensure_capacity(entries, current_size, required, NOW, remove)
        return evicted, removed

    def test_entry_bound(self):
        """Test eviction until there is room for one more entry."""
        entries = make_entries(
            ("key1", 900, 900, 0, 300),
            ("key2", 900, 910, 0, 300),
            ("key3", 900, 920, 0, 300),
        )
        governor = CapacityGovernor(LRUPolicy(), max_size=1000, max_entries=2)

        evicted, removed = self._run(governor, entries, 10)

        assert evicted == ["key1", "key2"]
        assert removed == evicted
        assert list(entries) == ["key3"]

    def test_size_bound(self):
        """Test eviction until the new entry fits."""
        entries = make_entries(
            ("key1", 900, 900, 0, 300),
            ("key2", 900, 910, 0, 300),
            ("key3", 900, 920, 0, 300),
        )
        governor = CapacityGovernor(LRUPolicy(), max_size=35, max_entries=100)

        evicted, _ = self._run(governor, entries, 15)

        assert evicted == ["key1"]
        assert len(entries) == 2

    def test_within_bounds(self):
        """Test nothing is evicted when there is room."""
        entries = make_entries(("key1", 900, 900, 0, 300))
        governor = CapacityGovernor(LRUPolicy(), max_size=100, max_entries=10)

        evicted, _ = self._run(governor, entries, 10)

        assert evicted == []

    def test_oversized_insert_empties_store(self):
        """Test an insert larger than the budget stops once the store is empty."""
        entries = make_entries(("key1", 900, 900, 0, 300))
        governor = CapacityGovernor(LRUPolicy(), max_size=50, max_entries=10)

        evicted, _ = self._run(governor, entries, 500)

        assert evicted == ["key1"]
        assert entries == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
