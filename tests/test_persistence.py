"""Tests for snapshot persistence.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from kincache_core.cache.cache import CacheConfig
from kincache_core.cache.entry import CacheEntry, EntryMetadata
from kincache_core.metrics.stats import CacheStats
from kincache_core.persistence.snapshot import SNAPSHOT_KEY, PersistenceSnapshotter
from kincache_core.protocol.serializer import JSONSerializer
from kincache_core.store.file import FileStore
from kincache_core.store.memory import MemoryStore


def persistent_config(**kwargs):
    """Persistent config with background timers effectively idle."""
    kwargs.setdefault("clustering_enabled", False)
    kwargs.setdefault("cleanup_interval", 3600)
    kwargs.setdefault("persistence_interval", 3600)
    return CacheConfig(**kwargs)


class TestPersistenceSnapshotter:
    """Tests for PersistenceSnapshotter."""

    def _entries(self, now):
        return [
            CacheEntry(
                key="family:1",
                value={"name": "Lovelace"},
                ttl_seconds=300,
                created_at=now,
                metadata=EntryMetadata(tags={"kind": "family"}),
            ),
            CacheEntry(key="blob", value=b"\x78\x9c", ttl_seconds=60, created_at=now, compressed=True),
        ]

    @pytest.mark.parametrize("serializer", [None, JSONSerializer()])
    def test_save_and_load(self, clock, serializer):
        """Test a saved snapshot loads back intact."""
        store = MemoryStore()
        snapshotter = PersistenceSnapshotter(store, serializer=serializer, clock=clock)

        saved = snapshotter.save(self._entries(clock.now), CacheStats(hit_count=3))
        loaded = snapshotter.load()

        assert saved is not None
        assert snapshotter.last_saved_at == clock.now
        assert [e.key for e in loaded.entries] == ["family:1", "blob"]
        assert loaded.entries[0].metadata.tags == {"kind": "family"}
        assert loaded.entries[1].value == b"\x78\x9c"
        assert loaded.stats.hit_count == 3

    def test_stale_snapshot_discarded(self, clock):
        """Test snapshots older than max_age are dropped."""
        store = MemoryStore()
        snapshotter = PersistenceSnapshotter(store, max_age=100, clock=clock)
        snapshotter.save(self._entries(clock.now), CacheStats())

        clock.advance(101)

        assert snapshotter.load() is None
        assert store.get(SNAPSHOT_KEY) is None

    def test_corrupt_snapshot_discarded(self, clock):
        """Test unreadable snapshots are dropped."""
        store = MemoryStore()
        store.set(SNAPSHOT_KEY, b"\xc1garbage")
        snapshotter = PersistenceSnapshotter(store, clock=clock)

        assert snapshotter.load() is None
        assert store.get(SNAPSHOT_KEY) is None

    def test_save_failure(self, clock):
        """Test a full store makes save return None."""
        snapshotter = PersistenceSnapshotter(MemoryStore(quota_bytes=16), clock=clock)

        assert snapshotter.save(self._entries(clock.now), CacheStats()) is None
        assert snapshotter.last_saved_at is None

    def test_no_snapshot(self, clock):
        """Test loading from an empty store."""
        assert PersistenceSnapshotter(MemoryStore(), clock=clock).load() is None


class TestCachePersistence:
    """Tests for snapshot save and restore through the cache."""

    def test_restart_restores_entries_and_counters(self, make_cache, clock):
        """Test a new cache on the same store picks up the old state."""
        store = MemoryStore()
        first = make_cache(persistent_config(), storage=store)
        first.start()
        first.set("key1", "value1")
        first.set("key2", {"n": 2})
        first.get("key1")
        first.get("missing")
        first.destroy()

        second = make_cache(persistent_config(), storage=store)
        loaded = []
        second.on("persistence_load", lambda _, snapshot: loaded.append(len(snapshot.entries)))
        second.start()

        assert loaded == [2]
        assert second.get("key2") == {"n": 2}

        stats = second.get_stats()
        assert stats.total_entries == 2
        assert stats.total_size == second.size_bytes
        assert stats.hit_count == 2
        assert stats.miss_count == 1

    def test_save_snapshot_event(self, make_cache, clock):
        """Test explicit saves emit persistence_save."""
        store = MemoryStore()
        cache = make_cache(persistent_config(), storage=store)
        saved = []
        cache.on("persistence_save", lambda _, snapshot: saved.append(snapshot.timestamp))

        cache.set("key", "value")
        snapshot = cache.save_snapshot()

        assert saved == [clock.now]
        assert len(snapshot.entries) == 1
        assert store.get(SNAPSHOT_KEY) is not None

    def test_expired_entries_reaped_after_restore(self, make_cache, clock):
        """Test restored entries still honour their TTL."""
        store = MemoryStore()
        first = make_cache(persistent_config(), storage=store)
        first.set("short", "value", ttl=5)
        first.destroy()

        clock.advance(10)
        second = make_cache(persistent_config(), storage=store)
        second.start()

        assert second.size() == 1
        assert second.get("short") is None
        assert second.size() == 0

    def test_compressed_entries_survive(self, make_cache, tmp_path):
        """Test compressed entries restore from disk."""
        value = {"timeline": ["birthday party " * 10] * 20}
        store = FileStore(str(tmp_path))
        first = make_cache(persistent_config(wire_format="json"), storage=store)
        first.set("timeline", value)
        first.destroy()

        second = make_cache(persistent_config(wire_format="json"), storage=FileStore(str(tmp_path)))
        second.start()

        assert second.get_entry("timeline").compressed
        assert second.get("timeline") == value

    def test_persistence_disabled(self, make_cache):
        """Test no snapshot is written when persistence is off."""
        store = MemoryStore()
        cache = make_cache(persistent_config(persistence_enabled=False), storage=store)
        cache.set("key", "value")

        assert cache.save_snapshot() is None
        cache.destroy()
        assert store.get(SNAPSHOT_KEY) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
