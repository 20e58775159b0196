"""Tests for cache lifecycle events.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from kincache_core.cache.cache import CacheConfig
from kincache_core.metrics.events import CacheEvent, EventBus


class TestEventBus:
    """Tests for EventBus."""

    def test_emit_and_unsubscribe(self):
        """Test listeners receive events until unsubscribed."""
        bus = EventBus()
        received = []

        unsubscribe = bus.on("set", lambda key, payload: received.append((key, payload)))
        bus.emit(CacheEvent.SET, "key", 1)
        unsubscribe()
        bus.emit(CacheEvent.SET, "key", 2)

        assert received == [("key", 1)]
        assert bus.listener_count() == 0

    def test_unknown_event(self):
        """Test unknown event names are rejected."""
        with pytest.raises(ValueError):
            EventBus().on("exploded", lambda key, payload: None)

    def test_failing_listener_is_isolated(self):
        """Test one raising listener does not block the others."""
        bus = EventBus()
        received = []

        def broken(key, payload):
            raise RuntimeError("boom")

        bus.on(CacheEvent.DELETE, broken)
        bus.on(CacheEvent.DELETE, lambda key, payload: received.append(key))
        bus.emit(CacheEvent.DELETE, "key")

        assert received == ["key"]

    def test_listener_count(self):
        """Test listener counting per event."""
        bus = EventBus()
        bus.on("get", lambda key, payload: None)
        bus.on("get", lambda key, payload: None)
        bus.on("evict", lambda key, payload: None)

        assert bus.listener_count("get") == 2
        assert bus.listener_count() == 3

        bus.clear()
        assert bus.listener_count() == 0


class TestCacheEvents:
    """Tests for events emitted by cache operations."""

    @pytest.fixture
    def cache(self, make_cache):
        return make_cache(CacheConfig(persistence_enabled=False, clustering_enabled=False))

    def _record(self, cache, *events):
        log = []
        for event in events:
            cache.on(event, lambda key, payload, event=event: log.append((event, key, payload)))
        return log

    def test_operation_events(self, cache):
        """Test set/get/delete/clear each emit their event."""
        log = self._record(cache, "set", "get", "delete", "clear")

        cache.set("key", "value")
        cache.get("key")
        cache.get("missing")
        cache.delete("key")
        cache.clear()

        names = [(event, key) for event, key, _ in log]
        assert names == [
            ("set", "key"),
            ("get", "key"),
            ("get", "missing"),
            ("delete", "key"),
            ("clear", None),
        ]
        assert log[1][2] == "value"
        assert log[2][2] is None

    def test_set_payload_is_entry(self, cache):
        """Test set listeners receive the stored entry."""
        log = self._record(cache, "set")

        cache.set("key", "value", ttl=42)

        entry = log[0][2]
        assert entry.key == "key"
        assert entry.ttl_seconds == 42

    def test_listener_may_use_cache(self, cache):
        """Test listeners can call back into the cache."""
        cache.on("set", lambda key, _: key != "mirror" and cache.set("mirror", key))

        cache.set("key", "value")

        assert cache.get("mirror") == "key"

    def test_failing_listener_does_not_break_set(self, cache):
        """Test a raising listener leaves the operation intact."""
        def broken(key, payload):
            raise RuntimeError("boom")

        cache.on("set", broken)
        cache.set("key", "value")

        assert cache.get("key") == "value"

    def test_destroy_detaches_listeners(self, cache):
        """Test destroy drops every listener."""
        log = self._record(cache, "set", "clear")

        cache.destroy()

        assert cache._events.listener_count() == 0
        assert log == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
