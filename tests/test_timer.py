"""Tests for background timers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import threading

import pytest

from kincache_core.cache.cache import CacheConfig
from kincache_core.cache.timer import PeriodicTimer

WAIT = 5.0


class TestPeriodicTimer:
    """Tests for PeriodicTimer."""

    def test_runs_function(self):
        """Test a short-interval timer fires repeatedly."""
        calls = []
        fired = threading.Event()

        def tick():
            calls.append(1)
            if len(calls) >= 3:
                fired.set()

        timer = PeriodicTimer("tick", 0.01, tick)
        timer.start()
        try:
            assert fired.wait(WAIT)
        finally:
            timer.cancel()

        assert len(calls) >= 3

    def test_exception_keeps_schedule(self):
        """Test a raising function does not stop later runs."""
        calls = []
        recovered = threading.Event()

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            recovered.set()

        timer = PeriodicTimer("flaky", 0.01, flaky)
        timer.start()
        try:
            assert recovered.wait(WAIT)
        finally:
            timer.cancel()

        assert len(calls) >= 2

    def test_cancel_joins_thread(self):
        """Test cancel stops the thread and no further runs happen."""
        calls = []
        timer = PeriodicTimer("idle", 0.01, lambda: calls.append(1))
        timer.start()
        assert timer.is_running

        timer.cancel()
        count = len(calls)

        assert not timer.is_running
        assert not any(t.name == "idle" for t in threading.enumerate())
        threading.Event().wait(0.05)
        assert len(calls) == count

    def test_first_run_after_interval(self):
        """Test nothing runs before the first interval elapses."""
        calls = []
        timer = PeriodicTimer("slow", 3600, lambda: calls.append(1))
        timer.start()
        timer.start()

        timer.cancel()

        assert calls == []


class TestCacheTimers:
    """Tests for the timers a started cache runs."""

    def _threads(self, name):
        return [t for t in threading.enumerate() if t.name.startswith(f"Cache-{name}-") and t.is_alive()]

    def test_cleanup_and_persistence_fire(self, make_cache, clock):
        """Test cleanup and snapshot timers run on their own."""
        cache = make_cache(
            CacheConfig(
                name="timers",
                cleanup_interval=0.02,
                persistence_interval=0.02,
                cluster_sync_interval=0.02,
            )
        )
        cleaned = threading.Event()
        saved = threading.Event()
        cache.on("cleanup", lambda key, count: cleaned.set())
        cache.on("persistence_save", lambda key, snapshot: saved.set())

        cache.set("short", "value", ttl=5)
        clock.advance(10)
        cache.start()

        assert len(self._threads("timers")) == 3
        assert cleaned.wait(WAIT)
        assert saved.wait(WAIT)
        assert "short" not in cache.keys()

    def test_destroy_stops_every_timer(self, make_cache):
        """Test destroy leaves no timer threads behind."""
        cache = make_cache(
            CacheConfig(
                name="teardown",
                cleanup_interval=0.02,
                persistence_interval=0.02,
                cluster_sync_interval=0.02,
            )
        )
        cache.start()
        assert len(self._threads("teardown")) == 3

        cache.destroy()

        assert self._threads("teardown") == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
