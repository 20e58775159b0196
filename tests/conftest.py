"""Shared test fixtures.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from kincache_core.cache.cache import Cache, CacheConfig


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_cache(clock):
    """Build caches on the fake clock and destroy them after the test."""
    caches = []

    def factory(config=None, **kwargs):
        kwargs.setdefault("clock", clock)
        cache = Cache(config or CacheConfig(), **kwargs)
        caches.append(cache)
        return cache

    yield factory

    for cache in caches:
        cache.destroy()
