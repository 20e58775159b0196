"""KinCache LRU Policy - Least Recently Used Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Mapping, Optional

from kincache_core.cache.entry import CacheEntry
from kincache_core.eviction.policy import EvictionPolicy, register_policy


def find_lru_key(entries: Mapping[str, CacheEntry]) -> Optional[str]:
    """Find the key with the oldest ``last_accessed_at``.

    Ties go to the first key in iteration order.
    """
    oldest_key: Optional[str] = None
    oldest_time = float("inf")
    for key, entry in entries.items():
        if entry.last_accessed_at < oldest_time:
            oldest_time = entry.last_accessed_at
            oldest_key = key
    return oldest_key


@register_policy
class LRUPolicy(EvictionPolicy):
    """Least Recently Used eviction policy.

    Evicts the entry that has not been read for the longest time.

    Example:
        policy = LRUPolicy()
        evict_key = policy.select(entries, now)
    """

    name = "lru"

    def choose(self, entries: Mapping[str, CacheEntry], now: float) -> Optional[str]:
        return find_lru_key(entries)


__all__ = ["LRUPolicy", "find_lru_key"]
