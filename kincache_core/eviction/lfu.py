"""KinCache LFU Policy - Least Frequently Used Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Mapping, Optional

from kincache_core.cache.entry import CacheEntry
from kincache_core.eviction.policy import EvictionPolicy, register_policy


@register_policy
class LFUPolicy(EvictionPolicy):
    """Least Frequently Used eviction policy.

    Evicts the entry with the lowest ``access_count``. Ties are broken by
    insertion order, so among never-read entries the oldest insert goes
    first.

    Example:
        policy = LFUPolicy()
        evict_key = policy.select(entries, now)
    """

    name = "lfu"

    def choose(self, entries: Mapping[str, CacheEntry], now: float) -> Optional[str]:
        least_key: Optional[str] = None
        least_count = float("inf")
        for key, entry in entries.items():
            if entry.access_count < least_count:
                least_count = entry.access_count
                least_key = key
        return least_key


__all__ = ["LFUPolicy"]
