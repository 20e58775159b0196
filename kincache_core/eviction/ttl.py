"""KinCache TTL Policy - Expired-First Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from kincache_core.cache.entry import CacheEntry
from kincache_core.eviction.lru import find_lru_key
from kincache_core.eviction.policy import EvictionPolicy, register_policy

logger = logging.getLogger(__name__)


@register_policy
class TTLPolicy(EvictionPolicy):
    """Evict an already expired entry, falling back to LRU.

    An over-capacity cache with nothing expired still needs a victim, so
    when no entry has outlived its TTL the least recently used one is
    chosen instead.
    """

    name = "ttl"

    def __init__(self):
        super().__init__()
        self.fallbacks = 0

    def choose(self, entries: Mapping[str, CacheEntry], now: float) -> Optional[str]:
        for key, entry in entries.items():
            if entry.is_expired(now):
                return key

        self.fallbacks += 1
        logger.debug("No expired entry to evict, falling back to LRU")
        return find_lru_key(entries)


__all__ = ["TTLPolicy"]
