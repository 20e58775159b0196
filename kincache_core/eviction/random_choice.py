"""KinCache Random Policy - Uniform Random Eviction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import random
from typing import Mapping, Optional

from kincache_core.cache.entry import CacheEntry
from kincache_core.eviction.policy import EvictionPolicy, register_policy


@register_policy
class RandomPolicy(EvictionPolicy):
    """Evict a uniformly random live key.

    Args:
        seed: Optional seed for reproducible choices
    """

    name = "random"

    def __init__(self, seed: Optional[int] = None):
        super().__init__()
        self._rng = random.Random(seed)

    def choose(self, entries: Mapping[str, CacheEntry], now: float) -> Optional[str]:
        return self._rng.choice(list(entries))


__all__ = ["RandomPolicy"]
