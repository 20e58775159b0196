"""KinCache Capacity Governor - Size and Entry-Count Bounds.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Mapping

from kincache_core.cache.entry import CacheEntry
from kincache_core.eviction.policy import EvictionPolicy

logger = logging.getLogger(__name__)


class CapacityGovernor:
    """Enforces the byte-size and entry-count bounds before an insert.

    Evicts one victim at a time, chosen by the eviction policy, until the
    incoming entry fits under both bounds. When the store runs out of
    candidates the loop stops and the insert goes ahead over budget.

    Example:
        governor = CapacityGovernor(LRUPolicy(), max_size=1024, max_entries=100)
        evicted = governor.ensure_capacity(
            entries, current_size, 128, now, remove=cache_remove,
        )
    """

    def __init__(self, policy: EvictionPolicy, max_size: int, max_entries: int):
        """Initialize governor.

        Args:
            policy: Eviction policy choosing victims
            max_size: Maximum total bytes
            max_entries: Maximum entry count
        """
        self.policy = policy
        self.max_size = max_size
        self.max_entries = max_entries

    def is_over(self, current_size: int, entry_count: int, required_size: int) -> bool:
        """Check whether an insert of ``required_size`` bytes would break a bound."""
        return (
            current_size + required_size > self.max_size
            or entry_count >= self.max_entries
        )

    def ensure_capacity(
        self,
        entries: Mapping[str, CacheEntry],
        current_size: Callable[[], int],
        required_size: int,
        now: float,
        remove: Callable[[str], None],
    ) -> List[str]:
        """Evict until an insert of ``required_size`` bytes fits.

        Args:
            entries: Live entry store
            current_size: Returns the tracked total size
            required_size: Size of the entry about to be inserted
            now: Current time
            remove: Removes an evicted key and updates statistics

        Returns:
            Evicted keys in eviction order
        """
        evicted: List[str] = []
        while self.is_over(current_size(), len(entries), required_size):
            key = self.policy.select(entries, now)
            if key is None:
                logger.warning(
                    f"No eviction candidate left, inserting {required_size} bytes "
                    f"over budget"
                )
                break
            remove(key)
            evicted.append(key)
        return evicted

    def __repr__(self) -> str:
        return (
            f"CapacityGovernor(policy={self.policy.name}, "
            f"max_size={self.max_size}, max_entries={self.max_entries})"
        )


__all__ = ["CapacityGovernor"]
