"""KinCache Eviction Policy - Abstract Eviction Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Type

from kincache_core.cache.entry import CacheEntry

logger = logging.getLogger(__name__)


class EvictionPolicy(ABC):
    """Abstract base for eviction policies.

    A policy picks the victim key when the cache is over capacity. Policies
    are stateless scans over the live entries; the entry records already
    carry the access bookkeeping they need.

    Implementations:
    - LRU: Least Recently Used
    - LFU: Least Frequently Used
    - TTL: Already expired first, LRU otherwise
    - Random: Uniform random choice

    Example:
        policy = create_policy("lru")
        victim = policy.select(entries, now=time.time())
    """

    name: str = ""

    def __init__(self):
        self.selections = 0

    @abstractmethod
    def choose(self, entries: Mapping[str, CacheEntry], now: float) -> Optional[str]:
        """Choose key to evict.

        Args:
            entries: Live entries in insertion order
            now: Current time

        Returns:
            Key to evict or None
        """
        pass

    def select(self, entries: Mapping[str, CacheEntry], now: float) -> Optional[str]:
        """Choose key to evict and count the selection.

        Args:
            entries: Live entries in insertion order
            now: Current time

        Returns:
            Key to evict, or None when ``entries`` is empty
        """
        if not entries:
            return None
        key = self.choose(entries, now)
        if key is not None:
            self.selections += 1
        return key

    def __repr__(self) -> str:
        return f"{type(self).__name__}(selections={self.selections})"


_POLICIES: Dict[str, Type[EvictionPolicy]] = {}


def register_policy(cls: Type[EvictionPolicy]) -> Type[EvictionPolicy]:
    """Class decorator adding a policy to the name registry."""
    _POLICIES[cls.name] = cls
    return cls


def create_policy(name: str, **kwargs) -> EvictionPolicy:
    """Create a policy by name.

    Args:
        name: Policy name (lru, lfu, ttl, random)
        **kwargs: Policy constructor arguments

    Returns:
        EvictionPolicy instance

    Raises:
        ValueError: If the name is unknown
    """
    try:
        cls = _POLICIES[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown eviction policy {name!r}, expected one of {sorted(_POLICIES)}"
        ) from None
    return cls(**kwargs)


def policy_names() -> list[str]:
    """List registered policy names."""
    return sorted(_POLICIES)


__all__ = ["EvictionPolicy", "create_policy", "register_policy", "policy_names"]
