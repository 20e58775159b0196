"""KinCache Namespace - Key-Prefixed Cache Views.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional, Union

if TYPE_CHECKING:
    from kincache_core.cache.cache import Cache

_MISSING = object()


@dataclass
class NamespaceStats:
    """Statistics for a namespace view."""

    name: str
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        """Get hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class Namespace:
    """A view over the keys of a cache that start with ``<name>:``.

    Entries live in the parent cache, so they share its capacity, eviction
    and replication. Clearing a namespace only removes its own keys.

    Example:
        users = cache.namespace("users")
        users.set("1", {"name": "Ada"})
        cache.get("users:1")  # same entry
        users.clear()
    """

    def __init__(self, cache: "Cache", name: str):
        """Initialize namespace.

        Args:
            cache: Parent cache
            name: Namespace name
        """
        self._cache = cache
        self.name = name
        self.prefix = f"{name}:"

        self._stats = NamespaceStats(name=name)
        self._lock = threading.Lock()

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str, default: Any = None) -> Any:
        """Get value from namespace.

        Args:
            key: Key without prefix
            default: Value returned on a miss

        Returns:
            Cached value or default
        """
        ns_key = self._make_key(key)
        value = self._cache.get(ns_key, _MISSING)
        hit = value is not _MISSING

        with self._lock:
            if hit:
                self._stats.hits += 1
            else:
                self._stats.misses += 1

        return value if hit else default

    def set(self, key: str, value: Any, ttl: Optional[float] = None, metadata=None) -> None:
        """Set value in namespace.

        Args:
            key: Key without prefix
            value: Value to cache
            ttl: TTL in seconds
            metadata: Entry metadata
        """
        self._cache.set(self._make_key(key), value, ttl=ttl, metadata=metadata)

    def delete(self, key: str) -> bool:
        """Delete key from namespace."""
        return self._cache.delete(self._make_key(key))

    def has(self, key: str) -> bool:
        """Check if key exists in namespace."""
        return self._cache.has(self._make_key(key))

    def ttl(self, key: str) -> float:
        """Get remaining TTL, -1 if absent."""
        return self._cache.ttl(self._make_key(key))

    def increment(self, key: str, amount: Union[int, float] = 1) -> Union[int, float]:
        """Increment numeric value."""
        return self._cache.increment(self._make_key(key), amount)

    def decrement(self, key: str, amount: Union[int, float] = 1) -> Union[int, float]:
        """Decrement numeric value."""
        return self._cache.decrement(self._make_key(key), amount)

    def set_many(self, items: Dict[str, Any], ttl: Optional[float] = None) -> int:
        """Set multiple values.

        Args:
            items: Dict of key -> value
            ttl: TTL for all items

        Returns:
            Number of items set
        """
        return self._cache.set_many(
            {self._make_key(k): v for k, v in items.items()}, ttl=ttl
        )

    def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Get multiple values; misses map to None."""
        return {key: self.get(key) for key in keys}

    def keys(self) -> List[str]:
        """Get live keys, prefix stripped."""
        offset = len(self.prefix)
        return [k[offset:] for k in self._cache.keys() if k.startswith(self.prefix)]

    def clear(self) -> int:
        """Remove every key of this namespace.

        Returns:
            Number of entries removed
        """
        return self._cache.invalidate_namespace(self.name)

    def get_stats(self) -> NamespaceStats:
        """Get a copy of namespace statistics."""
        with self._lock:
            return NamespaceStats(self.name, self._stats.hits, self._stats.misses)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return len(self.keys())

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"Namespace(name={self.name!r})"


__all__ = ["Namespace", "NamespaceStats"]
