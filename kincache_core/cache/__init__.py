"""Cache module - Core caching functionality.

This module provides the main cache interface and entry management.
"""

from kincache_core.cache.entry import (
    CacheEntry,
    EntryMetadata,
)
from kincache_core.cache.timer import PeriodicTimer
from kincache_core.cache.namespace import (
    Namespace,
    NamespaceStats,
)
from kincache_core.cache.cache import (
    Cache,
    CacheConfig,
)

__all__ = [
    "CacheEntry",
    "EntryMetadata",
    "PeriodicTimer",
    "Namespace",
    "NamespaceStats",
    "Cache",
    "CacheConfig",
]
