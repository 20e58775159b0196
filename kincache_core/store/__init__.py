"""Store module - Durable storage media for snapshots and replication."""

from kincache_core.store.backend import (
    KeyValueStore,
    StorageStats,
    StoreListener,
)
from kincache_core.store.memory import MemoryStore
from kincache_core.store.file import FileStore
from kincache_core.store.redis import RedisStore, RedisConfig

__all__ = [
    "KeyValueStore",
    "StorageStats",
    "StoreListener",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
]
