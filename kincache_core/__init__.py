"""KinCache - Replicated Application Cache for the Family Platform.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

An in-process cache shared by the platform's UI instances with:
- TTL expiry with lazy reaping and a periodic sweep
- Byte-size and entry-count bounds
- Pluggable eviction policies (LRU, LFU, TTL, random)
- Transparent compression of large values
- Best-effort replication between instances with soft leader election
- Periodic snapshots restored on start
- Lifecycle events and statistics

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                         KinCache System                         │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │   Cache     │  │  Namespace  │  │   Entry     │   CACHE     │
    │  │  get/set    │  │  prefixes   │  │  TTL/access │   LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │        Eviction Policies / Compression         │             │
    │  │   ┌─────┐  ┌─────┐  ┌─────┐  ┌────────┐      │   POLICY    │
    │  │   │ LRU │  │ LFU │  │ TTL │  │ Random │      │   LAYER     │
    │  │   └─────┘  └─────┘  └─────┘  └────────┘      │             │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │        Snapshots / Replication Coordinator     │             │
    │  │   ┌──────────┐  ┌──────────┐  ┌──────────┐   │   CLUSTER   │
    │  │   │ Snapshot │  │  Leader  │  │Transport │   │   LAYER     │
    │  │   └──────────┘  └──────────┘  └──────────┘   │             │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │              Durable Stores                    │             │
    │  │   ┌────────┐  ┌────────┐  ┌────────┐         │   STORAGE   │
    │  │   │ Memory │  │  File  │  │ Redis  │         │   LAYER     │
    │  │   └────────┘  └────────┘  └────────┘         │             │
    │  └──────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from kincache_core import Cache, CacheConfig

    # Simple in-memory cache
    cache = Cache(CacheConfig(max_entries=1000, default_ttl=300))
    cache.start()
    cache.set("user:1", {"name": "Ada"}, ttl=60)
    user = cache.get("user:1")

    # Two instances replicating through Redis
    from kincache_core import RedisStore, RedisTransport

    cache = Cache(storage=RedisStore(), transport=RedisTransport())
    cache.start()

    # Namespaced caching
    posts = cache.namespace("posts")
    posts.set("42", post_data)
    posts.clear()  # Only clears the posts namespace

    cache.destroy()
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from kincache_core.cache.entry import (
    CacheEntry,
    EntryMetadata,
)
from kincache_core.cache.namespace import Namespace
from kincache_core.cache.cache import (
    Cache,
    CacheConfig,
)
from kincache_core.errors import (
    CacheError,
    CacheClosedError,
    StorageError,
    StorageQuotaExceeded,
)
from kincache_core.store.backend import (
    KeyValueStore,
    StorageStats,
)
from kincache_core.store.memory import MemoryStore
from kincache_core.store.file import FileStore
from kincache_core.store.redis import RedisStore, RedisConfig
from kincache_core.eviction.policy import (
    EvictionPolicy,
    create_policy,
)
from kincache_core.eviction.lru import LRUPolicy
from kincache_core.eviction.lfu import LFUPolicy
from kincache_core.eviction.ttl import TTLPolicy
from kincache_core.eviction.random_choice import RandomPolicy
from kincache_core.cluster.node import ClusterNode, NodeStatus
from kincache_core.cluster.transport import (
    BroadcastTransport,
    LocalHub,
    LocalTransport,
    RedisTransport,
)
from kincache_core.cluster.coordinator import ReplicationCoordinator
from kincache_core.persistence.snapshot import PersistenceSnapshotter
from kincache_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    MsgPackSerializer,
)
from kincache_core.protocol.compression import CompressionType
from kincache_core.metrics.stats import CacheStats
from kincache_core.metrics.events import CacheEvent

__all__ = [
    # Cache
    "Cache",
    "CacheConfig",
    "CacheStats",
    "CacheEntry",
    "EntryMetadata",
    "Namespace",
    "CacheEvent",
    # Errors
    "CacheError",
    "CacheClosedError",
    "StorageError",
    "StorageQuotaExceeded",
    # Storage
    "KeyValueStore",
    "StorageStats",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
    # Eviction
    "EvictionPolicy",
    "create_policy",
    "LRUPolicy",
    "LFUPolicy",
    "TTLPolicy",
    "RandomPolicy",
    # Cluster
    "ClusterNode",
    "NodeStatus",
    "BroadcastTransport",
    "LocalHub",
    "LocalTransport",
    "RedisTransport",
    "ReplicationCoordinator",
    # Persistence
    "PersistenceSnapshotter",
    # Protocol
    "Serializer",
    "JSONSerializer",
    "MsgPackSerializer",
    "CompressionType",
]
