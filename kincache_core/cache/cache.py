"""KinCache Cache - Main Cache Implementation.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import dataclasses
import fnmatch
import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Pattern,
    TypeVar,
    Union,
)

from kincache_core.cache.entry import CacheEntry, EntryMetadata
from kincache_core.cache.namespace import Namespace
from kincache_core.cache.timer import PeriodicTimer
from kincache_core.cluster.coordinator import ClusterAction, ReplicaTarget, ReplicationCoordinator
from kincache_core.cluster.node import ClusterNode
from kincache_core.cluster.transport import BroadcastTransport
from kincache_core.errors import CacheClosedError
from kincache_core.eviction.governor import CapacityGovernor
from kincache_core.eviction.policy import EvictionPolicy, create_policy, policy_names
from kincache_core.metrics.events import CacheEvent, EventBus, Listener
from kincache_core.metrics.stats import CacheStats
from kincache_core.persistence.snapshot import PersistenceSnapshotter, Snapshot
from kincache_core.protocol.compression import (
    CompressedValue,
    CompressionCodec,
    CompressionType,
    DecompressionError,
)
from kincache_core.protocol.serializer import get_serializer, measure_size
from kincache_core.store.backend import KeyValueStore
from kincache_core.store.memory import MemoryStore

logger = logging.getLogger(__name__)

V = TypeVar("V")

_MISSING = object()

MetadataLike = Union[EntryMetadata, Mapping[str, Any]]


@dataclass
class CacheConfig:
    """Cache configuration.

    Durations are in seconds, sizes in bytes.

    Attributes:
        name: Cache name
        max_size: Maximum total size of stored values
        max_entries: Maximum entry count
        default_ttl: TTL used when ``set`` gets none
        cleanup_interval: Seconds between expiry sweeps
        compression_threshold: Serialized size above which values are compressed
        enable_compression: Enable value compression
        compression: Compression algorithm
        persistence_enabled: Save and restore snapshots
        persistence_interval: Seconds between snapshots
        persistence_max_age: Snapshots older than this are discarded on load
        clustering_enabled: Replicate mutations to peers
        cluster_sync_interval: Seconds between heartbeats and sync requests
        leader_stale_after: Seconds before a leader claim can be taken over
        node_offline_after: Seconds of silence before a peer is offline
        node_prune_after: Seconds of silence before a peer is dropped
        eviction_policy: Eviction policy name (lru, lfu, ttl, random)
        wire_format: Serializer for snapshots and cluster messages
    """

    name: str = "cache"
    max_size: int = 100 * 1024 * 1024
    max_entries: int = 10000
    default_ttl: float = 5 * 60.0
    cleanup_interval: float = 60.0
    compression_threshold: int = 1024
    enable_compression: bool = True
    compression: CompressionType = CompressionType.ZLIB
    persistence_enabled: bool = True
    persistence_interval: float = 30.0
    persistence_max_age: float = 24 * 60 * 60.0
    clustering_enabled: bool = True
    cluster_sync_interval: float = 5.0
    leader_stale_after: float = 30.0
    node_offline_after: float = 15.0
    node_prune_after: float = 60.0
    eviction_policy: str = "lru"
    wire_format: str = "msgpack"

    def __post_init__(self):
        if self.max_size <= 0:
            raise ValueError("max_size must be positive")
        if self.max_entries <= 0:
            raise ValueError("max_entries must be positive")
        if self.default_ttl < 0:
            raise ValueError("default_ttl cannot be negative")
        if self.compression_threshold < 0:
            raise ValueError("compression_threshold cannot be negative")
        for name in (
            "cleanup_interval",
            "persistence_interval",
            "persistence_max_age",
            "cluster_sync_interval",
            "leader_stale_after",
            "node_offline_after",
            "node_prune_after",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.eviction_policy.lower() not in policy_names():
            raise ValueError(
                f"eviction_policy must be one of {policy_names()}, got {self.eviction_policy!r}"
            )
        if self.wire_format not in ("msgpack", "json"):
            raise ValueError(f"wire_format must be msgpack or json, got {self.wire_format!r}")


class _Stored(NamedTuple):
    """Outcome of a store under the lock, announced after release."""

    entry: CacheEntry
    evicted: List[str]
    packed: Optional[CompressedValue]
    wire: Optional[Dict[str, Any]]


class Cache(ReplicaTarget, Generic[V]):
    """In-memory cache with TTL, bounded capacity, compression and replication.

    Features:
    - TTL expiry, reaped on read and by a periodic sweep
    - Byte-size and entry-count bounds with LRU, LFU, TTL or random eviction
    - Transparent compression of large values
    - Best-effort replication to peer caches with soft leader election
    - Periodic snapshots restored on start
    - Lifecycle events and statistics
    - Thread-safe operations

    Example:
        cache = Cache(CacheConfig(max_entries=1000, default_ttl=300))
        cache.start()

        cache.set("user:1", {"name": "Ada"}, ttl=60)
        user = cache.get("user:1")

        cache.on("evict", lambda key, _: print("evicted", key))
        cache.destroy()
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        storage: Optional[KeyValueStore] = None,
        transport: Optional[BroadcastTransport] = None,
        eviction: Optional[EvictionPolicy] = None,
        node_id: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize cache.

        Args:
            config: Cache configuration
            storage: Durable store for snapshots and replication
            transport: Broadcast channel to peer caches
            eviction: Eviction policy, overriding ``config.eviction_policy``
            node_id: Cluster node id, generated when omitted
            clock: Time source
        """
        self.config = config or CacheConfig()
        self._clock = clock

        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._stats = CacheStats(last_cleanup=clock())
        self._events = EventBus()

        self._policy = eviction or create_policy(self.config.eviction_policy)
        self._governor = CapacityGovernor(
            self._policy,
            max_size=self.config.max_size,
            max_entries=self.config.max_entries,
        )
        self._codec = CompressionCodec(
            threshold=self.config.compression_threshold,
            compression=(
                self.config.compression
                if self.config.enable_compression
                else CompressionType.NONE
            ),
        )

        self._storage = storage if storage is not None else MemoryStore()
        serializer = get_serializer(self.config.wire_format)

        self._snapshotter: Optional[PersistenceSnapshotter] = None
        if self.config.persistence_enabled:
            self._snapshotter = PersistenceSnapshotter(
                self._storage,
                serializer=serializer,
                max_age=self.config.persistence_max_age,
                clock=clock,
            )

        self._coordinator: Optional[ReplicationCoordinator] = None
        if self.config.clustering_enabled:
            self._coordinator = ReplicationCoordinator(
                self,
                self._storage,
                transport=transport,
                serializer=serializer,
                node_id=node_id,
                leader_stale_after=self.config.leader_stale_after,
                node_offline_after=self.config.node_offline_after,
                node_prune_after=self.config.node_prune_after,
                events=self._events,
                clock=clock,
            )

        self._timers: List[PeriodicTimer] = []
        self._namespaces: Dict[str, Namespace] = {}
        self._started = False
        self._closed = False

    # Lifecycle

    def start(self) -> None:
        """Restore the snapshot, join the cluster and start background timers."""
        self._check_open()
        if self._started:
            return
        self._started = True

        if self._snapshotter is not None:
            self.load_snapshot()

        if self._coordinator is not None:
            self._coordinator.start()

        name = self.config.name
        self._timers.append(
            PeriodicTimer(f"Cache-{name}-cleanup", self.config.cleanup_interval, self.cleanup)
        )
        if self._coordinator is not None:
            self._timers.append(
                PeriodicTimer(
                    f"Cache-{name}-cluster", self.config.cluster_sync_interval, self._cluster_tick
                )
            )
        if self._snapshotter is not None:
            self._timers.append(
                PeriodicTimer(
                    f"Cache-{name}-persistence", self.config.persistence_interval, self.save_snapshot
                )
            )
        for timer in self._timers:
            timer.start()

        logger.info(f"Cache {name} started")

    def destroy(self) -> None:
        """Tear the cache down.

        Cancels the timers, flushes a final snapshot, empties the entry
        store and detaches every listener. Calling it again does nothing;
        any other operation afterwards raises CacheClosedError.
        """
        if self._closed:
            return

        for timer in self._timers:
            timer.cancel()
        self._timers.clear()

        if self._snapshotter is not None:
            self.save_snapshot()

        with self._lock:
            self._entries.clear()
            self._stats.total_entries = 0
            self._stats.total_size = 0
            self._closed = True

        if self._coordinator is not None:
            self._coordinator.stop()
            self._coordinator.transport.close()
        self._events.clear()
        self._started = False

        logger.info(f"Cache {self.config.name} destroyed")

    @property
    def is_closed(self) -> bool:
        """Whether ``destroy`` has run."""
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise CacheClosedError(self.config.name)

    # Core operations

    def set(
        self,
        key: str,
        value: V,
        ttl: Optional[float] = None,
        metadata: Optional[MetadataLike] = None,
    ) -> None:
        """Set value in cache.

        Uncompressed values are held by reference, so mutating the object
        after ``set`` changes the cached value. Compressed values are
        encoded at ``set`` time and are not affected.

        Args:
            key: Cache key
            value: Value to cache
            ttl: TTL in seconds, ``config.default_ttl`` when omitted
            metadata: Entry metadata
        """
        self._check_open()
        ttl = self.config.default_ttl if ttl is None else ttl
        stored, packed = self._pack(value)

        with self._lock:
            self._check_open()
            result = self._store(key, stored, packed, ttl, _coerce_metadata(metadata))

        self._announce_set(result)

    def get(self, key: str, default: Any = None) -> Union[V, Any]:
        """Get value from cache.

        Uncompressed values are returned by reference; a compressed value
        is decoded into a fresh object on every call. A stored value that
        fails to decompress is returned in its stored (compressed) form.

        Args:
            key: Cache key
            default: Value returned on a miss

        Returns:
            Cached value or default
        """
        self._check_open()
        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)
            expired = entry is not None and entry.is_expired(now)

            if entry is None or expired:
                if expired:
                    self._remove(key)
                    self._stats.expiration_count += 1
                self._stats.miss_count += 1
                stored = _MISSING
            else:
                entry.touch(now)
                self._stats.hit_count += 1
                stored = entry.value
                compressed = entry.compressed

        if expired:
            self._events.emit(CacheEvent.EXPIRE, key, entry)

        if stored is _MISSING:
            self._events.emit(CacheEvent.GET, key, None)
            return default

        value = self._unpack(key, stored) if compressed else stored
        self._events.emit(CacheEvent.GET, key, value)
        return value

    def has(self, key: str) -> bool:
        """Check if key exists and has not expired.

        Args:
            key: Cache key

        Returns:
            True if a live entry exists
        """
        self._check_open()
        with self._lock:
            entry = self._live_entry(key, self._clock())
        return entry is not None

    def delete(self, key: str) -> bool:
        """Delete key from cache.

        Args:
            key: Cache key

        Returns:
            True if deleted
        """
        self._check_open()
        with self._lock:
            entry = self._remove(key)

        if entry is None:
            return False

        self._events.emit(CacheEvent.DELETE, key, entry)
        if self._coordinator is not None:
            self._coordinator.broadcast(ClusterAction.DELETE, key=key)
        return True

    def clear(self) -> None:
        """Remove all entries.

        Resets the size, entry and eviction statistics; hit and miss
        counters are kept.
        """
        self._check_open()
        with self._lock:
            self._entries.clear()
            self._stats.total_entries = 0
            self._stats.total_size = 0
            self._stats.eviction_count = 0

        self._events.emit(CacheEvent.CLEAR)
        if self._coordinator is not None:
            self._coordinator.broadcast(ClusterAction.CLEAR)

    def expire(self, key: str, ttl: float) -> bool:
        """Restart the TTL window of a key with a new TTL.

        Args:
            key: Cache key
            ttl: New TTL in seconds

        Returns:
            True if the key exists
        """
        self._check_open()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            entry.refresh_ttl(ttl, self._clock())
            return True

    def refresh(self, key: str, ttl: Optional[float] = None) -> bool:
        """Restart the TTL window, with ``config.default_ttl`` if no TTL given.

        Args:
            key: Cache key
            ttl: New TTL in seconds

        Returns:
            True if the key exists
        """
        return self.expire(key, self.config.default_ttl if ttl is None else ttl)

    def ttl(self, key: str) -> float:
        """Get remaining TTL.

        Args:
            key: Cache key

        Returns:
            Seconds remaining (0 once elapsed), or -1 if the key is absent
        """
        self._check_open()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return -1
            return entry.remaining_ttl(self._clock())

    def increment(self, key: str, amount: Union[int, float] = 1) -> Union[int, float]:
        """Increment numeric value.

        A missing key counts as 0. An existing key keeps its TTL.

        Args:
            key: Cache key
            amount: Amount to add

        Returns:
            New value

        Raises:
            TypeError: If the stored value is not a number
        """
        self._check_open()
        with self._lock:
            entry = self._live_entry(key, self._clock())
            if entry is None:
                current, ttl, metadata = 0, self.config.default_ttl, EntryMetadata()
            else:
                current = self._unpack(key, entry.value) if entry.compressed else entry.value
                ttl, metadata = entry.ttl_seconds, entry.metadata

            if isinstance(current, bool) or not isinstance(current, (int, float)):
                raise TypeError(
                    f"Cannot increment {key!r}: value is {type(current).__name__}, not a number"
                )

            new_value = current + amount
            stored, packed = self._pack(new_value)
            result = self._store(key, stored, packed, ttl, metadata)

        self._announce_set(result)
        return new_value

    def decrement(self, key: str, amount: Union[int, float] = 1) -> Union[int, float]:
        """Decrement numeric value.

        Args:
            key: Cache key
            amount: Amount to subtract

        Returns:
            New value
        """
        return self.increment(key, -amount)

    def invalidate_pattern(self, pattern: Union[str, Pattern[str]]) -> int:
        """Delete every key matching a regular expression.

        Args:
            pattern: Regex (searched anywhere in the key)

        Returns:
            Number of keys removed
        """
        self._check_open()
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        with self._lock:
            matches = [key for key in self._entries if regex.search(key)]
        return sum(1 for key in matches if self.delete(key))

    def invalidate_namespace(self, namespace: str) -> int:
        """Delete every key under ``<namespace>:``.

        Args:
            namespace: Namespace name

        Returns:
            Number of keys removed
        """
        return self.invalidate_pattern(re.compile(f"^{re.escape(namespace)}:"))

    def set_many(
        self,
        items: Union[Mapping[str, V], Iterable[tuple]],
        ttl: Optional[float] = None,
    ) -> int:
        """Set multiple values.

        Args:
            items: Mapping of key -> value, or (key, value) pairs
            ttl: TTL for all items

        Returns:
            Number of items set
        """
        pairs = items.items() if isinstance(items, Mapping) else items
        count = 0
        for key, value in pairs:
            self.set(key, value, ttl=ttl)
            count += 1
        return count

    def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[V]]:
        """Get multiple values.

        Each key is looked up on its own; misses map to None.

        Args:
            keys: Keys to look up

        Returns:
            Dict of key -> value or None
        """
        return {key: self.get(key) for key in keys}

    def keys(self, pattern: Optional[str] = None) -> List[str]:
        """Get live keys.

        Args:
            pattern: Optional glob pattern

        Returns:
            List of keys
        """
        self._check_open()
        now = self._clock()
        with self._lock:
            keys = [k for k, e in self._entries.items() if not e.is_expired(now)]
        if pattern is None:
            return keys
        return [k for k in keys if fnmatch.fnmatchcase(k, pattern)]

    def size(self) -> int:
        """Get entry count, expired-but-unreaped entries included."""
        self._check_open()
        return len(self._entries)

    @property
    def size_bytes(self) -> int:
        """Get tracked total size in bytes."""
        return self._stats.total_size

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Get a copy of a live entry, value in stored form.

        Args:
            key: Cache key

        Returns:
            CacheEntry copy or None
        """
        self._check_open()
        with self._lock:
            entry = self._live_entry(key, self._clock())
            return entry.copy() if entry is not None else None

    def namespace(self, name: str) -> Namespace:
        """Get or create a namespace view.

        Args:
            name: Namespace name

        Returns:
            Namespace instance
        """
        self._check_open()
        if name not in self._namespaces:
            self._namespaces[name] = Namespace(self, name)
        return self._namespaces[name]

    # Maintenance

    def cleanup(self) -> int:
        """Remove expired entries.

        Returns:
            Number removed
        """
        self._check_open()
        now = self._clock()
        with self._lock:
            expired = [(k, e) for k, e in self._entries.items() if e.is_expired(now)]
            for key, _ in expired:
                self._remove(key)
            self._stats.expiration_count += len(expired)
            self._stats.last_cleanup = now

        for key, entry in expired:
            self._events.emit(CacheEvent.EXPIRE, key, entry)
        if expired:
            self._events.emit(CacheEvent.CLEANUP, None, len(expired))
            logger.debug(f"Cache {self.config.name} cleanup removed {len(expired)} entries")
        return len(expired)

    def save_snapshot(self) -> Optional[Snapshot]:
        """Persist the entry store and statistics now.

        Returns:
            The saved snapshot, or None if persistence is off or failed
        """
        if self._snapshotter is None or self._closed:
            return None

        with self._lock:
            entries = [dataclasses.replace(e) for e in self._entries.values()]
            stats = dataclasses.replace(self._stats)

        snapshot = self._snapshotter.save(entries, stats)
        if snapshot is not None:
            self._events.emit(CacheEvent.PERSISTENCE_SAVE, None, snapshot)
        return snapshot

    def load_snapshot(self) -> bool:
        """Restore entries and counters from the stored snapshot.

        Entries are loaded as saved, expired ones included; they are
        reaped on access or by the next sweep.

        Returns:
            True if a snapshot was restored
        """
        self._check_open()
        if self._snapshotter is None:
            return False

        snapshot = self._snapshotter.load()
        if snapshot is None:
            return False

        with self._lock:
            for entry in snapshot.entries:
                self._entries[entry.key] = entry
            saved = snapshot.stats
            self._stats.hit_count = saved.hit_count
            self._stats.miss_count = saved.miss_count
            self._stats.eviction_count = saved.eviction_count
            self._stats.expiration_count = saved.expiration_count
            self._stats.compression_ratio = saved.compression_ratio
            self._stats.last_cleanup = saved.last_cleanup
            self._recount()

        self._events.emit(CacheEvent.PERSISTENCE_LOAD, None, snapshot)
        return True

    def _cluster_tick(self) -> None:
        self._coordinator.tick()
        with self._lock:
            self._stats.cluster_nodes = len(self._coordinator.registry)

    # Observation

    def on(self, event: Union[CacheEvent, str], listener: Listener) -> Callable[[], None]:
        """Subscribe to a cache event.

        Args:
            event: Event or event name
            listener: Function(key, payload)

        Returns:
            Function that removes the subscription
        """
        self._check_open()
        return self._events.on(event, listener)

    def get_stats(self) -> CacheStats:
        """Get a copy of the cache statistics.

        Returns:
            CacheStats instance
        """
        with self._lock:
            stats = dataclasses.replace(self._stats)
        if self._coordinator is not None:
            stats.cluster_nodes = len(self._coordinator.registry)
        return stats

    def cluster_info(self) -> List[ClusterNode]:
        """Get known cluster nodes, this one included.

        Returns:
            List of node records
        """
        if self._coordinator is None:
            return []
        return self._coordinator.nodes()

    @property
    def node_id(self) -> Optional[str]:
        """Get this cache's cluster node id."""
        return self._coordinator.node_id if self._coordinator is not None else None

    @property
    def is_leader(self) -> bool:
        """Whether this cache holds the cluster leader claim."""
        return self._coordinator is not None and self._coordinator.is_leader

    @property
    def coordinator(self) -> Optional[ReplicationCoordinator]:
        """Get the replication coordinator, if clustering is enabled."""
        return self._coordinator

    # Replication hooks

    def apply_remote_set(self, entry: CacheEntry) -> None:
        with self._lock:
            if self._closed:
                return
            self._remove(entry.key)
            self._entries[entry.key] = entry
            self._stats.total_size += entry.size_bytes
            self._stats.total_entries = len(self._entries)

    def apply_remote_delete(self, key: str) -> None:
        with self._lock:
            if not self._closed:
                self._remove(key)

    def apply_remote_clear(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._entries.clear()
            self._stats.total_entries = 0
            self._stats.total_size = 0

    def export_entries(self) -> List[CacheEntry]:
        with self._lock:
            return [dataclasses.replace(e) for e in self._entries.values()]

    def replica_stats(self) -> Dict[str, int]:
        return {
            "entry_count": self._stats.total_entries,
            "data_size": self._stats.total_size,
        }

    # Internals

    def _pack(self, value: Any):
        """Compress a value when it qualifies.

        Returns:
            (stored value, CompressedValue or None)
        """
        size = measure_size(value)
        if not self._codec.should_compress(size):
            return value, None
        packed = self._codec.compress(value)
        if packed is None:
            return value, None
        return packed.data, packed

    def _unpack(self, key: str, data: Any) -> Any:
        try:
            value = self._codec.decompress(data)
        except DecompressionError as e:
            logger.warning(f"Decompression failed for {key}, returning stored value: {e}")
            return data
        self._events.emit(CacheEvent.DECOMPRESSION, key, None)
        return value

    def _store(
        self,
        key: str,
        stored: Any,
        packed: Optional[CompressedValue],
        ttl: float,
        metadata: EntryMetadata,
    ) -> _Stored:
        """Insert an entry, evicting first. Caller holds the lock."""
        now = self._clock()
        size = packed.compressed_size if packed is not None else measure_size(stored)
        entry = CacheEntry(
            key=key,
            value=stored,
            ttl_seconds=ttl,
            created_at=now,
            last_accessed_at=now,
            size_bytes=size,
            compressed=packed is not None,
            metadata=metadata,
        )

        self._remove(key)
        evicted = self._governor.ensure_capacity(
            self._entries,
            lambda: self._stats.total_size,
            size,
            now,
            self._evict,
        )

        self._entries[key] = entry
        self._stats.total_size += size
        self._stats.total_entries = len(self._entries)
        if packed is not None:
            self._stats.record_compression(packed.original_size, packed.compressed_size)

        wire = entry.to_dict() if self._coordinator is not None else None
        return _Stored(entry, evicted, packed, wire)

    def _announce_set(self, result: _Stored) -> None:
        """Emit events and replicate a store, outside the lock."""
        key = result.entry.key
        for evicted_key in result.evicted:
            self._events.emit(CacheEvent.EVICT, evicted_key, None)
        if result.packed is not None:
            self._events.emit(
                CacheEvent.COMPRESSION,
                key,
                {
                    "original_size": result.packed.original_size,
                    "compressed_size": result.packed.compressed_size,
                },
            )
        self._events.emit(CacheEvent.SET, key, result.entry)
        if self._coordinator is not None:
            self._coordinator.broadcast(ClusterAction.SET, key=key, entry=result.wire)

    def _live_entry(self, key: str, now: float) -> Optional[CacheEntry]:
        """Get an entry, reaping it if expired. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(now):
            self._remove(key)
            self._stats.expiration_count += 1
            self._events.emit(CacheEvent.EXPIRE, key, entry)
            return None
        return entry

    def _remove(self, key: str) -> Optional[CacheEntry]:
        """Remove an entry and update statistics. Caller holds the lock."""
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._stats.total_size -= entry.size_bytes
            self._stats.total_entries = len(self._entries)
        return entry

    def _evict(self, key: str) -> None:
        self._remove(key)
        self._stats.eviction_count += 1
        logger.debug(f"Cache {self.config.name} evicted {key}")

    def _recount(self) -> None:
        self._stats.total_entries = len(self._entries)
        self._stats.total_size = sum(e.size_bytes for e in self._entries.values())

    def __contains__(self, key: str) -> bool:
        """Check if key in cache."""
        return self.has(key)

    def __len__(self) -> int:
        """Get entry count."""
        return self.size()

    def __iter__(self) -> Iterator[str]:
        """Iterate over keys."""
        return iter(self.keys())

    def __getitem__(self, key: str) -> V:
        """Get item by key."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: V) -> None:
        """Set item by key."""
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        """Delete item by key."""
        if not self.delete(key):
            raise KeyError(key)

    def __enter__(self) -> "Cache[V]":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.destroy()

    def __repr__(self) -> str:
        return (
            f"Cache(name={self.config.name!r}, entries={len(self._entries)}, "
            f"policy={self._policy.name})"
        )


def _coerce_metadata(metadata: Optional[MetadataLike]) -> EntryMetadata:
    if metadata is None:
        return EntryMetadata()
    if isinstance(metadata, EntryMetadata):
        return metadata
    return EntryMetadata(attributes=dict(metadata))


__all__ = ["Cache", "CacheConfig"]
