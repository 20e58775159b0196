"""KinCache Snapshot - Persistence of the Entry Store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from kincache_core.cache.entry import CacheEntry
from kincache_core.metrics.stats import CacheStats
from kincache_core.protocol.serializer import MsgPackSerializer, Serializer
from kincache_core.store.backend import KeyValueStore

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "advanced_cache_data"


@dataclass
class Snapshot:
    """A saved cache state.

    Attributes:
        entries: Entries in store order
        stats: Statistics at save time
        timestamp: When the snapshot was taken
    """

    entries: List[CacheEntry]
    stats: CacheStats
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to wire form."""
        return {
            "entries": [[entry.key, entry.to_dict()] for entry in self.entries],
            "stats": self.stats.to_dict(),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        """Create from wire form."""
        return cls(
            entries=[CacheEntry.from_dict(entry) for _, entry in data["entries"]],
            stats=CacheStats.from_dict(data.get("stats") or {}),
            timestamp=float(data["timestamp"]),
        )


class PersistenceSnapshotter:
    """Saves and restores the cache state through a durable store.

    Failures never propagate: a failed save is logged, a failed or stale
    load behaves like no snapshot at all.

    Example:
        snapshotter = PersistenceSnapshotter(FileStore("/var/cache/kin"))
        snapshotter.save(entries, stats)
        snapshot = snapshotter.load()
    """

    def __init__(
        self,
        storage: KeyValueStore,
        serializer: Optional[Serializer] = None,
        key: str = SNAPSHOT_KEY,
        max_age: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize snapshotter.

        Args:
            storage: Durable store
            serializer: Wire serializer
            key: Storage key of the snapshot
            max_age: Seconds after which a snapshot is discarded
            clock: Time source
        """
        self.storage = storage
        self.serializer = serializer or MsgPackSerializer()
        self.key = key
        self.max_age = max_age
        self.clock = clock
        self.last_saved_at: Optional[float] = None

    def save(self, entries: List[CacheEntry], stats: CacheStats) -> Optional[Snapshot]:
        """Write a snapshot.

        Args:
            entries: Entries to save
            stats: Statistics to save

        Returns:
            The saved snapshot, or None if saving failed
        """
        snapshot = Snapshot(entries=entries, stats=stats, timestamp=self.clock())
        try:
            self.storage.set(self.key, self.serializer.serialize(snapshot.to_dict()))
        except Exception as e:
            logger.warning(f"Failed to save cache snapshot: {e}")
            return None

        self.last_saved_at = snapshot.timestamp
        logger.debug(f"Saved cache snapshot with {len(entries)} entries")
        return snapshot

    def load(self) -> Optional[Snapshot]:
        """Read the snapshot if one exists and is fresh enough.

        Stale or unreadable snapshots are removed from the store.

        Returns:
            Snapshot or None
        """
        try:
            data = self.storage.get(self.key)
        except Exception as e:
            logger.warning(f"Failed to read cache snapshot: {e}")
            return None

        if data is None:
            return None

        try:
            snapshot = Snapshot.from_dict(self.serializer.deserialize(data))
        except Exception as e:
            logger.warning(f"Discarding unreadable cache snapshot: {e}")
            self.discard()
            return None

        age = self.clock() - snapshot.timestamp
        if age > self.max_age:
            logger.info(f"Discarding cache snapshot that is {age:.0f}s old")
            self.discard()
            return None

        logger.info(f"Loaded cache snapshot with {len(snapshot.entries)} entries")
        return snapshot

    def discard(self) -> None:
        """Remove the stored snapshot."""
        try:
            self.storage.remove(self.key)
        except Exception as e:
            logger.warning(f"Failed to remove cache snapshot: {e}")


__all__ = ["PersistenceSnapshotter", "Snapshot", "SNAPSHOT_KEY"]
