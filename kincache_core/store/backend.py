"""KinCache Storage Backend - Durable Key-Value Medium Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional

logger = logging.getLogger(__name__)

# Called with (key, data); data is None when the key was removed
StoreListener = Callable[[str, Optional[bytes]], None]


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of read operations
        writes: Number of write operations
        removes: Number of remove operations
        errors: Number of errors
    """

    reads: int = 0
    writes: int = 0
    removes: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class KeyValueStore(ABC):
    """Abstract string-keyed durable storage medium.

    Used for persistence snapshots, replication broadcasts and the
    leader-election slot. Callers must treat it as unreliable: any method
    may raise ``StorageError`` (``StorageQuotaExceeded`` when full).

    Implementations:
    - MemoryStore: In-process dictionary, shareable between caches
    - FileStore: File-based persistence
    - RedisStore: Redis backend

    Stores that can observe writes deliver them to ``watch`` listeners,
    the way a browser storage event reaches sibling tabs.
    """

    def __init__(self):
        self._stats = StorageStats()
        self._listeners: List[StoreListener] = []
        self._listeners_lock = threading.RLock()

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Get data by key.

        Args:
            key: Storage key

        Returns:
            Stored bytes or None
        """
        pass

    @abstractmethod
    def set(self, key: str, data: bytes) -> None:
        """Store data.

        Args:
            key: Storage key
            data: Bytes to store

        Raises:
            StorageError: If the write failed
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Remove a key.

        Args:
            key: Storage key

        Returns:
            True if removed
        """
        pass

    @abstractmethod
    def keys(self, prefix: Optional[str] = None) -> List[str]:
        """Get stored keys.

        Args:
            prefix: Optional key prefix filter

        Returns:
            List of keys
        """
        pass

    @property
    def supports_watch(self) -> bool:
        """Whether writes are delivered to ``watch`` listeners."""
        return False

    def watch(self, listener: StoreListener) -> Callable[[], None]:
        """Observe writes to this store.

        Args:
            listener: Function(key, data)

        Returns:
            Function that stops watching
        """
        with self._listeners_lock:
            self._listeners.append(listener)

        def unwatch() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unwatch

    def _notify(self, key: str, data: Optional[bytes]) -> None:
        """Deliver a write to the watchers."""
        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(key, data)
            except Exception as e:
                logger.error(f"Store listener error for {key}: {e}")

    def get_stats(self) -> StorageStats:
        """Get storage statistics.

        Returns:
            StorageStats instance
        """
        return self._stats

    def close(self) -> None:
        """Release resources held by the store."""
        with self._listeners_lock:
            self._listeners.clear()

    def __contains__(self, key: str) -> bool:
        """Check if key exists."""
        return self.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        """Iterate over keys."""
        return iter(self.keys())


__all__ = ["KeyValueStore", "StorageStats", "StoreListener"]
