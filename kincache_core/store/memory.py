"""KinCache Memory Store - In-Memory Storage Medium.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from kincache_core.errors import StorageQuotaExceeded
from kincache_core.store.backend import KeyValueStore

logger = logging.getLogger(__name__)


class MemoryStore(KeyValueStore):
    """In-memory storage medium.

    One instance shared by several caches in the same process plays the
    role of browser local storage shared by sibling tabs: every write is
    delivered to all watchers.

    Features:
    - O(1) get/set/remove operations
    - Thread-safe with RLock
    - Optional byte quota, raising StorageQuotaExceeded when full

    Example:
        store = MemoryStore(quota_bytes=5 * 1024 * 1024)
        store.set("advanced_cache_data", b"...")
        data = store.get("advanced_cache_data")
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        """Initialize memory store.

        Args:
            quota_bytes: Maximum total bytes of keys and values
        """
        super().__init__()
        self.quota_bytes = quota_bytes
        self._data: Dict[str, bytes] = {}
        self._used = 0
        self._lock = threading.RLock()

    @property
    def supports_watch(self) -> bool:
        return True

    @property
    def used_bytes(self) -> int:
        """Get bytes in use."""
        return self._used

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            self._stats.reads += 1
            return self._data.get(key)

    def set(self, key: str, data: bytes) -> None:
        with self._lock:
            old = self._data.get(key)
            freed = len(key) + len(old) if old is not None else 0
            required = len(key) + len(data)

            if self.quota_bytes is not None and self._used - freed + required > self.quota_bytes:
                self._stats.record_error("quota exceeded")
                raise StorageQuotaExceeded(key, required, self.quota_bytes)

            self._data[key] = data
            self._used += required - freed
            self._stats.writes += 1

        self._notify(key, data)

    def remove(self, key: str) -> bool:
        with self._lock:
            old = self._data.pop(key, None)
            if old is None:
                return False
            self._used -= len(key) + len(old)
            self._stats.removes += 1

        self._notify(key, None)
        return True

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        with self._lock:
            if prefix is None:
                return list(self._data)
            return [k for k in self._data if k.startswith(prefix)]

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryStore(keys={len(self._data)}, used={self._used})"


__all__ = ["MemoryStore"]
