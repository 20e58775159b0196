"""KinCache File Store - File-Based Storage Medium.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
from pathlib import Path
from typing import List, Optional

import msgpack

from kincache_core.errors import StorageError, StorageQuotaExceeded
from kincache_core.store.backend import KeyValueStore

logger = logging.getLogger(__name__)


class FileStore(KeyValueStore):
    """File-based storage medium.

    Persists snapshots and the leader slot to disk so they survive process
    restarts and can be shared by processes on one host. Uses a sharded
    directory structure with hashed filenames; each file holds the original
    key next to the data.

    Features:
    - Persistent storage
    - Sharded directories
    - Atomic writes (temp file + rename)
    - Optional byte quota

    Example:
        store = FileStore("/var/cache/kincache")
        store.set("advanced_cache_data", snapshot_bytes)
        data = store.get("advanced_cache_data")
    """

    SHARD_COUNT = 16

    def __init__(self, base_path: str, quota_bytes: Optional[int] = None):
        """Initialize file store.

        Args:
            base_path: Base directory for store files
            quota_bytes: Maximum total bytes on disk
        """
        super().__init__()
        self.base_path = Path(base_path)
        self.quota_bytes = quota_bytes
        self._lock = threading.RLock()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_path(self, key: str) -> Path:
        """Get file path for key.

        Args:
            key: Storage key

        Returns:
            File path
        """
        digest = hashlib.sha256(key.encode()).hexdigest()
        shard = f"{int(digest[:2], 16) % self.SHARD_COUNT:02x}"
        return self.base_path / shard / digest

    def _iter_files(self):
        for shard_dir in self.base_path.iterdir():
            if shard_dir.is_dir():
                for file_path in shard_dir.iterdir():
                    if file_path.is_file() and file_path.suffix != ".tmp":
                        yield file_path

    def _read(self, path: Path) -> dict:
        with open(path, "rb") as f:
            return msgpack.unpackb(f.read(), raw=False)

    def get(self, key: str) -> Optional[bytes]:
        path = self._get_path(key)

        try:
            with self._lock:
                self._stats.reads += 1
                if not path.exists():
                    return None
                return self._read(path)["data"]

        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Error reading {key}: {e}")
            self._stats.record_error(str(e))
            raise StorageError(f"Cannot read {key!r}: {e}") from e

    def set(self, key: str, data: bytes) -> None:
        path = self._get_path(key)
        temp_path = path.with_suffix(".tmp")
        payload = msgpack.packb({"key": key, "data": data}, use_bin_type=True)

        with self._lock:
            if self.quota_bytes is not None:
                current = path.stat().st_size if path.exists() else 0
                if self.disk_usage() - current + len(payload) > self.quota_bytes:
                    self._stats.record_error("quota exceeded")
                    raise StorageQuotaExceeded(key, len(payload), self.quota_bytes)

            try:
                path.parent.mkdir(exist_ok=True)
                with open(temp_path, "wb") as f:
                    f.write(payload)
                os.replace(temp_path, path)
                self._stats.writes += 1

            except OSError as e:
                logger.error(f"Error writing {key}: {e}")
                self._stats.record_error(str(e))
                if temp_path.exists():
                    temp_path.unlink()
                raise StorageError(f"Cannot write {key!r}: {e}") from e

    def remove(self, key: str) -> bool:
        path = self._get_path(key)

        try:
            with self._lock:
                if path.exists():
                    path.unlink()
                    self._stats.removes += 1
                    return True
                return False

        except OSError as e:
            logger.error(f"Error removing {key}: {e}")
            self._stats.record_error(str(e))
            raise StorageError(f"Cannot remove {key!r}: {e}") from e

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        """Get stored keys.

        Note: reads every file to recover the original key.

        Args:
            prefix: Optional key prefix filter

        Returns:
            List of keys
        """
        keys = []
        with self._lock:
            for file_path in self._iter_files():
                try:
                    key = self._read(file_path).get("key", "")
                except (OSError, ValueError) as e:
                    logger.warning(f"Skipping unreadable store file {file_path}: {e}")
                    continue
                if prefix is None or key.startswith(prefix):
                    keys.append(key)
        return keys

    def disk_usage(self) -> int:
        """Get total disk usage.

        Returns:
            Size in bytes
        """
        return sum(p.stat().st_size for p in self._iter_files())

    def __repr__(self) -> str:
        return f"FileStore(path={self.base_path})"


__all__ = ["FileStore"]
