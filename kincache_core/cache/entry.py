"""KinCache Entry - Cache Entry with TTL and Access Bookkeeping.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class EntryMetadata:
    """Caller-supplied metadata for a cache entry.

    Opaque to the cache engine; carried through snapshots and replication.

    Attributes:
        tags: Entry tags for grouping
        source: Where value came from
        attributes: Free-form extra attributes
    """

    tags: Dict[str, str] = field(default_factory=dict)
    source: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "tags": dict(self.tags),
            "source": self.source,
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EntryMetadata":
        """Create from dictionary."""
        data = data or {}
        return cls(
            tags=dict(data.get("tags") or {}),
            source=data.get("source"),
            attributes=dict(data.get("attributes") or {}),
        )


@dataclass
class CacheEntry:
    """A cache entry with value, TTL, and access bookkeeping.

    Attributes:
        key: Cache key
        value: Stored value (compressed bytes when ``compressed`` is set)
        ttl_seconds: Time to live, measured from ``created_at``
        created_at: Creation time, reset by ``refresh_ttl``
        last_accessed_at: Last successful read
        access_count: Number of successful reads
        size_bytes: Serialized size of the stored value
        compressed: Whether ``value`` must be decompressed on read
        metadata: Entry metadata
    """

    key: str
    value: Any
    ttl_seconds: float
    created_at: float = field(default_factory=time.time)
    last_accessed_at: float = 0.0
    access_count: int = 0
    size_bytes: int = 0
    compressed: bool = False
    metadata: EntryMetadata = field(default_factory=EntryMetadata)

    def __post_init__(self):
        if not self.last_accessed_at:
            self.last_accessed_at = self.created_at

    def is_expired(self, now: float) -> bool:
        """Check if entry has expired at ``now``."""
        return now - self.created_at > self.ttl_seconds

    def expires_at(self) -> float:
        """Get expiration timestamp."""
        return self.created_at + self.ttl_seconds

    def remaining_ttl(self, now: float) -> float:
        """Get remaining TTL in seconds, never negative."""
        return max(0.0, self.ttl_seconds - (now - self.created_at))

    def touch(self, now: float) -> None:
        """Record a successful read."""
        self.access_count += 1
        self.last_accessed_at = now

    def refresh_ttl(self, ttl: float, now: float) -> None:
        """Restart the TTL window.

        Args:
            ttl: New TTL in seconds
            now: Current time
        """
        self.ttl_seconds = ttl
        self.created_at = now

    def copy(self) -> "CacheEntry":
        """Get a detached copy of this entry."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire form used by snapshots and replication.

        Returns:
            Dictionary representation
        """
        return {
            "key": self.key,
            "value": self.value,
            "ttl_seconds": self.ttl_seconds,
            "created_at": self.created_at,
            "last_accessed_at": self.last_accessed_at,
            "access_count": self.access_count,
            "size_bytes": self.size_bytes,
            "compressed": self.compressed,
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheEntry":
        """Create from dictionary.

        Args:
            data: Dictionary data

        Returns:
            CacheEntry instance
        """
        return cls(
            key=data["key"],
            value=data["value"],
            ttl_seconds=float(data["ttl_seconds"]),
            created_at=float(data.get("created_at", time.time())),
            last_accessed_at=float(data.get("last_accessed_at", 0.0)),
            access_count=int(data.get("access_count", 0)),
            size_bytes=int(data.get("size_bytes", 0)),
            compressed=bool(data.get("compressed", False)),
            metadata=EntryMetadata.from_dict(data.get("metadata")),
        )

    def __repr__(self) -> str:
        return (
            f"CacheEntry(key={self.key!r}, ttl={self.ttl_seconds}s, "
            f"size={self.size_bytes}, compressed={self.compressed})"
        )


__all__ = ["CacheEntry", "EntryMetadata"]
