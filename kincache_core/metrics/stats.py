"""KinCache Stats - Cache Statistics.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict

# Weight of the newest sample in the trailing compression ratio
COMPRESSION_RATIO_WEIGHT = 0.1


@dataclass
class CacheStats:
    """Cache statistics.

    Gauges (``total_entries``, ``total_size``) track the live entry store.
    Counters only grow, except ``eviction_count`` which ``clear`` resets.

    Attributes:
        total_entries: Current entry count
        total_size: Current size in bytes
        hit_count: Cache hits
        miss_count: Cache misses
        eviction_count: Capacity evictions
        expiration_count: Entries reaped after TTL elapsed
        compression_ratio: Trailing compressed/original size ratio
        cluster_nodes: Known cluster nodes, self included
        last_cleanup: When the last expiry sweep ran
    """

    total_entries: int = 0
    total_size: int = 0
    hit_count: int = 0
    miss_count: int = 0
    eviction_count: int = 0
    expiration_count: int = 0
    compression_ratio: float = 1.0
    cluster_nodes: int = 1
    last_cleanup: float = field(default_factory=time.time)

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hit_count + self.miss_count
        return self.hit_count / total if total > 0 else 0.0

    def record_compression(self, original_size: int, compressed_size: int) -> None:
        """Fold one compression sample into the trailing ratio.

        Args:
            original_size: Serialized size before compression
            compressed_size: Size after compression
        """
        if original_size <= 0:
            return
        sample = compressed_size / original_size
        self.compression_ratio = (
            (1 - COMPRESSION_RATIO_WEIGHT) * self.compression_ratio
            + COMPRESSION_RATIO_WEIGHT * sample
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_entries": self.total_entries,
            "total_size": self.total_size,
            "hit_count": self.hit_count,
            "miss_count": self.miss_count,
            "eviction_count": self.eviction_count,
            "expiration_count": self.expiration_count,
            "compression_ratio": self.compression_ratio,
            "cluster_nodes": self.cluster_nodes,
            "last_cleanup": self.last_cleanup,
            "hit_rate": self.hit_rate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheStats":
        """Create from dictionary, ignoring unknown fields."""
        return cls(
            total_entries=int(data.get("total_entries", 0)),
            total_size=int(data.get("total_size", 0)),
            hit_count=int(data.get("hit_count", 0)),
            miss_count=int(data.get("miss_count", 0)),
            eviction_count=int(data.get("eviction_count", 0)),
            expiration_count=int(data.get("expiration_count", 0)),
            compression_ratio=float(data.get("compression_ratio", 1.0)),
            cluster_nodes=int(data.get("cluster_nodes", 1)),
            last_cleanup=float(data.get("last_cleanup", time.time())),
        )

    def to_prometheus(self, cache_name: str = "cache") -> str:
        """Export statistics in Prometheus text format.

        Args:
            cache_name: Value of the ``cache`` label

        Returns:
            Prometheus-formatted metrics
        """
        label = f'{{cache="{cache_name}"}}'
        lines = [
            "# HELP cache_hits_total Total cache hits",
            "# TYPE cache_hits_total counter",
            f"cache_hits_total{label} {self.hit_count}",
            "# HELP cache_misses_total Total cache misses",
            "# TYPE cache_misses_total counter",
            f"cache_misses_total{label} {self.miss_count}",
            "# HELP cache_evictions_total Total capacity evictions",
            "# TYPE cache_evictions_total counter",
            f"cache_evictions_total{label} {self.eviction_count}",
            "# HELP cache_hit_rate Cache hit rate",
            "# TYPE cache_hit_rate gauge",
            f"cache_hit_rate{label} {self.hit_rate:.4f}",
            "# HELP cache_entries Current entry count",
            "# TYPE cache_entries gauge",
            f"cache_entries{label} {self.total_entries}",
            "# HELP cache_size_bytes Current size in bytes",
            "# TYPE cache_size_bytes gauge",
            f"cache_size_bytes{label} {self.total_size}",
            "# HELP cache_compression_ratio Trailing compression ratio",
            "# TYPE cache_compression_ratio gauge",
            f"cache_compression_ratio{label} {self.compression_ratio:.4f}",
        ]
        return "\n".join(lines)


__all__ = ["CacheStats"]
