"""KinCache Node - Replication Peer Records.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import os
import socket
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class NodeStatus(str, Enum):
    """Peer states."""

    ONLINE = "online"
    OFFLINE = "offline"
    SYNCING = "syncing"


def generate_node_id() -> str:
    """Generate a unique node id."""
    return f"cache_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


@dataclass
class ClusterNode:
    """A replication peer as seen by this node.

    Attributes:
        node_id: Unique node identifier
        host: Node hostname
        port: Node port or process id
        status: Last known status
        last_seen: When the node was last heard from
        data_size: Reported data size in bytes
        entry_count: Reported entry count
    """

    node_id: str
    host: str = field(default_factory=socket.gethostname)
    port: int = field(default_factory=os.getpid)
    status: NodeStatus = NodeStatus.ONLINE
    last_seen: float = field(default_factory=time.time)
    data_size: int = 0
    entry_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "node_id": self.node_id,
            "host": self.host,
            "port": self.port,
            "status": self.status.value,
            "last_seen": self.last_seen,
            "data_size": self.data_size,
            "entry_count": self.entry_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterNode":
        """Create from dictionary."""
        return cls(
            node_id=data["node_id"],
            host=data.get("host", ""),
            port=int(data.get("port", 0)),
            status=NodeStatus(data.get("status", NodeStatus.ONLINE.value)),
            last_seen=float(data.get("last_seen", time.time())),
            data_size=int(data.get("data_size", 0)),
            entry_count=int(data.get("entry_count", 0)),
        )


class NodeRegistry:
    """Tracks the peers this node has heard from.

    Records are created on first contact and refreshed by every message.
    Peers that stay silent are marked offline, then forgotten.

    Example:
        registry = NodeRegistry(self_node)
        registry.touch("cache_123", now, entry_count=10)
        registry.age_out(now)
    """

    def __init__(
        self,
        local: ClusterNode,
        offline_after: float = 15.0,
        prune_after: float = 60.0,
    ):
        """Initialize registry.

        Args:
            local: This node's own record
            offline_after: Silence in seconds before a peer is offline
            prune_after: Silence in seconds before a peer is dropped
        """
        self.local = local
        self.offline_after = offline_after
        self.prune_after = prune_after
        self._nodes: Dict[str, ClusterNode] = {local.node_id: local}
        self._lock = threading.RLock()

    def touch(
        self,
        node_id: str,
        now: float,
        info: Optional[Dict[str, Any]] = None,
        status: NodeStatus = NodeStatus.ONLINE,
    ) -> ClusterNode:
        """Create or refresh a peer record.

        Args:
            node_id: Peer id
            now: Current time
            info: Reported node fields, if the message carried any
            status: New status

        Returns:
            The peer record
        """
        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                node = ClusterNode.from_dict({**(info or {}), "node_id": node_id})
                self._nodes[node_id] = node
                logger.info(f"Discovered cluster node {node_id}")
            elif info:
                node.host = info.get("host", node.host)
                node.port = int(info.get("port", node.port))
                node.data_size = int(info.get("data_size", node.data_size))
                node.entry_count = int(info.get("entry_count", node.entry_count))

            node.status = status
            node.last_seen = now
            return node

    def set_status(self, node_id: str, status: NodeStatus) -> None:
        """Update a known peer's status."""
        with self._lock:
            node = self._nodes.get(node_id)
            if node is not None:
                node.status = status

    def age_out(self, now: float) -> List[str]:
        """Mark silent peers offline and drop long-silent ones.

        Args:
            now: Current time

        Returns:
            Ids of dropped peers
        """
        dropped = []
        with self._lock:
            for node_id, node in list(self._nodes.items()):
                if node_id == self.local.node_id:
                    continue
                silence = now - node.last_seen
                if silence > self.prune_after:
                    del self._nodes[node_id]
                    dropped.append(node_id)
                    logger.info(f"Dropped cluster node {node_id} after {silence:.0f}s of silence")
                elif silence > self.offline_after and node.status != NodeStatus.OFFLINE:
                    node.status = NodeStatus.OFFLINE
                    logger.warning(f"Cluster node {node_id} is offline")
        return dropped

    def get(self, node_id: str) -> Optional[ClusterNode]:
        """Get a peer record."""
        return self._nodes.get(node_id)

    def nodes(self) -> List[ClusterNode]:
        """Get copies of all records, self included."""
        with self._lock:
            return [ClusterNode(**vars(n)) for n in self._nodes.values()]

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes


__all__ = ["ClusterNode", "NodeRegistry", "NodeStatus", "generate_node_id"]
