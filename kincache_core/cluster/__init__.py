"""Cluster module - Replication between cache instances."""

from kincache_core.cluster.node import ClusterNode, NodeRegistry, NodeStatus
from kincache_core.cluster.transport import (
    BroadcastTransport,
    NullTransport,
    LocalHub,
    LocalTransport,
    RedisTransport,
)
from kincache_core.cluster.coordinator import (
    ReplicationCoordinator,
    ReplicaTarget,
    ClusterMessage,
    ClusterAction,
)

__all__ = [
    "ClusterNode",
    "NodeRegistry",
    "NodeStatus",
    "BroadcastTransport",
    "NullTransport",
    "LocalHub",
    "LocalTransport",
    "RedisTransport",
    "ReplicationCoordinator",
    "ReplicaTarget",
    "ClusterMessage",
    "ClusterAction",
]
