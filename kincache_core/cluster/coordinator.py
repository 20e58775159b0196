"""KinCache Replication Coordinator - Best-Effort Cross-Instance Replication.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from kincache_core.cache.entry import CacheEntry
from kincache_core.cluster.node import ClusterNode, NodeRegistry, NodeStatus, generate_node_id
from kincache_core.cluster.transport import BroadcastTransport, NullTransport
from kincache_core.metrics.events import CacheEvent, EventBus
from kincache_core.protocol.serializer import MsgPackSerializer, Serializer
from kincache_core.store.backend import KeyValueStore

logger = logging.getLogger(__name__)

MESSAGE_TYPE = "cache_cluster"
MESSAGE_PREFIX = "cache_cluster_"
LEADER_KEY = "cache_cluster_leader"


class ClusterAction(str, Enum):
    """Replication message actions."""

    SET = "set"
    DELETE = "delete"
    CLEAR = "clear"
    SYNC_REQUEST = "sync_request"
    SYNC_DATA = "sync_data"
    HEARTBEAT = "heartbeat"


@dataclass
class ClusterMessage:
    """A replication message.

    Attributes:
        source: Sending node id
        action: What happened
        key: Affected key, for set/delete
        entry: Entry wire form, for set
        entries: Full entry set, for sync_data
        node: Sender's node record
        timestamp: When the message was sent
        id: Unique message id
    """

    source: str
    action: ClusterAction
    key: Optional[str] = None
    entry: Optional[Dict[str, Any]] = None
    entries: Optional[List[Dict[str, Any]]] = None
    node: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to wire form."""
        return {
            "type": MESSAGE_TYPE,
            "id": self.id,
            "source": self.source,
            "action": self.action.value,
            "key": self.key,
            "entry": self.entry,
            "entries": self.entries,
            "node": self.node,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterMessage":
        """Create from wire form.

        Raises:
            ValueError: If the data is not a cluster message
        """
        if not isinstance(data, dict) or data.get("type") != MESSAGE_TYPE:
            raise ValueError("Not a cache cluster message")
        return cls(
            source=data["source"],
            action=ClusterAction(data["action"]),
            key=data.get("key"),
            entry=data.get("entry"),
            entries=data.get("entries"),
            node=data.get("node"),
            timestamp=float(data.get("timestamp", 0.0)),
            id=data.get("id") or uuid.uuid4().hex,
        )


class ReplicaTarget(ABC):
    """The local cache as seen by the coordinator.

    Remote mutations are written straight into the entry store, without
    capacity enforcement.
    """

    @abstractmethod
    def apply_remote_set(self, entry: CacheEntry) -> None:
        """Store a replicated entry."""

    @abstractmethod
    def apply_remote_delete(self, key: str) -> None:
        """Remove a replicated key."""

    @abstractmethod
    def apply_remote_clear(self) -> None:
        """Empty the entry store."""

    @abstractmethod
    def export_entries(self) -> List[CacheEntry]:
        """Get copies of every live entry."""

    @abstractmethod
    def replica_stats(self) -> Dict[str, int]:
        """Get ``entry_count`` and ``data_size`` for heartbeats."""


class ReplicationCoordinator:
    """Broadcasts local mutations to peers and applies theirs.

    Messages travel on two paths: written to the shared durable store
    under ``cache_cluster_<millis>`` (observed by peers through the store's
    watch hook, then removed) and published on the broadcast transport.
    Message ids are remembered so a message arriving on both paths is
    applied once.

    Leadership is a soft claim on the ``cache_cluster_leader`` slot: a node
    takes it when the slot is empty, stale, or already its own, and the
    leader refreshes it on every tick. The leader asks peers for their full
    state with ``sync_request``; replies are applied last-write-wins.

    All store and transport failures are logged and swallowed.

    Example:
        coordinator = ReplicationCoordinator(cache, store, LocalTransport(hub))
        coordinator.start()
        coordinator.broadcast(ClusterAction.SET, "k", entry.to_dict())
        coordinator.tick()  # from a periodic timer
    """

    def __init__(
        self,
        target: ReplicaTarget,
        storage: KeyValueStore,
        transport: Optional[BroadcastTransport] = None,
        serializer: Optional[Serializer] = None,
        node_id: Optional[str] = None,
        leader_stale_after: float = 30.0,
        node_offline_after: float = 15.0,
        node_prune_after: float = 60.0,
        events: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
        seen_window: int = 1024,
    ):
        """Initialize coordinator.

        Args:
            target: Local cache
            storage: Shared durable store
            transport: Broadcast channel
            serializer: Wire serializer
            node_id: This node's id, generated when omitted
            leader_stale_after: Seconds before a leader claim goes stale
            node_offline_after: Seconds of silence before a peer is offline
            node_prune_after: Seconds of silence before a peer is dropped
            events: Event bus for cluster_sync events
            clock: Time source
            seen_window: How many message ids to remember
        """
        self.target = target
        self.storage = storage
        self.transport = transport or NullTransport()
        self.serializer = serializer or MsgPackSerializer()
        self.node_id = node_id or generate_node_id()
        self.leader_stale_after = leader_stale_after
        self.events = events
        self.clock = clock
        self.seen_window = seen_window

        self.registry = NodeRegistry(
            ClusterNode(node_id=self.node_id, last_seen=clock()),
            offline_after=node_offline_after,
            prune_after=node_prune_after,
        )

        self._is_leader = False
        self._seen: "OrderedDict[str, None]" = OrderedDict()
        self._unsubscribers: List[Callable[[], None]] = []
        self._lock = threading.RLock()
        self._started = False

    @property
    def is_leader(self) -> bool:
        """Whether this node currently holds the leader claim."""
        return self._is_leader

    def start(self) -> None:
        """Start listening to peers and try to claim leadership."""
        if self._started:
            return
        self._started = True

        if self.storage.supports_watch:
            self._unsubscribers.append(self.storage.watch(self._on_store_write))
        try:
            self._unsubscribers.append(self.transport.subscribe(self.handle_data))
        except Exception as e:
            logger.warning(f"Cluster transport subscription failed: {e}")

        self.try_become_leader()
        logger.info(f"Cluster node {self.node_id} started (leader={self._is_leader})")

    def stop(self) -> None:
        """Detach from peers and release leadership."""
        if not self._started:
            return
        self._started = False

        for unsubscribe in self._unsubscribers:
            try:
                unsubscribe()
            except Exception as e:
                logger.warning(f"Error detaching cluster listener: {e}")
        self._unsubscribers.clear()

        if self._is_leader:
            self._release_leadership()
        logger.info(f"Cluster node {self.node_id} stopped")

    def broadcast(
        self,
        action: ClusterAction,
        key: Optional[str] = None,
        entry: Optional[Dict[str, Any]] = None,
        entries: Optional[List[Dict[str, Any]]] = None,
    ) -> Optional[ClusterMessage]:
        """Send a message to every peer.

        Args:
            action: Message action
            key: Affected key
            entry: Entry wire form
            entries: Full entry set

        Returns:
            The message, or None if it could not be encoded
        """
        stats = self.target.replica_stats()
        local = self.registry.local
        local.entry_count = stats.get("entry_count", 0)
        local.data_size = stats.get("data_size", 0)
        local.last_seen = self.clock()

        message = ClusterMessage(
            source=self.node_id,
            action=action,
            key=key,
            entry=entry,
            entries=entries,
            node=local.to_dict(),
            timestamp=self.clock(),
        )
        self._remember(message.id)

        try:
            data = self.serializer.serialize(message.to_dict())
        except Exception as e:
            logger.warning(f"Cannot encode cluster {action.value} message: {e}")
            return None

        if self.storage.supports_watch:
            slot = f"{MESSAGE_PREFIX}{int(message.timestamp * 1000)}"
            try:
                self.storage.set(slot, data)
                self.storage.remove(slot)
            except Exception as e:
                logger.warning(f"Failed to sync to cluster via storage: {e}")

        try:
            self.transport.publish(data)
        except Exception as e:
            logger.warning(f"Failed to sync to cluster via transport: {e}")

        return message

    def tick(self) -> None:
        """Periodic work: age peers, refresh leadership, heartbeat, sync."""
        now = self.clock()
        self.registry.age_out(now)
        self.try_become_leader()

        self.broadcast(ClusterAction.HEARTBEAT)
        if self._is_leader:
            self.broadcast(ClusterAction.SYNC_REQUEST)

    def try_become_leader(self) -> bool:
        """Claim or refresh the leader slot.

        Returns:
            True if this node is the leader afterwards
        """
        now = self.clock()
        try:
            current = self._read_leader_slot()
            owner = current.get("node_id") if current else None
            claimed_at = float(current.get("timestamp", 0.0)) if current else 0.0

            if owner is None or owner == self.node_id or now - claimed_at > self.leader_stale_after:
                slot = {"node_id": self.node_id, "timestamp": now}
                self.storage.set(LEADER_KEY, self.serializer.serialize(slot))
                if not self._is_leader:
                    logger.info(f"Node {self.node_id} became cluster leader")
                self._is_leader = True
            elif self._is_leader:
                logger.info(f"Node {self.node_id} stepped down, {owner} holds the leader slot")
                self._is_leader = False

        except Exception as e:
            logger.warning(f"Failed to claim cluster leadership: {e}")

        return self._is_leader

    def _read_leader_slot(self) -> Optional[Dict[str, Any]]:
        data = self.storage.get(LEADER_KEY)
        if data is None:
            return None
        try:
            slot = self.serializer.deserialize(data)
        except Exception as e:
            logger.warning(f"Unreadable leader slot, treating as empty: {e}")
            return None
        return slot if isinstance(slot, dict) else None

    def _release_leadership(self) -> None:
        try:
            current = self._read_leader_slot()
            if current and current.get("node_id") == self.node_id:
                self.storage.remove(LEADER_KEY)
        except Exception as e:
            logger.warning(f"Failed to release cluster leadership: {e}")
        self._is_leader = False

    def _on_store_write(self, key: str, data: Optional[bytes]) -> None:
        if data is None or key == LEADER_KEY or not key.startswith(MESSAGE_PREFIX):
            return
        self.handle_data(data)

    def handle_data(self, data: bytes) -> None:
        """Decode and apply a raw message from a delivery path."""
        try:
            message = ClusterMessage.from_dict(self.serializer.deserialize(data))
        except Exception as e:
            logger.debug(f"Ignoring undecodable cluster message: {e}")
            return
        self.handle_message(message)

    def handle_message(self, message: ClusterMessage) -> bool:
        """Apply a message from a peer.

        Args:
            message: Decoded message

        Returns:
            True if the message was applied
        """
        if message.source == self.node_id or not self._remember(message.id):
            return False

        self.registry.touch(message.source, self.clock(), info=message.node)

        try:
            if message.action == ClusterAction.SET and message.entry is not None:
                self.target.apply_remote_set(CacheEntry.from_dict(message.entry))
            elif message.action == ClusterAction.DELETE and message.key is not None:
                self.target.apply_remote_delete(message.key)
            elif message.action == ClusterAction.CLEAR:
                self.target.apply_remote_clear()
            elif message.action == ClusterAction.SYNC_REQUEST:
                self.send_sync_data()
            elif message.action == ClusterAction.SYNC_DATA:
                self._apply_sync_data(message)
        except Exception as e:
            logger.error(f"Failed to process cluster {message.action.value} from {message.source}: {e}")
            return False

        logger.debug(f"Applied cluster {message.action.value} from {message.source}")
        return True

    def send_sync_data(self) -> None:
        """Broadcast this node's full entry set."""
        entries = [entry.to_dict() for entry in self.target.export_entries()]
        self.broadcast(ClusterAction.SYNC_DATA, entries=entries)

    def _apply_sync_data(self, message: ClusterMessage) -> None:
        entries = message.entries or []
        self.registry.set_status(message.source, NodeStatus.SYNCING)
        try:
            for data in entries:
                self.target.apply_remote_set(CacheEntry.from_dict(data))
        finally:
            self.registry.set_status(message.source, NodeStatus.ONLINE)

        if self.events is not None:
            self.events.emit(CacheEvent.CLUSTER_SYNC, message.source, len(entries))

    def _remember(self, message_id: str) -> bool:
        """Record a message id. False if it was already seen."""
        with self._lock:
            if message_id in self._seen:
                return False
            self._seen[message_id] = None
            while len(self._seen) > self.seen_window:
                self._seen.popitem(last=False)
            return True

    def nodes(self) -> List[ClusterNode]:
        """Get known nodes, self included."""
        return self.registry.nodes()

    def __repr__(self) -> str:
        return (
            f"ReplicationCoordinator(node={self.node_id!r}, "
            f"leader={self._is_leader}, peers={len(self.registry) - 1})"
        )


__all__ = [
    "ReplicationCoordinator",
    "ReplicaTarget",
    "ClusterMessage",
    "ClusterAction",
    "LEADER_KEY",
    "MESSAGE_PREFIX",
]
