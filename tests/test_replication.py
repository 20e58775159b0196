"""Tests for cross-instance replication and leader election.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from unittest.mock import MagicMock

import pytest

from kincache_core.cache.cache import CacheConfig
from kincache_core.cache.entry import CacheEntry
from kincache_core.cluster.coordinator import (
    LEADER_KEY,
    MESSAGE_PREFIX,
    ClusterAction,
    ClusterMessage,
)
from kincache_core.cluster.node import ClusterNode, NodeRegistry, NodeStatus
from kincache_core.cluster.transport import (
    BroadcastTransport,
    LocalHub,
    LocalTransport,
    RedisTransport,
)
from kincache_core.protocol.serializer import MsgPackSerializer
from kincache_core.store.file import FileStore
from kincache_core.store.memory import MemoryStore
from kincache_core.store.redis import RedisConfig


def cluster_config(**kwargs):
    """Clustered config with background timers effectively idle."""
    kwargs.setdefault("persistence_enabled", False)
    kwargs.setdefault("cleanup_interval", 3600)
    kwargs.setdefault("cluster_sync_interval", 3600)
    return CacheConfig(**kwargs)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def hub():
    return LocalHub()


@pytest.fixture
def pair(make_cache, store, hub):
    """Two started caches sharing a store and a hub; ``a`` starts first."""
    a = make_cache(
        cluster_config(name="a"), storage=store, transport=LocalTransport(hub), node_id="node-a"
    )
    b = make_cache(
        cluster_config(name="b"), storage=store, transport=LocalTransport(hub), node_id="node-b"
    )
    a.start()
    b.start()
    return a, b


class TestReplication:
    """Tests for mutation broadcast between caches."""

    def test_set_replicates(self, pair):
        """Test a set on one cache is visible on the other."""
        a, b = pair

        a.set("family:1", {"name": "Lovelace"}, ttl=60)

        assert b.get("family:1") == {"name": "Lovelace"}
        assert b.ttl("family:1") == 60
        assert b.get_stats().total_entries == 1

    def test_delete_replicates(self, pair):
        """Test deletes reach peers."""
        a, b = pair
        a.set("key", "value")

        assert b.delete("key")

        assert not a.has("key")

    def test_clear_replicates(self, pair):
        """Test clears reach peers."""
        a, b = pair
        a.set("key1", 1)
        a.set("key2", 2)

        b.clear()

        assert a.size() == 0
        assert a.size_bytes == 0

    def test_compressed_value_replicates(self, pair):
        """Test compressed entries travel as bytes and decompress remotely."""
        a, b = pair
        value = ["memory lane " * 20] * 20

        a.set("album", value)

        assert b.get_entry("album").compressed
        assert b.get("album") == value

    def test_expiry_is_local(self, pair, clock):
        """Test lazy expiry on one cache is not broadcast."""
        a, b = pair
        a.set("key", "value", ttl=1)
        clock.advance(2)

        assert a.get("key") is None
        assert b.size() == 1

    def test_duplicate_delivery_applied_once(self, pair):
        """Test a message seen twice is applied once."""
        _, b = pair
        message = ClusterMessage(source="node-x", action=ClusterAction.DELETE, key="key")

        assert b.coordinator.handle_message(message)
        assert not b.coordinator.handle_message(message)

    def test_own_messages_ignored(self, pair):
        """Test a node skips its own messages."""
        a, _ = pair
        message = ClusterMessage(source="node-a", action=ClusterAction.CLEAR)

        assert not a.coordinator.handle_message(message)

    def test_garbage_ignored(self, pair):
        """Test undecodable data is dropped."""
        a, _ = pair
        a.set("key", "value")

        a.coordinator.handle_data(b"\xc1not msgpack")
        a.coordinator.handle_data(MsgPackSerializer().serialize({"type": "other"}))

        assert a.get("key") == "value"

    def test_message_slots_are_removed(self, pair, store):
        """Test broadcast slots do not accumulate in the store."""
        a, _ = pair

        a.set("key", "value")

        assert store.keys(MESSAGE_PREFIX) == [LEADER_KEY]

    def test_transport_only_store(self, make_cache, hub, tmp_path):
        """Test stores without watch replicate over the transport alone."""
        store = FileStore(str(tmp_path))
        a = make_cache(cluster_config(), storage=store, transport=LocalTransport(hub))
        b = make_cache(cluster_config(), storage=store, transport=LocalTransport(hub))
        a.start()
        b.start()

        a.set("key", "value")

        assert b.get("key") == "value"
        assert store.keys(MESSAGE_PREFIX) == [LEADER_KEY]

    def test_failures_do_not_break_writes(self, make_cache):
        """Test storage and transport failures are swallowed."""
        transport = MagicMock(spec=BroadcastTransport)
        transport.publish.side_effect = RuntimeError("channel closed")
        cache = make_cache(
            cluster_config(), storage=MemoryStore(quota_bytes=10), transport=transport
        )
        cache.start()

        cache.set("key", "value")

        assert cache.get("key") == "value"
        assert not cache.is_leader


class TestLeaderElection:
    """Tests for the soft leader claim."""

    def test_first_node_leads(self, pair, store):
        """Test the first started node takes the empty slot."""
        a, b = pair

        assert a.is_leader
        assert not b.is_leader
        slot = MsgPackSerializer().deserialize(store.get(LEADER_KEY))
        assert slot["node_id"] == "node-a"

    def test_release_on_destroy(self, pair, store):
        """Test a destroyed leader frees the slot for a peer."""
        a, b = pair

        a.destroy()

        assert store.get(LEADER_KEY) is None
        assert b.coordinator.try_become_leader()

    def test_stale_leader_replaced(self, pair, clock):
        """Test a silent leader is replaced and steps down later."""
        a, b = pair

        clock.advance(31)
        b.coordinator.tick()
        assert b.is_leader

        a.coordinator.tick()
        assert not a.is_leader

    def test_leader_refresh_keeps_claim(self, pair, clock):
        """Test a ticking leader keeps its claim."""
        a, b = pair

        for _ in range(4):
            clock.advance(10)
            a.coordinator.tick()
            b.coordinator.tick()

        assert a.is_leader
        assert not b.is_leader


class TestSync:
    """Tests for full-state sync and node bookkeeping."""

    def test_leader_pulls_peer_state(self, pair, clock):
        """Test sync_request makes peers send their entries."""
        a, b = pair
        synced = []
        a.on("cluster_sync", lambda source, count: synced.append((source, count)))
        b.apply_remote_set(
            CacheEntry(key="offline-edit", value="draft", ttl_seconds=60, created_at=clock.now)
        )

        a.coordinator.tick()

        assert a.get("offline-edit") == "draft"
        assert synced == [("node-b", 1)]

    def test_heartbeats_register_nodes(self, pair):
        """Test heartbeats make nodes known to each other."""
        a, b = pair
        b.set("key", "value")

        b.coordinator.tick()

        nodes = {n.node_id: n for n in a.cluster_info()}
        assert set(nodes) == {"node-a", "node-b"}
        assert nodes["node-b"].entry_count == 1
        assert nodes["node-b"].status == NodeStatus.ONLINE
        assert a.get_stats().cluster_nodes == 2

    def test_clustering_disabled(self, make_cache):
        """Test a standalone cache reports no cluster."""
        cache = make_cache(cluster_config(clustering_enabled=False))

        assert cache.cluster_info() == []
        assert cache.node_id is None
        assert not cache.is_leader


class TestNodeRegistry:
    """Tests for peer ageing."""

    def test_offline_then_pruned(self):
        """Test silent peers go offline, then disappear."""
        registry = NodeRegistry(ClusterNode(node_id="self"), offline_after=15, prune_after=60)
        registry.touch("peer", now=100.0)

        assert registry.age_out(110.0) == []
        assert registry.get("peer").status == NodeStatus.ONLINE

        assert registry.age_out(116.0) == []
        assert registry.get("peer").status == NodeStatus.OFFLINE

        assert registry.age_out(161.0) == ["peer"]
        assert "peer" not in registry
        assert "self" in registry

    def test_touch_revives(self):
        """Test a message brings an offline peer back."""
        registry = NodeRegistry(ClusterNode(node_id="self"), offline_after=15, prune_after=60)
        registry.touch("peer", now=100.0)
        registry.age_out(120.0)

        registry.touch("peer", now=121.0, info={"entry_count": 4})

        assert registry.get("peer").status == NodeStatus.ONLINE
        assert registry.get("peer").entry_count == 4

    def test_nodes_are_copies(self):
        """Test returned records are detached."""
        registry = NodeRegistry(ClusterNode(node_id="self"))

        registry.nodes()[0].entry_count = 99

        assert registry.local.entry_count == 0


class TestRedisTransport:
    """Tests for RedisTransport against a mocked client."""

    def test_publish(self):
        """Test messages go to the configured channel."""
        client = MagicMock()
        transport = RedisTransport(RedisConfig(channel="kin:bus"), client=client)

        transport.publish(b"payload")

        client.publish.assert_called_once_with("kin:bus", b"payload")

    def test_subscribe(self):
        """Test pub/sub messages reach the handler."""
        client = MagicMock()
        pubsub = client.pubsub.return_value
        transport = RedisTransport(client=client)
        received = []

        unsubscribe = transport.subscribe(received.append)
        on_message = pubsub.subscribe.call_args.kwargs["kincache:cluster"]
        on_message({"type": "message", "data": b"payload"})

        assert received == [b"payload"]
        pubsub.run_in_thread.assert_called_once()

        unsubscribe()
        pubsub.run_in_thread.return_value.stop.assert_called_once()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
