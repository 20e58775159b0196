"""KinCache Transport - Broadcast Channels Between Cache Instances.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

import redis

from kincache_core.store.redis import RedisConfig, create_client

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes], None]


class BroadcastTransport(ABC):
    """Fire-and-forget publish/subscribe channel.

    Delivers serialized cluster messages to every subscriber, possibly
    including the publisher itself. No ordering or delivery guarantees.
    """

    @abstractmethod
    def publish(self, data: bytes) -> None:
        """Publish a message.

        Args:
            data: Serialized message
        """
        pass

    @abstractmethod
    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        """Receive published messages.

        Args:
            handler: Function(data)

        Returns:
            Function that ends the subscription
        """
        pass

    def close(self) -> None:
        """Release transport resources."""
        pass


class NullTransport(BroadcastTransport):
    """Transport for single-instance deployments. Drops everything."""

    def publish(self, data: bytes) -> None:
        pass

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        return lambda: None

    def __repr__(self) -> str:
        return "NullTransport()"


class LocalHub:
    """In-process message hub shared by several ``LocalTransport`` instances."""

    def __init__(self):
        self._handlers: List[MessageHandler] = []
        self._lock = threading.RLock()

    def add(self, handler: MessageHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def discard(self, handler: MessageHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def deliver(self, data: bytes) -> None:
        with self._lock:
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(data)
            except Exception as e:
                logger.error(f"Local hub handler error: {e}")

    def __len__(self) -> int:
        return len(self._handlers)


class LocalTransport(BroadcastTransport):
    """Transport between caches living in one process.

    Delivery is synchronous: ``publish`` returns after every subscriber
    has handled the message.

    Example:
        hub = LocalHub()
        a = Cache(transport=LocalTransport(hub))
        b = Cache(transport=LocalTransport(hub))
    """

    def __init__(self, hub: LocalHub):
        self.hub = hub
        self._handlers: List[MessageHandler] = []

    def publish(self, data: bytes) -> None:
        self.hub.deliver(data)

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        self.hub.add(handler)
        self._handlers.append(handler)

        def unsubscribe() -> None:
            self.hub.discard(handler)
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def close(self) -> None:
        for handler in list(self._handlers):
            self.hub.discard(handler)
        self._handlers.clear()

    def __repr__(self) -> str:
        return f"LocalTransport(peers={len(self.hub)})"


class RedisTransport(BroadcastTransport):
    """Transport over Redis pub/sub, for caches in separate processes.

    Each subscription runs a redis-py pub/sub worker thread.

    Example:
        transport = RedisTransport(RedisConfig(host="redis.local"))
        cache = Cache(storage=RedisStore(config), transport=transport)
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Any] = None,
        poll_interval: float = 0.01,
    ):
        """Initialize Redis transport.

        Args:
            config: Redis configuration (``channel`` names the pub/sub channel)
            client: Existing Redis client to use instead of a new pool
            poll_interval: Sleep between pub/sub polls
        """
        self.config = config or RedisConfig()
        self.channel = self.config.channel
        self.poll_interval = poll_interval
        self._client = client
        self._workers: List[Any] = []

    @property
    def client(self) -> Any:
        """Get the Redis client, connecting on first use."""
        if self._client is None:
            self._client = create_client(self.config)
        return self._client

    def publish(self, data: bytes) -> None:
        self.client.publish(self.channel, data)

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        def on_message(message: dict) -> None:
            try:
                handler(message["data"])
            except Exception as e:
                logger.error(f"Redis transport handler error: {e}")

        pubsub = self.client.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(**{self.channel: on_message})
        worker = pubsub.run_in_thread(sleep_time=self.poll_interval, daemon=True)
        self._workers.append(worker)
        logger.info(f"Subscribed to Redis channel {self.channel}")

        def unsubscribe() -> None:
            if worker in self._workers:
                self._workers.remove(worker)
            try:
                worker.stop()
                pubsub.close()
            except redis.RedisError as e:
                logger.warning(f"Error closing Redis subscription: {e}")

        return unsubscribe

    def close(self) -> None:
        for worker in list(self._workers):
            try:
                worker.stop()
            except redis.RedisError as e:
                logger.warning(f"Error stopping Redis subscription: {e}")
        self._workers.clear()

    def __repr__(self) -> str:
        return f"RedisTransport(channel={self.channel!r})"


__all__ = [
    "BroadcastTransport",
    "NullTransport",
    "LocalHub",
    "LocalTransport",
    "RedisTransport",
    "MessageHandler",
]
