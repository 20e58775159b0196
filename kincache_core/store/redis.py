"""KinCache Redis Store - Redis Storage Medium.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import redis

from kincache_core.errors import StorageError, StorageQuotaExceeded
from kincache_core.store.backend import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class RedisConfig:
    """Redis connection configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        prefix: Key prefix
        channel: Pub/sub channel for cluster broadcasts
    """

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    prefix: str = "kincache:"
    channel: str = "kincache:cluster"


def create_client(config: RedisConfig) -> redis.Redis:
    """Create a pooled Redis client.

    Args:
        config: Redis configuration

    Returns:
        Redis client
    """
    pool = redis.ConnectionPool(
        host=config.host,
        port=config.port,
        db=config.db,
        password=config.password,
        socket_timeout=config.socket_timeout,
        socket_connect_timeout=config.socket_connect_timeout,
        max_connections=config.max_connections,
        decode_responses=False,
    )
    return redis.Redis(connection_pool=pool)


class RedisStore(KeyValueStore):
    """Redis storage medium.

    Shares snapshots, broadcasts and the leader slot between processes
    and hosts. Pair it with ``RedisTransport`` for message delivery, since
    plain key writes are not observable here.

    Example:
        store = RedisStore(RedisConfig(host="redis.local"))
        store.set("cache_cluster_leader", b"...")
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        client: Optional[Any] = None,
    ):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Existing Redis client to use instead of a new pool
        """
        super().__init__()
        self.config = config or RedisConfig()
        self._client = client

    @property
    def client(self) -> Any:
        """Get the Redis client, connecting on first use."""
        if self._client is None:
            self._client = create_client(self.config)
            logger.info(f"Connected to Redis at {self.config.host}:{self.config.port}")
        return self._client

    def _make_key(self, key: str) -> str:
        return f"{self.config.prefix}{key}"

    def _fail(self, action: str, key: str, error: Exception) -> StorageError:
        logger.error(f"Redis {action} error for {key}: {error}")
        self._stats.record_error(str(error))
        if isinstance(error, redis.ResponseError) and "OOM" in str(error):
            return StorageQuotaExceeded(key)
        return StorageError(f"Redis {action} failed for {key!r}: {error}")

    def get(self, key: str) -> Optional[bytes]:
        try:
            self._stats.reads += 1
            return self.client.get(self._make_key(key))
        except redis.RedisError as e:
            raise self._fail("get", key, e) from e

    def set(self, key: str, data: bytes) -> None:
        try:
            self.client.set(self._make_key(key), data)
            self._stats.writes += 1
        except redis.RedisError as e:
            raise self._fail("set", key, e) from e

    def remove(self, key: str) -> bool:
        try:
            removed = self.client.delete(self._make_key(key)) > 0
            if removed:
                self._stats.removes += 1
            return removed
        except redis.RedisError as e:
            raise self._fail("remove", key, e) from e

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        pattern = f"{self.config.prefix}{prefix or ''}*"
        prefix_len = len(self.config.prefix)
        try:
            keys = []
            for key in self.client.scan_iter(match=pattern, count=100):
                key_str = key.decode() if isinstance(key, bytes) else key
                keys.append(key_str[prefix_len:])
            return keys
        except redis.RedisError as e:
            raise self._fail("scan", pattern, e) from e

    def close(self) -> None:
        super().close()
        if self._client is not None:
            self._client.close()
            self._client = None

    def __repr__(self) -> str:
        return f"RedisStore(host={self.config.host}, port={self.config.port})"


__all__ = ["RedisStore", "RedisConfig", "create_client"]
