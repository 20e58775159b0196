"""KinCache Events - Cache Lifecycle Event Bus.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[str], Any], None]


class CacheEvent(str, Enum):
    """Named cache lifecycle events."""

    SET = "set"
    GET = "get"
    DELETE = "delete"
    EXPIRE = "expire"
    EVICT = "evict"
    CLEANUP = "cleanup"
    CLEAR = "clear"
    CLUSTER_SYNC = "cluster_sync"
    PERSISTENCE_SAVE = "persistence_save"
    PERSISTENCE_LOAD = "persistence_load"
    COMPRESSION = "compression"
    DECOMPRESSION = "decompression"


class EventBus:
    """Small publish/subscribe hub for cache events.

    Listeners receive ``(key, payload)``. A failing listener is logged and
    never breaks the emitting operation or the other listeners.

    Example:
        bus = EventBus()
        unsubscribe = bus.on("evict", lambda key, _: print("evicted", key))
        bus.emit(CacheEvent.EVICT, "user:1")
        unsubscribe()
    """

    def __init__(self):
        self._listeners: Dict[CacheEvent, List[Listener]] = {}
        self._lock = threading.RLock()

    def on(
        self,
        event: Union[CacheEvent, str],
        listener: Listener,
    ) -> Callable[[], None]:
        """Subscribe to an event.

        Args:
            event: Event or event name
            listener: Function(key, payload)

        Returns:
            Function that removes the subscription

        Raises:
            ValueError: If the event name is unknown
        """
        event = CacheEvent(event)
        with self._lock:
            self._listeners.setdefault(event, []).append(listener)

        def unsubscribe() -> None:
            self.off(event, listener)

        return unsubscribe

    def off(self, event: Union[CacheEvent, str], listener: Listener) -> bool:
        """Remove a listener.

        Returns:
            True if the listener was subscribed
        """
        event = CacheEvent(event)
        with self._lock:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)
                return True
            return False

    def emit(
        self,
        event: CacheEvent,
        key: Optional[str] = None,
        payload: Any = None,
    ) -> None:
        """Deliver an event to its listeners."""
        with self._lock:
            listeners = list(self._listeners.get(event, ()))

        for listener in listeners:
            try:
                listener(key, payload)
            except Exception as e:
                logger.error(f"Listener error on {event.value}: {e}")

    def listener_count(self, event: Optional[Union[CacheEvent, str]] = None) -> int:
        """Count listeners for one event, or all of them."""
        with self._lock:
            if event is not None:
                return len(self._listeners.get(CacheEvent(event), ()))
            return sum(len(v) for v in self._listeners.values())

    def clear(self) -> None:
        """Detach every listener."""
        with self._lock:
            self._listeners.clear()


__all__ = ["CacheEvent", "EventBus", "Listener"]
