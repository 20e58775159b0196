"""Metrics module - Cache statistics and lifecycle events."""

from kincache_core.metrics.stats import CacheStats
from kincache_core.metrics.events import CacheEvent, EventBus

__all__ = ["CacheStats", "CacheEvent", "EventBus"]
