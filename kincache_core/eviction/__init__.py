"""Eviction module - Cache eviction policies and capacity governance."""

from kincache_core.eviction.policy import (
    EvictionPolicy,
    create_policy,
    policy_names,
    register_policy,
)
from kincache_core.eviction.lru import LRUPolicy
from kincache_core.eviction.lfu import LFUPolicy
from kincache_core.eviction.ttl import TTLPolicy
from kincache_core.eviction.random_choice import RandomPolicy
from kincache_core.eviction.governor import CapacityGovernor

__all__ = [
    "EvictionPolicy",
    "create_policy",
    "policy_names",
    "register_policy",
    "LRUPolicy",
    "LFUPolicy",
    "TTLPolicy",
    "RandomPolicy",
    "CapacityGovernor",
]
