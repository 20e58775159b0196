"""Persistence module - Cache state snapshots."""

from kincache_core.persistence.snapshot import (
    PersistenceSnapshotter,
    Snapshot,
    SNAPSHOT_KEY,
)

__all__ = ["PersistenceSnapshotter", "Snapshot", "SNAPSHOT_KEY"]
