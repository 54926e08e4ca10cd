"""Snapshot cache implementations behind the SnapshotStore contract."""

from .snapshot_repository import SnapshotRepository, SqlSnapshotStore
from .snapshot_store import InMemorySnapshotStore, SnapshotStore

__all__ = [
    "InMemorySnapshotStore",
    "SnapshotRepository",
    "SnapshotStore",
    "SqlSnapshotStore",
]
