"""Snapshot persistence package."""

from docindex.store.snapshot import SNAPSHOT_VERSION, SnapshotStore

__all__ = ["SNAPSHOT_VERSION", "SnapshotStore"]
