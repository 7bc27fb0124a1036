"""Persistent state for the docindex CLI.

Every command works against the snapshot at ``settings.snapshot_path``; these
helpers open it and rebuild the in-memory corpus from it.
"""

from __future__ import annotations

from docindex.config import settings
from docindex.index.corpus import Corpus
from docindex.store.snapshot import SnapshotStore


def open_store() -> SnapshotStore:
    """Return the snapshot store for the configured workspace."""
    return SnapshotStore(settings.snapshot_path)


def load_corpus(store: SnapshotStore) -> Corpus:
    """Load *store* into a fresh corpus.  Missing/corrupt snapshots give an empty one."""
    snapshot = store.load()
    return Corpus(snapshot.pages if snapshot is not None else ())
