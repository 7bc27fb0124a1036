"""Snapshot persistence: the whole corpus as one JSON document.

Layout::

    {
      "version": 1,
      "generated_at": "2026-01-01T00:00:00+00:00",
      "pages": [ ...Page.to_dict()... ],
      "statistics": {"total_pages": ..., "total_size_bytes": ..., "last_crawled": ...}
    }

``save`` writes to a temporary file in the target directory and renames it
over the previous snapshot, so readers never observe a half-written file.
``load`` treats a missing or corrupt snapshot as absent.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from docindex.crawler.models import CrawlStatistics, Page, Snapshot, utcnow

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class SnapshotStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def save(self, pages: Iterable[Page]) -> Snapshot:
        """Atomically replace the snapshot with *pages* and fresh statistics."""
        page_list = list(pages)
        snapshot = Snapshot(
            version=SNAPSHOT_VERSION,
            generated_at=utcnow(),
            pages=page_list,
            statistics=CrawlStatistics.from_pages(page_list),
        )

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(snapshot.to_dict(), fh, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info("Saved %d page(s) to %s", len(page_list), self.path)
        return snapshot

    def load(self) -> Optional[Snapshot]:
        """Return the last saved snapshot, or ``None`` if missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            snapshot = Snapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Ignoring corrupt snapshot %s: %s", self.path, exc)
            return None
        if snapshot.version != SNAPSHOT_VERSION:
            logger.warning(
                "Ignoring snapshot %s with unsupported version %s", self.path, snapshot.version
            )
            return None
        return snapshot
