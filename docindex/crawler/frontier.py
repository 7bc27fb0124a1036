"""Breadth-first frontier: the visited set plus the pending queue of a run."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Optional

from docindex.crawler.links import host_of, normalize_url
from docindex.crawler.models import FrontierEntry, ImportConfig


class Frontier:
    """Owns URL admission, dedup and traversal order for one run.

    Entries are popped FIFO.  Each entry's children are enqueued at
    ``depth + 1`` while it is being processed, so every depth-``d`` entry is
    dequeued before any depth-``d+1`` entry.

    A URL enters the visited set the moment it is admitted, not when it is
    fetched, so the same link found on two pages is only queued once.
    """

    def __init__(self, config: ImportConfig, visited: Iterable[str] = ()) -> None:
        self.config = config
        self._seed_host = host_of(config.seed_url)
        self._visited: set[str] = set()
        for url in visited:
            normalized = normalize_url(url)
            if normalized:
                self._visited.add(normalized)
        self._queue: deque[FrontierEntry] = deque()
        self.total_enqueued = 0
        self.total_dequeued = 0

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------
    def seed(self, url: str) -> bool:
        """Admit the seed at depth 0.

        The seed bypasses a pre-seeded visited set so an incremental run can
        still rediscover links from it.
        """
        normalized = normalize_url(url)
        if normalized is None or host_of(normalized) != self._seed_host:
            return False
        self._visited.discard(normalized)
        return self.enqueue(normalized, 0, None)

    def enqueue(self, url: str, depth: int, origin: Optional[str]) -> bool:
        """Queue *url* if it passes every admission rule; return whether it did."""
        normalized = normalize_url(url)
        if normalized is None or normalized in self._visited:
            return False
        if host_of(normalized) != self._seed_host:
            return False
        if not self.config.allows(normalized):
            return False
        if depth > self.config.max_depth:
            return False
        if self.total_enqueued >= self.config.max_pages_per_site:
            return False

        self._visited.add(normalized)
        self._queue.append(FrontierEntry(url=normalized, depth=depth, discovered_from=origin))
        self.total_enqueued += 1
        return True

    # ------------------------------------------------------------------
    # Consumption
    # ------------------------------------------------------------------
    def next(self) -> Optional[FrontierEntry]:
        if not self._queue:
            return None
        self.total_dequeued += 1
        return self._queue.popleft()

    def is_exhausted(self) -> bool:
        return not self._queue or self.total_dequeued >= self.config.max_pages_per_site

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def visited(self) -> frozenset[str]:
        return frozenset(self._visited)

    def __contains__(self, url: str) -> bool:
        return normalize_url(url) in self._visited
