"""In-memory corpus of crawled pages.

Writers (the running import) take a lock; readers get a point-in-time copy,
so a search issued mid-run sees a prefix of the final corpus.
"""

from __future__ import annotations

import threading
from typing import Iterable, List, Optional

from docindex.crawler.models import CrawlStatistics, Page, SearchResult
from docindex.index.search import search as _search


class Corpus:
    """Ordered collection of :class:`Page` objects keyed by URL."""

    def __init__(self, pages: Iterable[Page] = ()) -> None:
        self._lock = threading.Lock()
        self._pages: List[Page] = []
        self._index: dict[str, int] = {}
        for page in pages:
            self.add(page)

    def add(self, page: Page) -> None:
        """Append *page*, or replace the page with the same URL in place."""
        with self._lock:
            position = self._index.get(page.url)
            if position is None:
                self._index[page.url] = len(self._pages)
                self._pages.append(page)
            else:
                self._pages[position] = page

    def remove(self, url: str) -> bool:
        with self._lock:
            position = self._index.pop(url, None)
            if position is None:
                return False
            del self._pages[position]
            self._index = {p.url: i for i, p in enumerate(self._pages)}
            return True

    def replace_all(self, pages: Iterable[Page]) -> None:
        with self._lock:
            self._pages = []
            self._index = {}
            for page in pages:
                if page.url in self._index:
                    self._pages[self._index[page.url]] = page
                else:
                    self._index[page.url] = len(self._pages)
                    self._pages.append(page)

    def get(self, url: str) -> Optional[Page]:
        with self._lock:
            position = self._index.get(url)
            return self._pages[position] if position is not None else None

    def pages(self) -> List[Page]:
        with self._lock:
            return list(self._pages)

    def urls(self) -> List[str]:
        with self._lock:
            return [p.url for p in self._pages]

    def statistics(self) -> CrawlStatistics:
        return CrawlStatistics.from_pages(self.pages())

    def search(self, query: str, limit: int = 50) -> List[SearchResult]:
        return _search(self.pages(), query, limit)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)

    def __contains__(self, url: str) -> bool:
        with self._lock:
            return url in self._index
