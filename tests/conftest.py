"""Shared fixtures: an in-memory fake site served through the Fetcher interface.

No test touches the network.  ``FakeFetcher`` maps URLs to bodies (or to
``(status, body)`` tuples, or to exceptions to raise) and records every
request in ``calls``.  ``redirects`` maps a requested URL to the URL that
is served in its place.  Unknown URLs answer 404.
"""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from docindex.crawler.fetcher import FetchResponse, Fetcher
from docindex.crawler.orchestrator import ImportOrchestrator
from docindex.index.corpus import Corpus
from docindex.store.snapshot import SnapshotStore


def html_page(title: str, body: str = "", links: tuple[str, ...] = ()) -> str:
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return (
        f"<html><head><title>{title}</title></head>"
        f"<body><h1>{title}</h1><p>{body}</p>{anchors}</body></html>"
    )


class FakeFetcher(Fetcher):
    def __init__(self, pages: Optional[dict] = None) -> None:
        self.pages: dict = dict(pages or {})
        self.calls: list[str] = []
        self.user_agents: list[str] = []
        self.on_fetch: Optional[Callable[[str, int], None]] = None
        self.redirects: dict[str, str] = {}

    def fetch(self, url: str, timeout: float, user_agent: str) -> FetchResponse:
        self.calls.append(url)
        self.user_agents.append(user_agent)
        if self.on_fetch is not None:
            self.on_fetch(url, len(self.calls))

        final = self.redirects.get(url, url)
        value = self.pages.get(final)
        if value is None:
            return FetchResponse(url=final, status_code=404, body=b"Not Found")
        if isinstance(value, Exception):
            raise value
        status, body = value if isinstance(value, tuple) else (200, value)
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FetchResponse(url=final, status_code=status, body=body, encoding="utf-8")


@pytest.fixture()
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture()
def store(tmp_path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "crawl_index.json")


@pytest.fixture()
def sleeps() -> list[float]:
    """Collects politeness delays instead of sleeping."""
    return []


@pytest.fixture()
def orchestrator(fetcher, store, sleeps) -> ImportOrchestrator:
    return ImportOrchestrator(
        fetcher,
        Corpus(),
        store,
        timeout=5.0,
        user_agent="docindex-test/1.0",
        sleep=sleeps.append,
    )
