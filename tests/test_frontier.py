"""Tests for frontier admission rules and BFS ordering."""

from __future__ import annotations

from docindex.crawler.frontier import Frontier
from docindex.crawler.models import ImportConfig

_SEED = "https://example.com/"


def _frontier(**overrides) -> Frontier:
    return Frontier(ImportConfig(seed_url=_SEED, **overrides))


class TestAdmission:
    def test_seed_is_depth_zero(self) -> None:
        frontier = _frontier()
        assert frontier.seed(_SEED) is True
        entry = frontier.next()
        assert entry.url == _SEED
        assert entry.depth == 0
        assert entry.discovered_from is None

    def test_duplicate_rejected_after_normalisation(self) -> None:
        frontier = _frontier()
        assert frontier.enqueue("https://example.com/a", 1, _SEED) is True
        assert frontier.enqueue("https://EXAMPLE.com/a#section", 1, _SEED) is False
        assert frontier.pending == 1

    def test_visited_even_after_dequeue(self) -> None:
        frontier = _frontier()
        frontier.enqueue("https://example.com/a", 1, _SEED)
        frontier.next()
        assert frontier.enqueue("https://example.com/a", 2, _SEED) is False
        assert "https://example.com/a" in frontier

    def test_other_host_rejected(self) -> None:
        frontier = _frontier()
        assert frontier.enqueue("https://other.com/a", 1, _SEED) is False
        assert "https://other.com/a" not in frontier

    def test_depth_limit(self) -> None:
        frontier = _frontier(max_depth=2)
        assert frontier.enqueue("https://example.com/two", 2, _SEED) is True
        assert frontier.enqueue("https://example.com/three", 3, _SEED) is False

    def test_exclude_and_include_patterns(self) -> None:
        frontier = _frontier(include_patterns=["/docs/"], exclude_patterns=["/docs/private"])
        assert frontier.enqueue("https://example.com/docs/a", 1, _SEED) is True
        assert frontier.enqueue("https://example.com/docs/private/b", 1, _SEED) is False
        assert frontier.enqueue("https://example.com/blog/c", 1, _SEED) is False

    def test_page_cap_counts_enqueued_entries(self) -> None:
        frontier = _frontier(max_pages_per_site=3)
        assert frontier.seed(_SEED)
        assert frontier.enqueue("https://example.com/a", 1, _SEED)
        assert frontier.enqueue("https://example.com/b", 1, _SEED)
        assert frontier.enqueue("https://example.com/c", 1, _SEED) is False
        assert frontier.total_enqueued == 3


class TestPreSeededVisited:
    def test_known_urls_are_skipped(self) -> None:
        frontier = Frontier(
            ImportConfig(seed_url=_SEED), visited=["https://example.com/a", "not a url"]
        )
        assert frontier.enqueue("https://example.com/a", 1, _SEED) is False
        assert frontier.enqueue("https://example.com/b", 1, _SEED) is True

    def test_seed_bypasses_known_urls(self) -> None:
        frontier = Frontier(ImportConfig(seed_url=_SEED), visited=[_SEED])
        assert frontier.seed(_SEED) is True
        assert frontier.next().url == _SEED


class TestOrdering:
    def test_fifo_breadth_first(self) -> None:
        frontier = _frontier()
        frontier.seed(_SEED)
        root = frontier.next()
        frontier.enqueue("https://example.com/a", root.depth + 1, root.url)
        frontier.enqueue("https://example.com/b", root.depth + 1, root.url)
        a = frontier.next()
        frontier.enqueue("https://example.com/a/child", a.depth + 1, a.url)

        order = []
        while not frontier.is_exhausted():
            entry = frontier.next()
            order.append((entry.url, entry.depth))
        assert order == [
            ("https://example.com/b", 1),
            ("https://example.com/a/child", 2),
        ]

    def test_exhausted_when_empty(self) -> None:
        frontier = _frontier()
        assert frontier.is_exhausted()
        assert frontier.next() is None

    def test_exhausted_at_dequeue_cap(self) -> None:
        frontier = _frontier(max_pages_per_site=2)
        frontier.seed(_SEED)
        frontier.enqueue("https://example.com/a", 1, _SEED)
        frontier.next()
        assert not frontier.is_exhausted()
        frontier.next()
        assert frontier.is_exhausted()
        assert frontier.total_dequeued == 2
