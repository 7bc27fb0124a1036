"""Import orchestration: one parametrised crawler for every import mode.

``ImportOrchestrator.start`` drives a single run through

    fetch -> extract -> store page -> resolve links -> enqueue

in one of three modes:

``singlePage``
    Fetch and store the seed only.

``entireSite``
    Breadth-first traversal from the seed, bounded by ``max_depth`` and
    ``max_pages_per_site`` and restricted to the seed's host.

``sitemap``
    Probe the conventional sitemap locations, then fetch every listed URL at
    depth 0 without following links.

Runs are strictly sequential: at most one fetch is in flight, and the
politeness delay is applied after every fetch.  Per-page failures are recorded
in the :class:`RunReport` and never abort a multi-page run.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from docindex.crawler.errors import (
    CrawlError,
    FetchFailure,
    ImportCancelled,
    InvalidSeed,
    ParsingError,
    RunInProgress,
    SitemapNotFound,
)
from docindex.crawler.extractor import extract
from docindex.crawler.fetcher import FetchResponse, Fetcher
from docindex.crawler.frontier import Frontier
from docindex.crawler.links import (
    host_of,
    links,
    normalize_url,
    parse_sitemap,
    sitemap_candidates,
)
from docindex.crawler.models import (
    FrontierEntry,
    ImportConfig,
    ImportMode,
    Page,
    PageFailure,
    ProgressEvent,
    RunReport,
    RunStatus,
    utcnow,
)

if TYPE_CHECKING:
    from docindex.index.corpus import Corpus
    from docindex.store.snapshot import SnapshotStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class ImportOrchestrator:
    """Runs imports against a shared :class:`~docindex.index.corpus.Corpus`.

    Args:
        fetcher: Transport used for every request.
        corpus: Pages are added here as they are extracted.
        store: When given, the corpus is saved after a run completes or is
            cancelled.
        timeout: Per-request timeout handed to the fetcher.
        user_agent: ``User-Agent`` header handed to the fetcher.
        sleep: Used for the politeness delay (tests pass a no-op).
    """

    def __init__(
        self,
        fetcher: Fetcher,
        corpus: "Corpus",
        store: Optional["SnapshotStore"] = None,
        *,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        from docindex.config import settings  # noqa: PLC0415

        self.fetcher = fetcher
        self.corpus = corpus
        self.store = store
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.user_agent = user_agent or settings.user_agent
        self._sleep = sleep

        self._guard = threading.Lock()
        self._running = False
        self._cancel_event: Optional[threading.Event] = None

        self.status: RunStatus = RunStatus.IDLE
        self.progress: Optional[ProgressEvent] = None
        self.last_report: Optional[RunReport] = None
        self.visited: frozenset[str] = frozenset()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        return self._running

    def cancel(self) -> bool:
        """Signal the running import to stop before its next fetch.

        Returns ``False`` when nothing is running.
        """
        event = self._cancel_event
        if not self._running or event is None:
            return False
        event.set()
        return True

    def start(
        self,
        config: ImportConfig,
        *,
        cancel_event: Optional[threading.Event] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> RunReport:
        """Run one import to completion and return its report.

        Raises:
            RunInProgress: Another import is running; nothing is changed.
            InvalidSeed: The seed URL is unusable; nothing is fetched.
            SitemapNotFound: Sitemap mode found no sitemap.
            FetchFailure / ParsingError: Single-page mode could not load the seed.
            ImportCancelled: The cancellation signal was observed.  Pages
                stored before that point are kept (and saved).
        """
        with self._guard:
            if self._running:
                raise RunInProgress("an import is already running")
            self._running = True
            self._cancel_event = cancel_event or threading.Event()

        report = RunReport(mode=config.mode, seed_url=config.seed_url)
        self.last_report = report
        self.status = RunStatus.RUNNING
        self.progress = None
        self.visited = frozenset()
        on_progress = on_progress or (lambda event: None)
        label = config.name or config.seed_url
        logger.info("Import %r started (mode=%s)", label, config.mode.value)

        try:
            seed = self._validate_seed(config.seed_url)
            if config.mode is ImportMode.SINGLE_PAGE:
                self._run_single_page(config, seed, report, on_progress)
            elif config.mode is ImportMode.ENTIRE_SITE:
                self._run_entire_site(config, seed, report, on_progress)
            else:
                self._run_sitemap(config, seed, report, on_progress)
        except ImportCancelled:
            self._finish(report, RunStatus.CANCELLED)
            logger.info(
                "Import %r cancelled after %d page(s)", label, report.pages_indexed
            )
            raise
        except CrawlError as exc:
            report.error = str(exc)
            self._finish(report, RunStatus.FAILED)
            logger.error("Import %r failed: %s", label, exc)
            raise
        except Exception as exc:
            report.error = f"{type(exc).__name__}: {exc}"
            self._finish(report, RunStatus.FAILED)
            raise
        else:
            self._finish(report, RunStatus.COMPLETE)
            logger.info(
                "Import %r complete: %d of %d page(s) indexed",
                label,
                report.pages_indexed,
                report.pages_attempted,
            )
        return report

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------
    def _run_single_page(
        self,
        config: ImportConfig,
        seed: str,
        report: RunReport,
        on_progress: ProgressCallback,
    ) -> None:
        self._check_cancelled()
        self.visited = frozenset([seed])
        self._emit(on_progress, 0, 1, seed)
        report.pages_attempted = 1
        response = self._fetch(seed)
        page = extract(response.body, seed, depth=0, crawled_at=utcnow(), encoding=response.encoding)
        self._store(page, report)
        self._emit(on_progress, 1, 1, seed)

    def _run_entire_site(
        self,
        config: ImportConfig,
        seed: str,
        report: RunReport,
        on_progress: ProgressCallback,
    ) -> None:
        frontier = Frontier(config, visited=self._known_urls(config))
        frontier.seed(seed)

        processed = 0
        try:
            while not frontier.is_exhausted():
                self._check_cancelled()
                entry = frontier.next()
                if entry is None:
                    break
                self._emit(on_progress, processed, frontier.total_enqueued, entry.url)

                response = self._process(entry, config, report)
                processed += 1
                if response is not None and entry.depth < config.max_depth:
                    # Relative links resolve against the URL actually served.
                    for url in links(response.body, response.url or entry.url):
                        frontier.enqueue(url, entry.depth + 1, entry.url)

                self._emit(on_progress, processed, frontier.total_enqueued, entry.url)
        finally:
            self.visited = frontier.visited

    def _run_sitemap(
        self,
        config: ImportConfig,
        seed: str,
        report: RunReport,
        on_progress: ProgressCallback,
    ) -> None:
        urls = self._select_sitemap_urls(config, seed, self._discover_sitemap(seed))
        self.visited = frozenset(urls)
        total = len(urls)
        self._emit(on_progress, 0, total, "")

        for processed, url in enumerate(urls):
            self._check_cancelled()
            self._emit(on_progress, processed, total, url)
            self._process(FrontierEntry(url=url, depth=0), config, report)
            self._emit(on_progress, processed + 1, total, url)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _process(
        self, entry: FrontierEntry, config: ImportConfig, report: RunReport
    ) -> Optional[FetchResponse]:
        """Fetch, extract and store one entry; returns the response on success.

        Failures are recorded on *report* and swallowed.  The politeness delay
        runs after the fetch whatever its outcome.
        """
        report.pages_attempted += 1
        try:
            try:
                response = self._fetch(entry.url)
            finally:
                if config.delay_between_requests > 0:
                    self._sleep(config.delay_between_requests)
            page = extract(
                response.body,
                entry.url,
                depth=entry.depth,
                crawled_at=utcnow(),
                encoding=response.encoding,
            )
        except (FetchFailure, ParsingError) as exc:
            logger.warning("Skipping %s: %s", entry.url, exc)
            report.failures.append(PageFailure(url=entry.url, reason=str(exc)))
            return None

        self._store(page, report)
        return response

    def _fetch(self, url: str) -> FetchResponse:
        response = self.fetcher.fetch(url, self.timeout, self.user_agent)
        if not response.ok:
            raise FetchFailure(url, f"HTTP {response.status_code}", response.status_code)
        if response.url and host_of(response.url) != host_of(url):
            raise FetchFailure(url, f"redirected off-site to {response.url}", response.status_code)
        return response

    def _store(self, page: Page, report: RunReport) -> None:
        self.corpus.add(page)
        report.pages_indexed += 1
        logger.debug("Indexed %s (depth %d)", page.url, page.depth)

    def _discover_sitemap(self, seed: str) -> List[str]:
        for candidate in sitemap_candidates(seed):
            self._check_cancelled()
            try:
                response = self._fetch(candidate)
            except FetchFailure as exc:
                logger.debug("No sitemap at %s: %s", candidate, exc)
                continue
            urls = parse_sitemap(response.body)
            if urls:
                logger.info("Using sitemap %s (%d URL(s))", candidate, len(urls))
                return urls
        raise SitemapNotFound(f"no sitemap found for {seed}")

    def _select_sitemap_urls(
        self, config: ImportConfig, seed: str, urls: Iterable[str]
    ) -> List[str]:
        """Apply dedup, host, include/exclude, incremental and page-cap rules."""
        seed_host = host_of(seed)
        known = set(self._known_urls(config))
        selected: List[str] = []
        seen: set[str] = set()
        for raw in urls:
            url = normalize_url(raw)
            if url is None or url in seen:
                continue
            seen.add(url)
            if host_of(url) != seed_host or not config.allows(url) or url in known:
                continue
            selected.append(url)
            if len(selected) >= config.max_pages_per_site:
                break
        return selected

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _validate_seed(seed_url: str) -> str:
        seed = normalize_url(seed_url) if seed_url else None
        if seed is None:
            raise InvalidSeed(f"invalid seed URL: {seed_url!r}")
        return seed

    def _known_urls(self, config: ImportConfig) -> List[str]:
        return self.corpus.urls() if config.incremental else []

    def _check_cancelled(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise ImportCancelled("import cancelled")

    def _emit(self, on_progress: ProgressCallback, processed: int, total: int, url: str) -> None:
        event = ProgressEvent(processed=processed, total=max(total, processed), current_url=url)
        self.progress = event
        on_progress(event)

    def _finish(self, report: RunReport, status: RunStatus) -> None:
        report.status = status
        report.finished_at = utcnow()
        try:
            if self.store is not None and status in (RunStatus.COMPLETE, RunStatus.CANCELLED):
                self.store.save(self.corpus.pages())
        finally:
            self.status = status
            with self._guard:
                self._running = False
                self._cancel_event = None
