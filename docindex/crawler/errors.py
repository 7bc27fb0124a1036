"""Exception hierarchy for the crawler.

Per-page errors (:class:`FetchFailure`, :class:`ParsingError`) are recorded by
the orchestrator and never abort a multi-page run.  Configuration-level errors
(:class:`InvalidSeed`, :class:`SitemapNotFound`) abort a run before any page
is fetched.
"""

from __future__ import annotations

from typing import Optional


class CrawlError(Exception):
    """Base class for every error raised by :mod:`docindex.crawler`."""


class InvalidSeed(CrawlError):
    """The seed URL is malformed or not an absolute HTTP(S) URL."""


class FetchFailure(CrawlError):
    """A single URL could not be fetched (transport error or non-2xx status)."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class ParsingError(CrawlError):
    """A fetched body could not be decoded as text."""


class SitemapNotFound(CrawlError):
    """None of the conventional sitemap locations yielded any URL."""


class ImportCancelled(CrawlError):
    """The running import observed its cancellation signal."""


class RunInProgress(CrawlError):
    """``start()`` was called while another import is running."""
