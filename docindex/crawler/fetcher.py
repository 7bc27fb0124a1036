"""HTTP fetching.

The orchestrator only depends on the :class:`Fetcher` interface so tests (and
alternative transports) can supply their own implementation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from docindex.crawler.errors import FetchFailure

logger = logging.getLogger(__name__)


@dataclass
class FetchResponse:
    """The raw HTTP response for a single URL fetch."""

    url: str
    status_code: int
    body: bytes
    encoding: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Fetcher(ABC):
    """Abstract transport used by the import orchestrator."""

    @abstractmethod
    def fetch(self, url: str, timeout: float, user_agent: str) -> FetchResponse:
        """Fetch *url*.

        Non-2xx responses are returned, not raised; the caller decides.

        Raises:
            FetchFailure: On transport errors (DNS, connect, timeout, ...).
        """


class HttpxFetcher(Fetcher):
    """:class:`Fetcher` backed by ``httpx``; redirects are followed."""

    def fetch(self, url: str, timeout: float, user_agent: str) -> FetchResponse:
        logger.debug("GET %s", url)
        try:
            with httpx.Client(
                headers={"User-Agent": user_agent},
                timeout=timeout,
                follow_redirects=True,
            ) as client:
                response = client.get(url)
        except httpx.HTTPError as exc:
            raise FetchFailure(url, f"{type(exc).__name__}: {exc}") from exc

        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            body=response.content,
            encoding=response.charset_encoding,
        )
