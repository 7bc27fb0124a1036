"""Link discovery: same-origin ``href`` resolution and sitemap parsing."""

from __future__ import annotations

import re
from typing import List, Optional, Union
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from docindex.crawler.extractor import decode_entities

SITEMAP_PATHS = ("/sitemap.xml", "/sitemap_index.xml", "/sitemap/sitemap.xml")

_LOC_RE = re.compile(r"<loc>\s*(?:<!\[CDATA\[)?(.*?)(?:\]\]>)?\s*</loc>", re.IGNORECASE | re.DOTALL)


def _as_text(body: Union[str, bytes]) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def normalize_url(url: str) -> Optional[str]:
    """Return the canonical form used for dedup, or ``None`` if *url* is unusable.

    Scheme and host are lower-cased, the fragment is dropped and an empty path
    becomes ``/``.  Only absolute ``http``/``https`` URLs survive.
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https") or not host:
        return None
    netloc = host if port is None else f"{host}:{port}"
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def host_of(url: str) -> Optional[str]:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def links(raw_body: Union[str, bytes], base_url: str) -> List[str]:
    """Return same-host absolute URLs referenced by *raw_body*.

    Every element carrying an ``href`` is considered.  Relative references are
    resolved against *base_url*; results are normalised and de-duplicated in
    document order.
    """
    base_host = host_of(base_url)
    if not base_host:
        return []

    soup = BeautifulSoup(_as_text(raw_body), "html.parser")
    seen: set[str] = set()
    found: List[str] = []
    for tag in soup.find_all(href=True):
        href = tag["href"].strip()
        if not href or href.startswith("#"):
            continue
        try:
            absolute = urljoin(base_url, href)
        except ValueError:
            continue
        url = normalize_url(absolute)
        if url is None or host_of(url) != base_host:
            continue
        if url not in seen:
            seen.add(url)
            found.append(url)
    return found


def parse_sitemap(xml_body: Union[str, bytes]) -> List[str]:
    """Every ``<loc>`` value in *xml_body*, in document order."""
    return [
        decode_entities(match.strip())
        for match in _LOC_RE.findall(_as_text(xml_body))
        if match.strip()
    ]


def sitemap_candidates(seed_url: str) -> List[str]:
    """Conventional sitemap locations on the seed's origin, in probe order."""
    parts = urlsplit(seed_url)
    return [urlunsplit((parts.scheme, parts.netloc, path, "", "")) for path in SITEMAP_PATHS]
