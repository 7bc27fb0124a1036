"""Content extraction: turns a raw page body into a structured :class:`Page`.

Extraction is pattern matching over the markup rather than a full HTML parse.
It is deterministic for a fixed ``crawled_at`` and touches neither the network
nor any shared state, so the orchestrator can call it freely.
"""

from __future__ import annotations

import re
from collections import Counter
from datetime import datetime
from typing import List, Optional, Union
from urllib.parse import urlparse

from docindex.crawler.errors import ParsingError
from docindex.crawler.models import CodeExample, ContentBlock, Page, Section, utcnow

MAX_CODE_EXAMPLES = 10
MAX_KEYWORDS = 30
MAX_ABSTRACT_CHARS = 200

_FLAGS = re.IGNORECASE | re.DOTALL

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", _FLAGS)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", _FLAGS)
_H1_RE = re.compile(r"<h1\b[^>]*>(.*?)</h1\s*>", _FLAGS)
_HEADING_RE = re.compile(r"<h([1-6])\b[^>]*>(.*?)</h\1\s*>", _FLAGS)
_CODE_RE = re.compile(
    r"<pre\b([^>]*)>(.*?)</pre\s*>|<code\b([^>]*)>(.*?)</code\s*>", _FLAGS
)
_INNER_CODE_TAG_RE = re.compile(r"\s*<code\b([^>]*)>", re.IGNORECASE)
_LANG_CLASS_RE = re.compile(r"\b(?:language|lang)-([\w+#.-]+)", re.IGNORECASE)
_DATA_LANG_RE = re.compile(r"data-lang(?:uage)?\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)

_META_RE = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_ATTR_RE = re.compile(r"([\w:.-]+)\s*=\s*(\"[^\"]*\"|'[^']*')")

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_TOKEN_RE = re.compile(r"[^\W_]+")

_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&nbsp;": " ",
}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES))


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def decode_entities(text: str) -> str:
    """Decode the common HTML entities in a single pass (``&amp;lt;`` -> ``&lt;``)."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)


def tokenize(text: str) -> List[str]:
    """Case-folded alphanumeric runs longer than two characters.

    Shared by keyword extraction and query parsing so both sides agree.
    """
    return [t for t in _TOKEN_RE.findall(text.casefold()) if len(t) > 2]


def _to_text(fragment: str) -> str:
    text = _TAG_RE.sub(" ", fragment)
    text = decode_entities(text)
    return _WS_RE.sub(" ", text).strip()


def _strip_non_content(html: str) -> str:
    html = _COMMENT_RE.sub("", html)
    return _SCRIPT_STYLE_RE.sub("", html)


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------

def _extract_title(html: str) -> str:
    """Return the first ``<title>``, else the first ``<h1>``, else ``"Untitled"``."""
    for pattern in (_TITLE_RE, _H1_RE):
        match = pattern.search(html)
        if match:
            text = _to_text(match.group(1))
            if text:
                return text
    return "Untitled"


def _code_parts(match: re.Match) -> tuple[str, str]:
    if match.group(2) is not None:
        return match.group(1), match.group(2)
    return match.group(3), match.group(4)


def _infer_language(attrs: str, body: str) -> str:
    """Language hint from ``language-*``/``lang-*`` classes or ``data-lang``."""
    candidates = [attrs]
    inner = _INNER_CODE_TAG_RE.match(body)
    if inner:
        candidates.append(inner.group(1))
    for source in candidates:
        for pattern in (_LANG_CLASS_RE, _DATA_LANG_RE):
            hint = pattern.search(source)
            if hint:
                return hint.group(1).lower()
    return "plaintext"


def _code_text(body: str) -> str:
    # Highlighter spans are dropped without padding so identifiers stay intact.
    return decode_entities(_TAG_RE.sub("", body)).strip()


def _extract_code_examples(html: str) -> List[CodeExample]:
    examples: List[CodeExample] = []
    for match in _CODE_RE.finditer(html):
        attrs, body = _code_parts(match)
        code = _code_text(body)
        if not code:
            continue
        examples.append(
            CodeExample(
                title=f"Example {len(examples) + 1}",
                code=code,
                language=_infer_language(attrs, body),
            )
        )
        if len(examples) >= MAX_CODE_EXAMPLES:
            break
    return examples


def _content_blocks(span: str) -> List[ContentBlock]:
    """Split the markup following a heading into alternating text / code blocks."""
    blocks: List[ContentBlock] = []
    pos = 0
    for match in _CODE_RE.finditer(span):
        text = _to_text(span[pos:match.start()])
        if text:
            blocks.append(ContentBlock(type="text", text=text))
        attrs, body = _code_parts(match)
        code = _code_text(body)
        if code:
            blocks.append(
                ContentBlock(type="code", code=code, language=_infer_language(attrs, body))
            )
        pos = match.end()
    tail = _to_text(span[pos:])
    if tail:
        blocks.append(ContentBlock(type="text", text=tail))
    return blocks


def _extract_sections(html: str) -> List[Section]:
    """One section per ``h2``-``h4`` heading, in document order.

    A section's span runs until the next heading of equal or higher level
    (lower number); deeper headings stay inside the span.
    """
    headings = list(_HEADING_RE.finditer(html))
    sections: List[Section] = []
    for i, match in enumerate(headings):
        level = int(match.group(1))
        if level not in (2, 3, 4):
            continue
        heading = _to_text(match.group(2))
        if not heading:
            continue
        end = len(html)
        for following in headings[i + 1:]:
            if int(following.group(1)) <= level:
                end = following.start()
                break
        sections.append(
            Section(
                heading=heading,
                level=level,
                content_blocks=_content_blocks(html[match.end():end]),
            )
        )
    return sections


def _extract_keywords(text: str) -> List[str]:
    # most_common keeps first-encountered order for equal counts.
    return [word for word, _ in Counter(tokenize(text)).most_common(MAX_KEYWORDS)]


def _extract_meta(html: str) -> dict[str, str]:
    """Map lower-cased ``name``/``property``/``http-equiv`` to ``content``."""
    meta: dict[str, str] = {}
    for tag in _META_RE.findall(html):
        attrs = {k.lower(): v[1:-1] for k, v in _ATTR_RE.findall(tag)}
        key = attrs.get("name") or attrs.get("property") or attrs.get("http-equiv")
        content = attrs.get("content")
        if key and content is not None and key.lower() not in meta:
            meta[key.lower()] = decode_entities(content).strip()
    return meta


def _build_metadata(meta: dict[str, str]) -> dict:
    metadata: dict = {}
    keywords = meta.get("keywords")
    if keywords:
        metadata["tags"] = [t.strip() for t in keywords.split(",") if t.strip()]
    if meta.get("author"):
        metadata["author"] = meta["author"]
    last_modified = meta.get("last-modified") or meta.get("article:modified_time")
    if last_modified:
        metadata["last_modified"] = last_modified
    if meta.get("description"):
        metadata["description"] = meta["description"]
    return metadata


def _make_abstract(content: str, description: Optional[str]) -> str:
    """Meta description if present, else the first two sentences (capped)."""
    if description:
        return description
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(content) if s]
    abstract = " ".join(sentences[:2])
    if len(abstract) > MAX_ABSTRACT_CHARS:
        return abstract[:MAX_ABSTRACT_CHARS].rstrip() + "..."
    return abstract


def _categorize(url: str) -> tuple[str, Optional[str]]:
    parts = [p for p in urlparse(url).path.split("/") if p]
    category = parts[0].title() if parts else "General"
    subcategory = parts[1].title() if len(parts) > 1 else None
    return category, subcategory


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(
    raw_body: Union[str, bytes],
    source_url: str,
    *,
    depth: int = 0,
    crawled_at: Optional[datetime] = None,
    encoding: Optional[str] = None,
) -> Page:
    """Extract a structured :class:`Page` from *raw_body*.

    Args:
        raw_body: The fetched document, as text or raw bytes.
        source_url: URL the page is indexed under (the requested URL, not
            any redirect target); gives the page its identity, domain and
            category.
        depth: Traversal depth the page was discovered at.
        crawled_at: Timestamp to record.  Defaults to now (UTC).
        encoding: Charset for ``bytes`` bodies.  Defaults to UTF-8.

    Raises:
        ParsingError: If a ``bytes`` body cannot be decoded as text.
    """
    if isinstance(raw_body, bytes):
        charset = encoding or "utf-8"
        try:
            html = raw_body.decode(charset)
        except (UnicodeDecodeError, LookupError) as exc:
            raise ParsingError(f"cannot decode {source_url} as {charset}: {exc}") from exc
    else:
        html = raw_body

    html = _strip_non_content(html)
    content = _to_text(html)
    meta = _extract_meta(html)
    category, subcategory = _categorize(source_url)

    return Page(
        url=source_url,
        title=_extract_title(html),
        content=content,
        domain=(urlparse(source_url).hostname or ""),
        depth=depth,
        crawled_at=crawled_at or utcnow(),
        sections=_extract_sections(html),
        code_examples=_extract_code_examples(html),
        keywords=_extract_keywords(content),
        abstract=_make_abstract(content, meta.get("description")),
        category=category,
        subcategory=subcategory,
        metadata=_build_metadata(meta),
    )
