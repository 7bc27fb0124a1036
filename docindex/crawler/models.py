"""Data models for the crawler pipeline.

These are plain dataclasses, not ORM models.  Each persisted type knows how to
turn itself into a JSON-friendly dict and back (``to_dict`` / ``from_dict``);
the snapshot store relies on ``from_dict(to_dict(x)) == x``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _dt_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _dt_from_str(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------

class ImportMode(str, Enum):
    SINGLE_PAGE = "singlePage"
    ENTIRE_SITE = "entireSite"
    SITEMAP = "sitemap"


@dataclass(frozen=True)
class ImportConfig:
    """Parameters for one import run.  Immutable for the duration of the run."""

    seed_url: str
    mode: ImportMode = ImportMode.ENTIRE_SITE
    name: str = ""
    max_depth: int = 3
    max_pages_per_site: int = 500
    delay_between_requests: float = 0.5
    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    respect_robots_txt: bool = True
    incremental: bool = False

    def __post_init__(self) -> None:
        # Accept plain strings / lists from callers; store the canonical types.
        object.__setattr__(self, "mode", ImportMode(self.mode))
        object.__setattr__(self, "include_patterns", tuple(self.include_patterns))
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns))
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.max_pages_per_site < 1:
            raise ValueError("max_pages_per_site must be >= 1")
        if self.delay_between_requests < 0:
            raise ValueError("delay_between_requests must be >= 0")

    @classmethod
    def from_settings(cls, seed_url: str, **overrides: Any) -> "ImportConfig":
        """Build a config whose unset values come from :data:`docindex.config.settings`.

        ``None`` overrides are ignored so CLI/API callers can pass optional
        values straight through.
        """
        from docindex.config import settings  # noqa: PLC0415

        values: dict[str, Any] = {
            "max_depth": settings.max_depth,
            "max_pages_per_site": settings.max_pages_per_site,
            "delay_between_requests": settings.delay_between_requests,
            "respect_robots_txt": settings.respect_robots_txt,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(seed_url=seed_url, **values)

    def allows(self, url: str) -> bool:
        """Apply the include/exclude substring filters to *url*."""
        if any(pattern in url for pattern in self.exclude_patterns):
            return False
        if self.include_patterns:
            return any(pattern in url for pattern in self.include_patterns)
        return True


@dataclass(frozen=True)
class FrontierEntry:
    url: str
    depth: int
    discovered_from: Optional[str] = None


# ---------------------------------------------------------------------------
# Extracted content
# ---------------------------------------------------------------------------

@dataclass
class ContentBlock:
    type: str
    text: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "text": self.text,
            "code": self.code,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentBlock":
        return cls(
            type=data["type"],
            text=data.get("text"),
            code=data.get("code"),
            language=data.get("language"),
        )


@dataclass
class Section:
    heading: str
    level: int
    content_blocks: list[ContentBlock] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "heading": self.heading,
            "level": self.level,
            "content_blocks": [b.to_dict() for b in self.content_blocks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Section":
        return cls(
            heading=data["heading"],
            level=int(data["level"]),
            content_blocks=[ContentBlock.from_dict(b) for b in data.get("content_blocks", [])],
        )


@dataclass
class CodeExample:
    title: str
    code: str
    language: str = "plaintext"

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "code": self.code, "language": self.language}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CodeExample":
        return cls(title=data["title"], code=data["code"], language=data.get("language", "plaintext"))


@dataclass
class Page:
    """A single successfully fetched and parsed URL.

    Identity is the URL.  A re-crawl of the same URL produces a new ``Page``
    that replaces the old one wholesale.
    """

    url: str
    title: str
    content: str
    domain: str
    depth: int
    crawled_at: datetime
    sections: list[Section] = field(default_factory=list)
    code_examples: list[CodeExample] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    abstract: str = ""
    category: str = "General"
    subcategory: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def size_bytes(self) -> int:
        return len(self.content.encode("utf-8"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "content": self.content,
            "domain": self.domain,
            "depth": self.depth,
            "crawled_at": _dt_to_str(self.crawled_at),
            "sections": [s.to_dict() for s in self.sections],
            "code_examples": [c.to_dict() for c in self.code_examples],
            "keywords": list(self.keywords),
            "abstract": self.abstract,
            "category": self.category,
            "subcategory": self.subcategory,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Page":
        return cls(
            url=data["url"],
            title=data["title"],
            content=data["content"],
            domain=data["domain"],
            depth=int(data["depth"]),
            crawled_at=_dt_from_str(data["crawled_at"]),  # type: ignore[arg-type]
            sections=[Section.from_dict(s) for s in data.get("sections", [])],
            code_examples=[CodeExample.from_dict(c) for c in data.get("code_examples", [])],
            keywords=list(data.get("keywords", [])),
            abstract=data.get("abstract", ""),
            category=data.get("category", "General"),
            subcategory=data.get("subcategory"),
            metadata=dict(data.get("metadata", {})),
        )


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass
class CrawlStatistics:
    total_pages: int = 0
    total_size_bytes: int = 0
    last_crawled: Optional[datetime] = None

    @classmethod
    def from_pages(cls, pages: list[Page]) -> "CrawlStatistics":
        return cls(
            total_pages=len(pages),
            total_size_bytes=sum(p.size_bytes for p in pages),
            last_crawled=max((p.crawled_at for p in pages), default=None),
        )

    @property
    def display_size(self) -> str:
        """Human-readable size, e.g. ``"1.2 MB"``."""
        if self.total_size_bytes < 1000:
            return f"{self.total_size_bytes} bytes"
        size = float(self.total_size_bytes)
        for unit in ("KB", "MB"):
            size /= 1000
            if size < 1000:
                return f"{size:.1f} {unit}"
        return f"{size / 1000:.1f} GB"

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_pages": self.total_pages,
            "total_size_bytes": self.total_size_bytes,
            "last_crawled": _dt_to_str(self.last_crawled),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CrawlStatistics":
        return cls(
            total_pages=int(data.get("total_pages", 0)),
            total_size_bytes=int(data.get("total_size_bytes", 0)),
            last_crawled=_dt_from_str(data.get("last_crawled")),
        )


@dataclass
class Snapshot:
    version: int
    generated_at: datetime
    pages: list[Page] = field(default_factory=list)
    statistics: CrawlStatistics = field(default_factory=CrawlStatistics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "generated_at": _dt_to_str(self.generated_at),
            "pages": [p.to_dict() for p in self.pages],
            "statistics": self.statistics.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        return cls(
            version=int(data["version"]),
            generated_at=_dt_from_str(data["generated_at"]),  # type: ignore[arg-type]
            pages=[Page.from_dict(p) for p in data["pages"]],
            statistics=CrawlStatistics.from_dict(data.get("statistics", {})),
        )


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

@dataclass
class SearchResult:
    page: Page
    score: int


@dataclass
class PageSummary:
    url: str
    title: str
    abstract: str
    domain: str
    keywords: list[str]
    score: int

    @classmethod
    def from_result(cls, result: SearchResult) -> "PageSummary":
        page = result.page
        return cls(
            url=page.url,
            title=page.title,
            abstract=page.abstract,
            domain=page.domain,
            keywords=page.keywords[:5],
            score=result.score,
        )


# ---------------------------------------------------------------------------
# Run status / reporting
# ---------------------------------------------------------------------------

class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProgressEvent:
    processed: int
    total: int
    current_url: str

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.processed / self.total * 100


@dataclass
class PageFailure:
    url: str
    reason: str


@dataclass
class RunReport:
    """Outcome of one import run: terminal status plus indexed/attempted counts."""

    mode: ImportMode
    seed_url: str
    status: RunStatus = RunStatus.RUNNING
    pages_indexed: int = 0
    pages_attempted: int = 0
    failures: list[PageFailure] = field(default_factory=list)
    started_at: datetime = field(default_factory=utcnow)
    finished_at: Optional[datetime] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "seed_url": self.seed_url,
            "status": self.status.value,
            "pages_indexed": self.pages_indexed,
            "pages_attempted": self.pages_attempted,
            "failures": [{"url": f.url, "reason": f.reason} for f in self.failures],
            "started_at": _dt_to_str(self.started_at),
            "finished_at": _dt_to_str(self.finished_at),
            "error": self.error,
        }
