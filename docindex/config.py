"""Centralised settings for the docindex crawler.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("DOCINDEX_WORKSPACE", Path.home() / ".docindex")
        )
    )

    @property
    def snapshot_path(self) -> Path:
        """Absolute path to the persisted corpus snapshot."""
        return self.workspace_dir / "crawl_index.json"

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "CRAWLER_USER_AGENT",
            "Mozilla/5.0 (compatible; DocIndex-Bot/1.0; documentation crawler)",
        )
    )

    # ------------------------------------------------------------------
    # Crawl defaults (used when an import does not set them explicitly)
    # ------------------------------------------------------------------
    max_depth: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_DEPTH", "3"))
    )
    max_pages_per_site: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_PAGES", "500"))
    )
    delay_between_requests: float = field(
        default_factory=lambda: float(os.environ.get("CRAWL_DELAY", "0.5"))
    )
    respect_robots_txt: bool = field(
        default_factory=lambda: _env_bool("CRAWL_RESPECT_ROBOTS", True)
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> None:
    """Install a basic stderr handler at ``level`` (defaults to ``settings.log_level``)."""
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


# Module-level singleton; import this everywhere:
#   from docindex.config import settings
settings = Settings()
