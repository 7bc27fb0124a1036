"""Import control endpoints.

Routes
------
POST /imports          Body: ImportRequest      → start an import (202)
GET  /imports/status                            → status, progress, last report
POST /imports/cancel                            → signal the running import

Imports run on the app's single-worker thread pool; the POST returns as soon
as the run is queued.  Clients poll ``/imports/status`` for progress.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from docindex.crawler.errors import CrawlError
from docindex.crawler.links import normalize_url
from docindex.crawler.models import ImportConfig, ImportMode
from docindex.crawler.orchestrator import ImportOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

_submit_lock = threading.Lock()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ImportRequest(BaseModel):
    seed_url: str
    mode: ImportMode = ImportMode.ENTIRE_SITE
    name: str = ""
    max_depth: Optional[int] = Field(None, ge=0)
    max_pages_per_site: Optional[int] = Field(None, ge=1)
    delay_between_requests: Optional[float] = Field(None, ge=0)
    include_patterns: list[str] = Field(default_factory=list)
    exclude_patterns: list[str] = Field(default_factory=list)
    respect_robots_txt: Optional[bool] = None
    incremental: bool = False


class ImportAccepted(BaseModel):
    seed_url: str
    mode: ImportMode
    status: str


class ProgressResponse(BaseModel):
    processed: int
    total: int
    current_url: str
    percentage: float


class StatusResponse(BaseModel):
    status: str
    running: bool
    progress: Optional[ProgressResponse] = None
    report: Optional[dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run_import(orchestrator: ImportOrchestrator, config: ImportConfig) -> None:
    """Executor entry point; the outcome is kept on ``orchestrator.last_report``."""
    try:
        orchestrator.start(config)
    except CrawlError as exc:
        logger.info("Import of %s ended: %s", config.seed_url, exc)
    except Exception:
        logger.exception("Import of %s failed unexpectedly", config.seed_url)
        raise


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=ImportAccepted, status_code=202)
def start_import(body: ImportRequest, request: Request) -> dict[str, Any]:
    """Validate the request and queue an import run."""
    orchestrator: ImportOrchestrator = request.app.state.orchestrator
    if normalize_url(body.seed_url) is None:
        raise HTTPException(status_code=422, detail=f"Invalid seed URL: {body.seed_url!r}")

    config = ImportConfig.from_settings(
        body.seed_url,
        mode=body.mode,
        name=body.name,
        max_depth=body.max_depth,
        max_pages_per_site=body.max_pages_per_site,
        delay_between_requests=body.delay_between_requests,
        include_patterns=tuple(body.include_patterns),
        exclude_patterns=tuple(body.exclude_patterns),
        respect_robots_txt=body.respect_robots_txt,
        incremental=body.incremental,
    )
    with _submit_lock:
        pending = request.app.state.import_future
        # A queued run counts as active before the worker enters start().
        if orchestrator.is_running or (pending is not None and not pending.done()):
            raise HTTPException(status_code=409, detail="An import is already running.")
        request.app.state.import_future = request.app.state.executor.submit(
            _run_import, orchestrator, config
        )
    return {"seed_url": config.seed_url, "mode": config.mode, "status": "accepted"}


@router.get("/status", response_model=StatusResponse)
def import_status(request: Request) -> dict[str, Any]:
    orchestrator: ImportOrchestrator = request.app.state.orchestrator
    progress = orchestrator.progress
    report = orchestrator.last_report
    return {
        "status": orchestrator.status.value,
        "running": orchestrator.is_running,
        "progress": (
            {
                "processed": progress.processed,
                "total": progress.total,
                "current_url": progress.current_url,
                "percentage": progress.percentage,
            }
            if progress is not None
            else None
        ),
        "report": report.to_dict() if report is not None else None,
    }


@router.post("/cancel")
def cancel_import(request: Request) -> dict[str, bool]:
    """Ask the running import to stop before its next fetch."""
    orchestrator: ImportOrchestrator = request.app.state.orchestrator
    return {"cancelled": orchestrator.cancel()}
