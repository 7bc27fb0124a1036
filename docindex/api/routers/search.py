"""Search endpoint: term-frequency keyword ranking.

Routes
------
GET /search?q=<query>&limit=10
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from docindex.crawler.models import PageSummary

router = APIRouter()


class PageSummaryResponse(BaseModel):
    url: str
    title: str
    abstract: str
    domain: str
    keywords: list[str]
    score: int


@router.get("", response_model=list[PageSummaryResponse])
def search(
    request: Request,
    q: str = "",
    limit: int = Query(10, ge=0, le=500),
) -> list[dict[str, Any]]:
    """Search the corpus.

    Args:
        q: Free-text query; tokens shorter than three characters are ignored.
        limit: Maximum number of results to return.
    """
    results = request.app.state.corpus.search(q, limit)
    return [asdict(PageSummary.from_result(r)) for r in results]
