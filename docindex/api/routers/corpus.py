"""Corpus endpoints: single-page lookup/removal and statistics.

Routes
------
GET    /pages?url=<url>    Full extracted page
DELETE /pages?url=<url>    Remove a page and persist the snapshot
GET    /stats              Corpus statistics
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

router = APIRouter()


class StatsResponse(BaseModel):
    total_pages: int
    total_size_bytes: int
    display_size: str
    last_crawled: Optional[str]


@router.get("/pages")
def get_page(url: str, request: Request) -> dict[str, Any]:
    page = request.app.state.corpus.get(url)
    if page is None:
        raise HTTPException(status_code=404, detail=f"Page not indexed: {url}")
    return page.to_dict()


@router.delete("/pages", status_code=204)
def delete_page(url: str, request: Request) -> Response:
    corpus = request.app.state.corpus
    if request.app.state.orchestrator.is_running:
        raise HTTPException(status_code=409, detail="Cannot remove pages while an import is running.")
    if not corpus.remove(url):
        raise HTTPException(status_code=404, detail=f"Page not indexed: {url}")
    request.app.state.store.save(corpus.pages())
    return Response(status_code=204)


@router.get("/stats", response_model=StatsResponse)
def stats(request: Request) -> dict[str, Any]:
    statistics = request.app.state.corpus.statistics()
    data = statistics.to_dict()
    data["display_size"] = statistics.display_size
    return data
