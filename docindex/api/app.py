"""FastAPI application factory.

Lifespan
--------
On startup the app loads the last snapshot (if any) into the shared
in-memory corpus.  Imports run on a single-worker thread pool so only one
crawl executes at a time and requests stay responsive while it runs.  On
shutdown the pool is drained.

State
-----
``app.state.corpus``        the shared :class:`~docindex.index.corpus.Corpus`
``app.state.store``         the :class:`~docindex.store.snapshot.SnapshotStore`
``app.state.orchestrator``  the :class:`~docindex.crawler.orchestrator.ImportOrchestrator`
``app.state.executor``      thread pool running imports
``app.state.import_future`` future of the most recently submitted import

Routers
-------
    /imports    start, poll and cancel imports
    /search     ranked keyword search
    /pages      fetch or remove a single indexed page
    /stats      corpus statistics
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docindex.config import settings
from docindex.crawler.fetcher import Fetcher, HttpxFetcher
from docindex.crawler.orchestrator import ImportOrchestrator
from docindex.index.corpus import Corpus
from docindex.store.snapshot import SnapshotStore

from docindex.api.routers import corpus as corpus_router
from docindex.api.routers import imports as imports_router
from docindex.api.routers import search as search_router

logger = logging.getLogger(__name__)


def create_app(
    fetcher: Optional[Fetcher] = None,
    store: Optional[SnapshotStore] = None,
) -> FastAPI:
    """Return a fully-configured FastAPI application instance.

    Args:
        fetcher: Transport for imports.  Defaults to :class:`HttpxFetcher`.
        store: Snapshot location.  Defaults to ``settings.snapshot_path``.
    """
    store = store or SnapshotStore(settings.snapshot_path)
    corpus = Corpus()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Seed the corpus from disk on startup; drain imports on shutdown."""
        snapshot = store.load()
        if snapshot is not None:
            corpus.replace_all(snapshot.pages)
            logger.info("Loaded %d page(s) from %s", len(snapshot.pages), store.path)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="import")
        app.state.executor = executor
        try:
            yield
        finally:
            app.state.orchestrator.cancel()
            executor.shutdown(wait=True)

    app = FastAPI(
        title="docindex API",
        description=(
            "Crawl documentation sites into a local corpus and search it. "
            "Exposes import control (single page, whole site, sitemap), "
            "term-frequency keyword search, and page lookup."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.corpus = corpus
    app.state.store = store
    app.state.orchestrator = ImportOrchestrator(fetcher or HttpxFetcher(), corpus, store)
    app.state.import_future = None

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(imports_router.router, prefix="/imports", tags=["imports"])
    app.include_router(search_router.router, prefix="/search", tags=["search"])
    app.include_router(corpus_router.router, tags=["corpus"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn docindex.api.app:app --reload
app = create_app()
