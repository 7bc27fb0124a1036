"""docindex CLI: entry-point for crawling and searching documentation.

Usage:
    python cli/main.py --help

Commands:
    crawl       → import a site (single page, whole site, or sitemap)
    library     → search, inspect and prune the indexed corpus
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from docindex.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional

import typer

from docindex.config import configure_logging, settings
from docindex.crawler.errors import CrawlError, ImportCancelled
from docindex.crawler.fetcher import HttpxFetcher
from docindex.crawler.models import ImportConfig, ImportMode, ProgressEvent, RunReport
from docindex.crawler.orchestrator import ImportOrchestrator

from cli.commands.library import library_app
from cli.context import load_corpus, open_store

app = typer.Typer(
    name="docindex",
    help="Documentation crawler and keyword index.",
    no_args_is_help=True,
)
app.add_typer(library_app, name="library")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _echo_progress(event: ProgressEvent) -> None:
    if event.current_url:
        typer.echo(f"[crawl] {event.processed}/{event.total}  {event.current_url}")


def _echo_report(report: RunReport) -> None:
    typer.echo(
        f"[crawl] {report.status.value}: {report.pages_indexed} of "
        f"{report.pages_attempted} page(s) indexed"
    )
    for failure in report.failures:
        typer.echo(f"  ⚠️ {failure.reason}")


def _wait(future: Future, cancel: threading.Event) -> RunReport:
    """Wait for the import; Ctrl-C turns into a cooperative cancel."""
    try:
        return future.result()
    except KeyboardInterrupt:
        typer.echo("[crawl] Interrupted, finishing the current page and stopping …")
        cancel.set()
        return future.result()


# ---------------------------------------------------------------------------
# Crawl command
# ---------------------------------------------------------------------------

@app.command("crawl")
def crawl(
    url: str = typer.Argument(..., help="Seed URL."),
    mode: ImportMode = typer.Option(ImportMode.ENTIRE_SITE, "--mode", help="singlePage | entireSite | sitemap."),
    name: str = typer.Option("", help="Label for this import."),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=0, help="Link depth limit."),
    max_pages: Optional[int] = typer.Option(None, "--max-pages", min=1, help="Page limit."),
    delay: Optional[float] = typer.Option(None, "--delay", min=0.0, help="Seconds to wait after each fetch."),
    include: Optional[List[str]] = typer.Option(None, "--include", help="Only follow URLs containing this (repeatable)."),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", help="Skip URLs containing this (repeatable)."),
    incremental: bool = typer.Option(False, "--incremental", help="Skip pages already in the index."),
) -> None:
    """Crawl a documentation site into the local index."""
    configure_logging()
    config = ImportConfig.from_settings(
        url,
        mode=mode,
        name=name,
        max_depth=max_depth,
        max_pages_per_site=max_pages,
        delay_between_requests=delay,
        include_patterns=tuple(include or ()),
        exclude_patterns=tuple(exclude or ()),
        incremental=incremental,
    )

    store = open_store()
    corpus = load_corpus(store)
    orchestrator = ImportOrchestrator(HttpxFetcher(), corpus, store)

    typer.echo(f"[crawl] Importing {url!r} (mode={config.mode.value}) …")
    cancel = threading.Event()
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="import") as pool:
        future = pool.submit(
            orchestrator.start, config, cancel_event=cancel, on_progress=_echo_progress
        )
        try:
            report = _wait(future, cancel)
        except ImportCancelled:
            _echo_report(orchestrator.last_report)  # type: ignore[arg-type]
            typer.echo(f"[crawl] Partial index saved to {settings.snapshot_path}")
            raise typer.Exit(code=130)
        except CrawlError as exc:
            typer.echo(f"❌ Error: {exc}")
            raise typer.Exit(code=1)

    _echo_report(report)
    typer.echo(f"[crawl] Index saved to {settings.snapshot_path} ({len(corpus)} page(s) total)")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
