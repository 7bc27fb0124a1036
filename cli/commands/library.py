"""Library commands for searching and managing the indexed corpus."""

import typer

from cli.context import load_corpus, open_store

library_app = typer.Typer(help="Search and manage the indexed documentation.")


@library_app.command("search")
def library_search(
    query: str = typer.Argument(..., help="Search query."),
    limit: int = typer.Option(10, "--limit", min=1, help="Maximum number of results."),
) -> None:
    """Rank indexed pages by how often they mention the query terms."""
    corpus = load_corpus(open_store())
    if not len(corpus):
        typer.echo("⚠️ Index is empty. Run 'crawl <url>' first.")
        return

    typer.echo(f"🔍 Searching for '{query}'...")
    results = corpus.search(query, limit)
    if not results:
        typer.echo("No results found.")
        return

    for r in results:
        typer.echo(f" - [{r.score}] {r.page.title}  <{r.page.url}>")


@library_app.command("show")
def library_show(
    url: str = typer.Argument(..., help="URL of an indexed page."),
) -> None:
    """Print the extracted structure of one page."""
    page = load_corpus(open_store()).get(url)
    if page is None:
        typer.echo(f"❌ Not indexed: {url}")
        raise typer.Exit(code=1)

    typer.echo(f"{page.title}")
    typer.echo(f"  URL      : {page.url}")
    typer.echo(f"  Category : {page.category}" + (f" / {page.subcategory}" if page.subcategory else ""))
    typer.echo(f"  Depth    : {page.depth}")
    typer.echo(f"  Crawled  : {page.crawled_at.isoformat()}")
    typer.echo(f"  Keywords : {', '.join(page.keywords[:10])}")
    if page.abstract:
        typer.echo("")
        typer.echo(page.abstract)
    if page.sections:
        typer.echo("")
        typer.echo("Sections:")
        for s in page.sections:
            typer.echo(f"{'  ' * (s.level - 1)}- {s.heading}")
    if page.code_examples:
        typer.echo("")
        typer.echo(f"Code examples: {len(page.code_examples)}")


@library_app.command("stats")
def library_stats() -> None:
    """Show corpus statistics."""
    stats = load_corpus(open_store()).statistics()
    typer.echo(f"Pages        : {stats.total_pages}")
    typer.echo(f"Size         : {stats.display_size}")
    last = stats.last_crawled.isoformat() if stats.last_crawled else "never"
    typer.echo(f"Last crawled : {last}")


@library_app.command("remove")
def library_remove(
    url: str = typer.Argument(..., help="URL of an indexed page."),
) -> None:
    """Remove a page from the index."""
    store = open_store()
    corpus = load_corpus(store)
    if not corpus.remove(url):
        typer.echo(f"❌ Not indexed: {url}")
        raise typer.Exit(code=1)
    store.save(corpus.pages())
    typer.echo(f"✅ Removed {url}")
