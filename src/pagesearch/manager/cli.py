"""
pagesearch Manager CLI - build the index, query it, serve it.
"""
import asyncio
import logging
import os
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from pagesearch.config import get_settings
from pagesearch.errors import BackendUnavailable, InvalidQuery

app = typer.Typer(
    name="pagesearch",
    help="pagesearch - Paginated Search Manager CLI",
    add_completion=False
)
console = Console()


@app.callback()
def configure(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output")):
    """Configure logging for every command."""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@app.command()
def build_index(
    corpus: str = typer.Argument(..., help="JSONL corpus, one document per line"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Index file to write"),
    stopwords: Optional[str] = typer.Option(None, "--stopwords", help="Stop-word file, one word per line"),
):
    """Build the NumPy BM25 matrix index from a corpus."""
    if not os.path.exists(corpus):
        console.print(f"[red]Corpus not found:[/red] {corpus}")
        raise typer.Exit(1)

    settings = get_settings()
    console.print("\n[bold cyan]Building NumPy BM25 Index[/bold cyan]\n")

    from pagesearch.scripts.build_index import CorpusError, build_index as build_bm25_index
    try:
        stats = build_bm25_index(
            corpus,
            output_path=output or settings.index_path,
            stopwords_path=stopwords or settings.stopwords_path,
        )
    except (CorpusError, OSError) as e:
        console.print(f"[red]Error building index: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Index Build", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Documents", f"{stats['documents']:,}")
    table.add_row("Vocabulary Size", f"{stats['terms']:,}")
    table.add_row("Index Entries", f"{stats['entries']:,}")
    table.add_row("Avg Doc Length", f"{stats['avgdl']:.1f}")
    table.add_row("Size (MB)", f"{stats['size_mb']:.2f}")
    console.print(table)
    console.print(f"\n[bold green]OK Saved to {stats['path']}[/bold green]")


@app.command()
def stats():
    """Show index statistics."""
    settings = get_settings()
    if not os.path.exists(settings.index_path):
        console.print("[yellow]Index not found. Run 'pagesearch build-index <corpus>' first.[/yellow]")
        raise typer.Exit(1)

    from pagesearch.ranker.bm25_numpy import NumPyBM25Engine
    engine = NumPyBM25Engine(index_path=settings.index_path)
    engine.load()

    table = Table(title="pagesearch Statistics", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Index", settings.index_path)
    table.add_row("Documents", str(engine.num_docs))
    table.add_row("Vocabulary Size", str(len(engine.vocab)))
    table.add_row("Index Entries", str(engine.term_matrix.nnz))
    table.add_row("Avg Doc Length", f"{engine.avgdl:.1f}")
    console.print(table)


async def _run_search(query, max_results, page_size, page):
    from pagesearch.service import SearchService
    service = SearchService.from_settings(get_settings())
    try:
        return await service.search(query, max_results=max_results, page_size=page_size, page=page)
    finally:
        await service.aclose()


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    max_results: Optional[int] = typer.Option(None, "--max", "-m", help="Maximum results to fetch"),
    page_size: Optional[int] = typer.Option(None, "--page-size", "-n", help="Results per page"),
    page: int = typer.Option(1, "--page", "-p", help="Page to show"),
):
    """Search through the full pipeline (normalize, fetch, page)."""
    console.print(f"\n[cyan]Searching:[/cyan] {query}\n")

    try:
        response = asyncio.run(_run_search(query, max_results, page_size, page))
    except InvalidQuery as e:
        console.print(f"[red]Invalid query: {e}[/red]")
        raise typer.Exit(2)
    except BackendUnavailable as e:
        console.print(f"[red]Search backend unavailable: {e}[/red]")
        raise typer.Exit(1)

    if not response.results:
        console.print("[yellow]No results found.[/yellow]")
        return

    offset = (response.page - 1) * response.page_size
    table = Table(
        title=f"Page {response.page} ({len(response.results)} of {response.total})",
        box=box.ROUNDED,
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="bold white", max_width=50)
    table.add_column("URL", style="blue")

    for i, doc in enumerate(response.results, start=offset + 1):
        table.add_row(
            str(i),
            (doc.title[:47] + "...") if len(doc.title) > 50 else doc.title,
            doc.url
        )

    console.print(table)
    if response.pages:
        console.print(f"[dim]Pages: {' '.join(str(p) for p in response.pages)}[/dim]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Port"),
):
    """Run the search API."""
    import uvicorn
    settings = get_settings()
    uvicorn.run("pagesearch.api.main:app", host=host or settings.host, port=port or settings.port)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
