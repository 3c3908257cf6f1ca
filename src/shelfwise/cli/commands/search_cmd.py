# ABOUTME: The `shelfwise search` command for querying the collection.
# ABOUTME: Supports field:value, +required, -excluded and quoted phrases via the FTS5 index.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from shelfwise.cli.options import library_option, open_library
from shelfwise.errors import ShelfwiseError

console = Console()


@click.command("search")
@click.argument("query", nargs=-1, required=True)
@library_option
def search(query: tuple[str, ...], library_dir: Path | None) -> None:
    """Search the collection, e.g. 'author:herbert +tags:science-fiction -progress:read'."""
    text = " ".join(query)
    try:
        library = open_library(library_dir)
        results = library.search(text)
    except ShelfwiseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    if not results:
        console.print("[yellow]No results found.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Year", width=5)
    table.add_column("Progress")

    for book in results:
        table.add_row(
            str(book.id),
            book.metadata.title,
            book.metadata.author,
            book.metadata.year or "?",
            book.progress,
        )

    console.print(table)
    console.print(f"\n[dim]{len(results)} result(s)[/dim]")
