# ABOUTME: The `shelfwise reindex` command for rebuilding the search index.
# ABOUTME: Drops the index file and re-indexes every book in the collection.

from pathlib import Path

import click
from rich.console import Console

from shelfwise.cli.options import library_option, open_library
from shelfwise.errors import ShelfwiseError

console = Console()


@click.command("reindex")
@library_option
def reindex(library_dir: Path | None) -> None:
    """Rebuild the search index from the collection."""
    try:
        library = open_library(library_dir)
        count = library.rebuild()
    except ShelfwiseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    console.print(f"Indexed [bold]{count}[/bold] book(s)")
