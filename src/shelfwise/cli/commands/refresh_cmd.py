# ABOUTME: The `shelfwise refresh` command for reconciling a book with Open Library.
# ABOUTME: Shows the local/online diff and asks field by field unless --yes is given.

from pathlib import Path

import click
from rich.console import Console

from shelfwise.cli.options import library_option, open_library
from shelfwise.cli.resolver import refresh_record
from shelfwise.errors import MergeAborted, ShelfwiseError
from shelfwise.metadata.http import ShelfwiseHttpClient
from shelfwise.metadata.openlibrary import OpenLibrarySource

console = Console()


@click.command("refresh")
@click.argument("book_id", type=int)
@library_option
@click.option(
    "-f", "--field",
    "fields",
    multiple=True,
    help="Only reconcile this field (repeatable).",
)
@click.option(
    "-y", "--yes",
    "assume_yes",
    is_flag=True,
    default=False,
    help="Accept online values without prompting.",
)
def refresh(
    book_id: int,
    library_dir: Path | None,
    fields: tuple[str, ...],
    assume_yes: bool,
) -> None:
    """Fetch online metadata for a book and merge it into the collection."""
    try:
        library = open_library(library_dir)
        book = library.get(book_id)
        if book is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)

        source = OpenLibrarySource(ShelfwiseHttpClient())
        merged = refresh_record(
            book.metadata,
            source,
            library.config.aliases,
            console,
            assume_yes=assume_yes,
            fields=fields or None,
        )
        library.edit_metadata(book_id, merged)
        library.save()
    except MergeAborted:
        console.print("[yellow]Refresh aborted, nothing changed.[/yellow]")
        return
    except ShelfwiseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    console.print(f"[green]Refreshed[/green] {merged}")
