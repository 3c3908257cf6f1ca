# ABOUTME: The `shelfwise edit` command for setting one field of a book.
# ABOUTME: Values go through the same validating setters as merges; the index follows on save.

from pathlib import Path

import click
from rich.console import Console

from shelfwise.cli.options import library_option, open_library
from shelfwise.db.collection import get_book_field
from shelfwise.errors import ShelfwiseError

console = Console()


@click.command("edit")
@click.argument("book_id", type=int)
@click.argument("field")
@click.argument("value")
@library_option
def edit(book_id: int, field: str, value: str, library_dir: Path | None) -> None:
    """Set FIELD of a book to VALUE, e.g. `shelfwise edit 3 progress read`."""
    try:
        library = open_library(library_dir)
        if library.get(book_id) is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)
        book = library.edit(book_id, field, value)
        library.save()
    except ShelfwiseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    console.print(f"[green]{book.id}:[/green] {field} = {get_book_field(book, field)}")
