# ABOUTME: The `shelfwise info` command for displaying every field of a book.
# ABOUTME: Shows metadata, user fields and file paths for a single book by ID.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from shelfwise.cli.options import library_option, open_library
from shelfwise.db.collection import USER_FIELDS, get_book_field
from shelfwise.errors import ShelfwiseError
from shelfwise.metadata.fields import FIELDS

console = Console()


@click.command("info")
@click.argument("book_id", type=int)
@library_option
def info(book_id: int, library_dir: Path | None) -> None:
    """Show detailed metadata for a book by ID."""
    try:
        library = open_library(library_dir)
    except ShelfwiseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    book = library.get(book_id)
    if book is None:
        console.print(f"[red]Book {book_id} not found.[/red]")
        raise SystemExit(1)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(book.id))
    for spec in FIELDS.values():
        value = spec.get(book.metadata)
        if value:
            table.add_row(spec.label, escape(value))
    for name in USER_FIELDS:
        value = get_book_field(book, name)
        if value:
            table.add_row(name.replace("_", " ").capitalize(), escape(value))
    for path in book.paths:
        table.add_row("File", escape(path))

    console.print(table)
