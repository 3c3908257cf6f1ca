# ABOUTME: The `shelfwise backup` command for archiving the collection snapshot.
# ABOUTME: Writes a .tar.gz holding library.json.

from pathlib import Path

import click
from rich.console import Console

from shelfwise.cli.options import library_option, open_library
from shelfwise.errors import ShelfwiseError

console = Console()


@click.command("backup")
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path), required=False)
@library_option
def backup(destination: Path | None, library_dir: Path | None) -> None:
    """Archive the snapshot to DESTINATION (default: a timestamped file in the library)."""
    try:
        library = open_library(library_dir)
        written = library.backup(destination)
    except ShelfwiseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    console.print(f"[green]Backup written:[/green] {written}")
