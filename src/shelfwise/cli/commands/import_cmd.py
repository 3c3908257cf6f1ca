# ABOUTME: The `shelfwise import` command for adding EPUB files to the collection.
# ABOUTME: Walks a directory, cleans embedded metadata, optionally enriches it online, then saves.

from pathlib import Path

import click
from rich.console import Console

from shelfwise.cli.options import library_option, open_library
from shelfwise.core.importer import EnrichFn, import_books
from shelfwise.errors import ShelfwiseError
from shelfwise.metadata.aliases import AliasConfig
from shelfwise.metadata.types import MetadataRecord

console = Console()


def _find_epubs(directory: Path) -> list[Path]:
    """Recursively find all .epub files in a directory."""
    return sorted(directory.rglob("*.epub"))


def _build_enrich_fn(assume_yes: bool, aliases: AliasConfig) -> EnrichFn:
    """Build a callback that reconciles each imported record with Open Library.

    Imports enrichment dependencies lazily so the import command doesn't
    pay for them when --online is not used.
    """
    from shelfwise.cli.resolver import refresh_record
    from shelfwise.metadata.http import ShelfwiseHttpClient
    from shelfwise.metadata.openlibrary import OpenLibrarySource

    source = OpenLibrarySource(ShelfwiseHttpClient())

    def enrich_fn(metadata: MetadataRecord, epub_path: Path) -> MetadataRecord:
        console.print(f"\n[bold]{epub_path.name}[/bold]")
        try:
            return refresh_record(metadata, source, aliases, console, assume_yes=assume_yes)
        except ShelfwiseError as exc:
            console.print(f"  [yellow]Keeping embedded metadata:[/yellow] {exc}")
            return metadata

    return enrich_fn


@click.command("import")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@library_option
@click.option(
    "--online/--offline",
    "online",
    default=False,
    help="Reconcile each new book with Open Library before adding it.",
)
@click.option(
    "-y", "--yes",
    "assume_yes",
    is_flag=True,
    default=False,
    help="Accept online values without prompting.",
)
@click.option("--retail", is_flag=True, default=False, help="Mark imported files as retail.")
def import_command(
    directory: Path,
    library_dir: Path | None,
    online: bool,
    assume_yes: bool,
    retail: bool,
) -> None:
    """Scan a directory for EPUB files and add them to the collection."""
    epub_files = _find_epubs(directory)

    if not epub_files:
        console.print(f"[yellow]No EPUB files found in {directory}[/yellow]")
        return

    console.print(f"Found [bold]{len(epub_files)}[/bold] EPUB file(s)\n")

    try:
        library = open_library(library_dir)
        enrich_fn = _build_enrich_fn(assume_yes, library.config.aliases) if online else None
        result = import_books(epub_files, library, enrich_fn=enrich_fn, is_retail=retail)
        library.save()
    except ShelfwiseError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise SystemExit(1) from exc

    # Summary
    parts = []
    if result.added:
        parts.append(f"[green]{result.added} added[/green]")
    if result.skipped:
        parts.append(f"[yellow]{result.skipped} skipped[/yellow]")
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")

    console.print(", ".join(parts))

    if result.error_details:
        console.print(
            f"\n[yellow]{result.errors} file(s) could not be read:[/yellow]"
        )
        for path, msg in result.error_details:
            console.print(f"  [dim]{path.name}:[/dim] {msg}")
