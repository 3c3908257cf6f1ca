# ABOUTME: Shared Click options and helpers for shelfwise CLI commands.
# ABOUTME: Provides the --library option and opens the library it points to.

from pathlib import Path

import click

from shelfwise.config import DEFAULT_LIBRARY_DIR, load_config
from shelfwise.core.library import Library

library_option = click.option(
    "--library",
    "library_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help=f"Library directory (default: {DEFAULT_LIBRARY_DIR})",
)


def open_library(library_dir: Path | None) -> Library:
    """Load config.toml and the collection from the library directory.

    Raises:
        ShelfwiseError: Unreadable config or snapshot.
    """
    return Library.open(load_config(library_dir=library_dir))
