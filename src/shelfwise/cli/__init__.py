# ABOUTME: CLI package for shelfwise, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from shelfwise.cli.commands import (
    backup_cmd,
    edit_cmd,
    import_cmd,
    info_cmd,
    refresh_cmd,
    reindex_cmd,
    search_cmd,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


@click.group()
@click.version_option(package_name="shelfwise")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """shelfwise - curate the metadata of a personal ebook collection."""
    _configure_logging(verbose)


cli.add_command(import_cmd.import_command)
cli.add_command(search_cmd.search)
cli.add_command(info_cmd.info)
cli.add_command(edit_cmd.edit)
cli.add_command(refresh_cmd.refresh)
cli.add_command(reindex_cmd.reindex)
cli.add_command(backup_cmd.backup)
