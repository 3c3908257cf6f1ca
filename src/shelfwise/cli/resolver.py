# ABOUTME: Interactive and non-interactive conflict resolution for metadata refreshes.
# ABOUTME: Renders diffs and candidate values with Rich and prompts through Click.

from collections.abc import Sequence

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from shelfwise.errors import ConflictUnresolved
from shelfwise.metadata.aliases import AliasConfig
from shelfwise.metadata.fields import get_field
from shelfwise.metadata.merger import DiffRow, reconcile
from shelfwise.metadata.provider import EnrichmentSource
from shelfwise.metadata.refresh import (
    MAX_INVALID_CHOICES,
    ActionPrompt,
    fetch_online,
    refresh_metadata,
)
from shelfwise.metadata.types import UNKNOWN, UNKNOWN_AUTHOR, UNKNOWN_YEAR, MetadataRecord

# Placeholders standing for "no value" on the preferred record.
_SENTINELS = frozenset({UNKNOWN, UNKNOWN_AUTHOR, UNKNOWN_YEAR})


def _shorten(value: str, width: int = 60) -> str:
    value = " ".join(value.split())
    value = value if len(value) <= width else value[: width - 1] + "…"
    return escape(value)


def show_diff(console: Console, rows: list[DiffRow]) -> None:
    """Side-by-side table of local and online values, differences highlighted."""
    table = Table(title="Local vs online")
    table.add_column("Field", style="bold")
    table.add_column("Local")
    table.add_column("Online")
    for row in rows:
        style = "yellow" if row.differs else None
        table.add_row(
            row.field,
            _shorten(row.local) or "-",
            _shorten(row.online) or "-",
            style=style,
        )
    console.print(table)


class PromptResolver:
    """ConflictResolver that asks the user for every field.

    Answers are an option number, or any other text when the field accepts
    free text. An empty answer picks the first option.
    """

    def __init__(self, *, console: Console | None = None) -> None:
        self._console = console or Console()

    def resolve(
        self,
        field: str,
        label: str,
        usage: str,
        options: Sequence[str],
        allow_free_text: bool,
    ) -> str:
        self._console.print(f"\n[bold]{label}[/bold] [dim]({usage})[/dim]")
        for i, option in enumerate(options, start=1):
            self._console.print(f"  [bold]{i}[/bold]. {_shorten(option)}")

        hint = "Choose a number" + (" or type a new value" if allow_free_text else "")
        invalid = 0
        while True:
            choice = click.prompt(hint, type=str, default="1").strip()
            if choice.isdigit() and 0 < int(choice) <= len(options):
                return options[int(choice) - 1]
            if allow_free_text and choice:
                return choice
            invalid += 1
            self._console.print("[yellow]Invalid choice.[/yellow]")
            if invalid > MAX_INVALID_CHOICES:
                raise ConflictUnresolved(field, "too many invalid choices")


class PreferResolver:
    """ConflictResolver that takes a given record's value whenever it offers one."""

    def __init__(self, preferred: MetadataRecord) -> None:
        self._preferred = preferred

    def resolve(
        self,
        field: str,
        label: str,
        usage: str,
        options: Sequence[str],
        allow_free_text: bool,
    ) -> str:
        value = get_field(self._preferred, field)
        if value and value not in _SENTINELS and value in options:
            return value
        if not options:
            raise ConflictUnresolved(field)
        return options[0]


def prompt_action(console: Console) -> ActionPrompt:
    """Build the edit/abort prompt used by refresh."""

    def ask(local: MetadataRecord, online: MetadataRecord, rows: list[DiffRow]) -> str:
        console.print(f"\n[bold]Local:[/bold] {escape(str(local))}")
        console.print(f"[bold]Online:[/bold] {escape(str(online))}")
        show_diff(console, rows)
        return click.prompt("[e]dit or [a]bort", type=str, default="e")

    return ask


def refresh_record(
    record: MetadataRecord,
    source: EnrichmentSource,
    aliases: AliasConfig,
    console: Console,
    *,
    assume_yes: bool = False,
    fields: Sequence[str] | None = None,
) -> MetadataRecord:
    """Reconcile a record with the enrichment source, prompting unless assume_yes.

    With assume_yes the online value wins wherever it has one, and a failed
    lookup is an error instead of a manual review.
    """
    if assume_yes:
        online = fetch_online(record, source, aliases)
        return reconcile(record, online, PreferResolver(online), aliases, fields=fields)
    return refresh_metadata(
        record,
        source,
        PromptResolver(console=console),
        aliases,
        prompt=prompt_action(console),
        fields=fields,
    )
