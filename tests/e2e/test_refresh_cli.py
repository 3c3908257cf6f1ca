# ABOUTME: End-to-end tests for the `shelfwise refresh` CLI command.
# ABOUTME: The Open Library source is replaced by a static one; prompts are answered via stdin.

import shutil
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner, Result

from shelfwise.cli import cli
from shelfwise.errors import ExternalServiceError
from shelfwise.metadata.provider import SearchResults
from shelfwise.metadata.types import MetadataRecord

SOURCE = "shelfwise.cli.commands.refresh_cmd.OpenLibrarySource"

ONLINE = MetadataRecord(
    title="The Name of the Rose",
    authors=("Umberto Eco",),
    year="1980",
    publisher="Harvest Books",
    num_pages="536",
)


class StaticSource:
    """Stands in for Open Library; returns a fixed record or finds nothing."""

    def __init__(self, record: MetadataRecord | None) -> None:
        self._record = record

    @property
    def name(self) -> str:
        return "static"

    def search(self, author: str, title: str) -> SearchResults:
        return SearchResults()

    def find_id(self, record: MetadataRecord) -> str:
        if self._record is None:
            raise ExternalServiceError("no match")
        return "/works/OL456W"

    def get_record(self, source_id: str, isbn: str | None = None) -> MetadataRecord:
        assert self._record is not None
        return self._record


@pytest.fixture
def library_with_rose(sample_epub: Path, tmp_path: Path) -> Path:
    scan_dir = tmp_path / "scan"
    scan_dir.mkdir()
    shutil.copy(sample_epub, scan_dir / "rose.epub")
    library_dir = tmp_path / "library"
    result = CliRunner().invoke(cli, ["import", str(scan_dir), "--library", str(library_dir)])
    assert result.exit_code == 0
    return library_dir


def _refresh(
    library_dir: Path, record: MetadataRecord | None, *args: str, input: str = ""
) -> Result:
    with patch(SOURCE, return_value=StaticSource(record)):
        return CliRunner().invoke(
            cli, ["refresh", *args, "--library", str(library_dir)], input=input
        )


def _info(library_dir: Path) -> str:
    return CliRunner().invoke(cli, ["info", "1", "--library", str(library_dir)]).output


class TestRefreshCommand:
    """E2E tests for shelfwise refresh."""

    def test_yes_takes_online_values(self, library_with_rose: Path) -> None:
        result = _refresh(library_with_rose, ONLINE, "1", "--yes")
        assert result.exit_code == 0
        assert "Refreshed" in result.output

        info = _info(library_with_rose)
        assert "Harvest Books" in info
        assert "536" in info
        # Fields the online record lacks keep their local value.
        assert "9780156001310" in info

    def test_refresh_is_searchable(self, library_with_rose: Path) -> None:
        _refresh(library_with_rose, ONLINE, "1", "--yes")
        result = CliRunner().invoke(
            cli, ["search", "publisher:harvest", "--library", str(library_with_rose)]
        )
        assert "1 result(s)" in result.output

    def test_interactive_single_field(self, library_with_rose: Path) -> None:
        result = _refresh(
            library_with_rose, ONLINE, "1", "--field", "publisher", input="e\n2\n"
        )
        assert result.exit_code == 0
        assert "Harvest Books" in _info(library_with_rose)

    def test_interactive_abort(self, library_with_rose: Path) -> None:
        result = _refresh(library_with_rose, ONLINE, "1", input="a\n")
        assert result.exit_code == 0
        assert "Refresh aborted, nothing changed." in result.output
        assert "Harcourt" in _info(library_with_rose)

    def test_yes_with_failed_lookup_exits_nonzero(self, library_with_rose: Path) -> None:
        result = _refresh(library_with_rose, None, "1", "--yes")
        assert result.exit_code == 1
        assert "no match" in result.output
        assert "Harcourt" in _info(library_with_rose)

    def test_unknown_book(self, library_with_rose: Path) -> None:
        result = _refresh(library_with_rose, ONLINE, "99", "--yes")
        assert result.exit_code == 1
        assert "Book 99 not found." in result.output
