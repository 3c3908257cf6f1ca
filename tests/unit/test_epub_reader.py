# ABOUTME: Unit tests for EPUB metadata extraction.
# ABOUTME: Tests reading metadata from valid, minimal, series-tagged and corrupt EPUB files.

from pathlib import Path

import pytest

from shelfwise.errors import ShelfwiseError
from shelfwise.formats.epub import EpubReadError, read_epub_metadata
from shelfwise.metadata.types import MetadataRecord, SeriesEntry


class TestReadEpubMetadata:
    """Tests for EPUB metadata extraction."""

    def test_returns_metadata_record(self, sample_epub: Path) -> None:
        assert isinstance(read_epub_metadata(sample_epub), MetadataRecord)

    def test_extracts_title(self, sample_epub: Path) -> None:
        """Extracts the title from a valid EPUB."""
        meta = read_epub_metadata(sample_epub)
        assert meta.title == "The Name of the Rose"

    def test_extracts_author(self, sample_epub: Path) -> None:
        """Extracts the author from a valid EPUB."""
        meta = read_epub_metadata(sample_epub)
        assert meta.authors == ("Umberto Eco",)
        assert meta.author == "Umberto Eco"

    def test_extracts_language(self, sample_epub: Path) -> None:
        meta = read_epub_metadata(sample_epub)
        assert meta.language == "en"

    def test_extracts_publisher(self, sample_epub: Path) -> None:
        meta = read_epub_metadata(sample_epub)
        assert meta.publisher == "Harcourt"

    def test_extracts_description_uncleaned(self, sample_epub: Path) -> None:
        """The description is passed through; markup is stripped later by cleaning."""
        meta = read_epub_metadata(sample_epub)
        assert "A mystery set in a medieval monastery." in meta.description

    def test_detects_isbn_among_identifiers(self, sample_epub: Path) -> None:
        """The book's own uid is skipped; the hyphenated ISBN is cleaned."""
        meta = read_epub_metadata(sample_epub)
        assert meta.isbn == "9780156001310"

    def test_date_becomes_edition_year(self, sample_epub: Path) -> None:
        meta = read_epub_metadata(sample_epub)
        assert meta.edition_year == "1980"
        assert meta.year == ""

    def test_subjects_become_tags(self, sample_epub: Path) -> None:
        """Subjects are kept raw, in file order."""
        meta = read_epub_metadata(sample_epub)
        assert meta.tags == ("Historical", "sf", "mystery")

    def test_classification_left_empty(self, sample_epub: Path) -> None:
        meta = read_epub_metadata(sample_epub)
        assert meta.category == ""
        assert meta.genre == ""
        assert meta.type == ""


class TestSeriesMetadata:
    """Tests for calibre series metadata."""

    def test_reads_calibre_series(self, series_epub: Path) -> None:
        """The ".0" of a whole series index is dropped."""
        meta = read_epub_metadata(series_epub)
        assert meta.series == (SeriesEntry("Dune Chronicles", "1"),)

    def test_no_series_when_absent(self, sample_epub: Path) -> None:
        meta = read_epub_metadata(sample_epub)
        assert meta.series == ()


class TestMinimalEpub:
    """Tests for EPUBs carrying little metadata."""

    def test_minimal_epub_has_title(self, minimal_epub: Path) -> None:
        """A minimal EPUB with only basic metadata still extracts a title."""
        meta = read_epub_metadata(minimal_epub)
        assert meta.title == "Untitled Book"

    def test_minimal_epub_has_empty_optional_fields(self, minimal_epub: Path) -> None:
        """Fields not present in the file come back empty."""
        meta = read_epub_metadata(minimal_epub)
        assert meta.authors == ()
        assert meta.publisher == ""
        assert meta.description == ""
        assert meta.isbn == ""
        assert meta.edition_year == ""
        assert meta.tags == ()


class TestReadErrors:
    """Tests for unreadable files."""

    def test_corrupt_epub_raises(self, corrupt_epub: Path) -> None:
        """A corrupt file raises EpubReadError."""
        with pytest.raises(EpubReadError, match="Failed to read EPUB"):
            read_epub_metadata(corrupt_epub)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(EpubReadError, match="File not found"):
            read_epub_metadata(tmp_path / "nope.epub")

    def test_read_error_is_a_shelfwise_error(self, corrupt_epub: Path) -> None:
        with pytest.raises(ShelfwiseError):
            read_epub_metadata(corrupt_epub)
