# ABOUTME: Unit tests for the field registry: lookup, display getters and validating setters.
# ABOUTME: Setters must reject bad values without touching the record.

import logging

import pytest

from shelfwise.errors import FieldNotFoundError, ValidationError
from shelfwise.metadata.aliases import AliasConfig
from shelfwise.metadata.fields import (
    EDITABLE_FIELDS,
    get_field,
    get_spec,
    parse_series,
    set_field,
)
from shelfwise.metadata.types import MetadataRecord, SeriesEntry


class TestLookup:
    """Tests for field lookup."""

    def test_case_insensitive(self) -> None:
        assert get_spec("Title").name == "title"

    def test_unknown_field(self) -> None:
        with pytest.raises(FieldNotFoundError, match="Invalid field: colour"):
            get_spec("colour")

    def test_enrichment_fields_not_editable(self) -> None:
        assert "num_pages" not in EDITABLE_FIELDS
        assert "title" in EDITABLE_FIELDS


class TestSetters:
    """Tests for set_field validation."""

    def test_authors_comma_list(self) -> None:
        record = set_field(MetadataRecord(), "author", "Terry Pratchett, Neil Gaiman ,")
        assert record.authors == ("Terry Pratchett", "Neil Gaiman")
        assert get_field(record, "author") == "Terry Pratchett, Neil Gaiman"

    def test_unknown_author_clears_authors(self) -> None:
        """The no-author placeholder never becomes an author named "Unknown"."""
        record = MetadataRecord(authors=("Frank Herbert",))
        assert set_field(record, "author", "Unknown").authors == ()
        assert set_field(record, "author", "unknown").authors == ()

    def test_authors_display_empty_when_missing(self) -> None:
        assert get_field(MetadataRecord(), "author") == ""

    def test_year_accepts_integer_and_sentinel(self) -> None:
        assert set_field(MetadataRecord(), "year", " 1965 ").year == "1965"
        assert set_field(MetadataRecord(), "year", "XXXX").year == "XXXX"

    def test_year_rejects_text(self) -> None:
        record = MetadataRecord(year="1965")
        with pytest.raises(ValidationError, match="year"):
            set_field(record, "year", "sixties")
        assert record.year == "1965"

    def test_isbn_is_cleaned(self) -> None:
        record = set_field(MetadataRecord(), "isbn", "978-0-441-01359-3")
        assert record.isbn == "9780441013593"

    def test_isbn_cleared_by_unknown(self) -> None:
        record = set_field(MetadataRecord(isbn="9780441013593"), "isbn", "unknown")
        assert record.isbn == ""

    def test_isbn_rejected(self) -> None:
        with pytest.raises(ValidationError, match="isbn"):
            set_field(MetadataRecord(), "isbn", "0441013597")

    def test_category_and_type_are_canonical(self) -> None:
        record = set_field(MetadataRecord(), "category", "Non-Fiction")
        record = set_field(record, "type", "short story")
        assert (record.category, record.type) == ("nonfiction", "short-stories")

    def test_category_rejects_free_text(self) -> None:
        with pytest.raises(ValidationError, match="category"):
            set_field(MetadataRecord(), "category", "cookbook")

    def test_tags_are_lowered_and_cleaned(self) -> None:
        record = set_field(MetadataRecord(), "tags", "Sci-Fi, TBR, Space-Opera")
        assert record.tags == ("science-fiction", "space-opera")
        assert get_field(record, "tags") == "science-fiction, space-opera"

    def test_description_markup_removed(self) -> None:
        record = set_field(MetadataRecord(), "description", "<p>Desert planet</p>")
        assert record.description == "Desert planet"

    def test_language_canonicalized(self) -> None:
        assert set_field(MetadataRecord(), "language", "en-US").language == "en"

    def test_configured_aliases_are_applied(self) -> None:
        aliases = AliasConfig.from_dict(
            {
                "languages": {"en": ["english"]},
                "tags": {"horror": ["scary"]},
                "authors": {"Ursula K. Le Guin": ["Ursula Le Guin"]},
            }
        )
        record = set_field(MetadataRecord(), "language", "english", aliases)
        record = set_field(record, "tags", "Scary, sf", aliases)
        record = set_field(record, "genre", "scary", aliases)
        record = set_field(record, "author", "Ursula Le Guin", aliases)
        assert record.language == "en"
        assert record.tags == ("horror", "science-fiction")
        assert record.genre == "horror"
        assert record.authors == ("Ursula K. Le Guin",)

    def test_default_tables_ignore_user_aliases(self) -> None:
        assert set_field(MetadataRecord(), "language", "english").language == "english"

    def test_series(self) -> None:
        record = set_field(MetadataRecord(), "series", "Dune:1, Dune Saga:1.5")
        assert record.series == (SeriesEntry("Dune", "1"), SeriesEntry("Dune Saga", "1.5"))
        assert get_field(record, "series") == "Dune:1, Dune Saga:1.5"

    def test_read_only_field(self) -> None:
        with pytest.raises(ValidationError, match="cannot be set"):
            set_field(MetadataRecord(), "num_pages", "412")

    def test_unknown_field(self) -> None:
        with pytest.raises(FieldNotFoundError):
            set_field(MetadataRecord(), "colour", "blue")


class TestParseSeries:
    """Tests for series parsing."""

    def test_name_without_index(self) -> None:
        assert parse_series("Discworld") == (SeriesEntry("Discworld", None),)

    def test_bad_index_skipped_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """Entries with a non-numeric index are logged and skipped."""
        with caplog.at_level(logging.WARNING):
            result = parse_series("Dune:one, Discworld:3")
        assert result == (SeriesEntry("Discworld", "3"),)
        assert "Dune:one" in caplog.text
