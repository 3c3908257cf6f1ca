# ABOUTME: Explicit registry of named metadata fields with display getters and validating setters.
# ABOUTME: Shared by the merger and by single-field edits so both apply the same validation.

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from shelfwise.errors import FieldNotFoundError, ValidationError
from shelfwise.metadata.aliases import AliasConfig
from shelfwise.metadata.normalizer import (
    classify_category,
    classify_type,
    clean_html,
    clean_isbn,
    clean_language,
    clean_tags,
)
from shelfwise.metadata.types import (
    UNKNOWN,
    UNKNOWN_AUTHOR,
    UNKNOWN_YEAR,
    MetadataRecord,
    SeriesEntry,
)

logger = logging.getLogger(__name__)

Getter = Callable[[MetadataRecord], str]
Setter = Callable[[MetadataRecord, str, AliasConfig], MetadataRecord]


@dataclass(frozen=True)
class FieldSpec:
    """One named field: how to display it and, if editable, how to set it."""

    name: str
    label: str
    usage: str
    get: Getter
    set: Setter | None = None

    @property
    def editable(self) -> bool:
        return self.set is not None


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def series_to_string(series: tuple[SeriesEntry, ...]) -> str:
    return ", ".join(entry.raw for entry in series)


def parse_series(value: str) -> tuple[SeriesEntry, ...]:
    """Parse ``name[:index], ...``. Unparsable entries are logged and skipped."""
    entries: list[SeriesEntry] = []
    for part in _split_list(value):
        name, sep, index = part.partition(":")
        name, index = name.strip(), index.strip()
        if not name or ":" in index:
            logger.warning("Could not parse series %r", part)
            continue
        if sep and index:
            try:
                float(index)
            except ValueError:
                logger.warning("Could not parse series index in %r", part)
                continue
        entries.append(SeriesEntry(name=name, index=index or None))
    return tuple(entries)


def _set_title(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, title=value.strip())


def _set_authors(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    if value.strip().lower() == UNKNOWN_AUTHOR.lower():
        return replace(record, authors=())
    return replace(record, authors=tuple(aliases.authors.resolve(a) for a in _split_list(value)))


def _year_setter(field_name: str) -> Setter:
    def _set(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
        value = value.strip()
        if value != UNKNOWN_YEAR:
            try:
                int(value)
            except ValueError as exc:
                raise ValidationError(field_name, f"invalid year value {value!r}") from exc
        return replace(record, **{field_name: value})

    return _set


def _set_isbn(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    if value.strip().lower() in ("", UNKNOWN):
        return replace(record, isbn="")
    return replace(record, isbn=clean_isbn(value))


def _set_category(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, category=classify_category(value))


def _set_type(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, type=classify_type(value))


def _set_description(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, description=clean_html(value))


def _set_language(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, language=clean_language(value, aliases.languages))


def _set_tags(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, tags=clean_tags(_split_list(value.lower()), aliases.tags))


def _set_series(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, series=parse_series(value))


def _set_genre(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, genre=aliases.tags.resolve(value.strip()))


def _set_publisher(record: MetadataRecord, value: str, aliases: AliasConfig) -> MetadataRecord:
    return replace(record, publisher=aliases.publishers.resolve(value.strip()))


FIELDS: dict[str, FieldSpec] = {
    spec.name: spec
    for spec in (
        FieldSpec(
            "title", "Title", "Title, without series information.",
            lambda r: r.title, _set_title,
        ),
        FieldSpec(
            "author", "Author", "Authors can be edited as a comma-separated list of strings.",
            lambda r: ", ".join(r.authors), _set_authors,
        ),
        FieldSpec(
            "year", "Original publication year", "The year in which the book was written.",
            lambda r: r.year, _year_setter("year"),
        ),
        FieldSpec(
            "edition_year", "Publication year", "The year in which this edition was published.",
            lambda r: r.edition_year, _year_setter("edition_year"),
        ),
        FieldSpec(
            "publisher", "Publisher", "Publisher of this edition.",
            lambda r: r.publisher, _set_publisher,
        ),
        FieldSpec(
            "description", "Description", "Description for this edition.",
            lambda r: clean_html(r.description), _set_description,
        ),
        FieldSpec(
            "language", "Language", "Language of this edition.",
            lambda r: clean_language(r.language), _set_language,
        ),
        FieldSpec(
            "category", "Category", "A book can be either fiction or nonfiction.",
            lambda r: r.category, _set_category,
        ),
        FieldSpec(
            "type", "Type", "The nature of this book.",
            lambda r: r.type, _set_type,
        ),
        FieldSpec(
            "genre", "Genre", "Main genre of this book.",
            lambda r: r.genre, _set_genre,
        ),
        FieldSpec(
            "tags", "Tags", "Tags can be edited as a comma-separated list of strings.",
            lambda r: ", ".join(r.tags), _set_tags,
        ),
        FieldSpec(
            "series", "Series",
            "Series can be edited as a comma-separated list of 'series name:index' strings.",
            lambda r: series_to_string(r.series), _set_series,
        ),
        FieldSpec(
            "isbn", "ISBN", "ISBN13 for this edition.",
            lambda r: r.isbn, _set_isbn,
        ),
        FieldSpec("num_pages", "Pages", "Number of pages.", lambda r: r.num_pages),
        FieldSpec("average_rating", "Average rating", "Online rating.", lambda r: r.average_rating),
        FieldSpec("image_url", "Cover", "Cover image URL.", lambda r: r.image_url),
    )
}

# Fields a user curates; the enrichment-only pass-through fields are excluded.
EDITABLE_FIELDS = tuple(name for name, spec in FIELDS.items() if spec.editable)


def get_spec(name: str) -> FieldSpec:
    """Look up a field by name (case-insensitive).

    Raises:
        FieldNotFoundError: If no such field exists.
    """
    spec = FIELDS.get(name.strip().lower())
    if spec is None:
        raise FieldNotFoundError(name)
    return spec


def get_field(record: MetadataRecord, name: str) -> str:
    """Display value of a field."""
    return get_spec(name).get(record)


def set_field(
    record: MetadataRecord, name: str, value: str, aliases: AliasConfig | None = None
) -> MetadataRecord:
    """Validate a raw value and return a new record with the field set.

    Aliased fields (authors, publisher, language, genre, tags) are resolved
    against ``aliases``, or the built-in tables when none is given.

    Raises:
        FieldNotFoundError: Unknown field name.
        ValidationError: Read-only field or rejected value.
    """
    spec = get_spec(name)
    if spec.set is None:
        raise ValidationError(spec.name, "field cannot be set")
    return spec.set(record, value, aliases or AliasConfig())
