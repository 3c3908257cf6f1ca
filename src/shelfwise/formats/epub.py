# ABOUTME: EPUB metadata extraction using ebooklib.
# ABOUTME: Produces a raw MetadataRecord; malformed files raise EpubReadError.

import logging
import re
from pathlib import Path

from ebooklib import epub

from shelfwise.errors import ShelfwiseError, ValidationError
from shelfwise.metadata.normalizer import clean_isbn
from shelfwise.metadata.types import MetadataRecord, SeriesEntry

logger = logging.getLogger(__name__)

_YEAR_RE = re.compile(r"\d{4}")


class EpubReadError(ShelfwiseError):
    """Raised when an EPUB file cannot be read or parsed."""


def _get_metadata_value(book: epub.EpubBook, namespace: str, name: str) -> str:
    """First value of a metadata entry, or "" if missing."""
    values = book.get_metadata(namespace, name)
    if not values:
        return ""
    # Metadata entries are tuples of (value, attributes)
    value = values[0][0]
    return str(value).strip() if value else ""


def _get_all_values(book: epub.EpubBook, namespace: str, name: str) -> list[str]:
    return [str(value).strip() for value, _ in book.get_metadata(namespace, name) if value]


def _get_identifiers(book: epub.EpubBook) -> list[tuple[str, str]]:
    """(scheme, value) pairs; the scheme is lowercased and "id" when none is given."""
    identifiers = []
    for value, attrs in book.get_metadata("DC", "identifier"):
        if not value:
            continue
        scheme = attrs.get("opf:scheme", attrs.get("scheme", "id"))
        identifiers.append((scheme.lower(), str(value).strip()))
    return identifiers


def _detect_isbn(identifiers: list[tuple[str, str]]) -> str:
    """Cleaned ISBN-13 from the identifiers, ISBN schemes first, or ""."""
    ordered = sorted(identifiers, key=lambda item: not item[0].startswith("isbn"))
    for _, value in ordered:
        try:
            return clean_isbn(value)
        except ValidationError:
            continue
    return ""


def _get_named_meta(book: epub.EpubBook, name: str) -> str:
    """Content of an OPF ``<meta name=... content=...>`` element, e.g. calibre:series."""
    for entries in book.metadata.values():
        for values in entries.values():
            for _, attrs in values:
                if attrs.get("name") == name and attrs.get("content"):
                    return str(attrs["content"]).strip()
    return ""


def _get_series(book: epub.EpubBook) -> tuple[SeriesEntry, ...]:
    name = _get_named_meta(book, "calibre:series")
    if not name:
        return ()
    index = _get_named_meta(book, "calibre:series_index")
    if index.endswith(".0"):
        index = index[:-2]
    return (SeriesEntry(name, index or None),)


def read_epub_metadata(path: Path) -> MetadataRecord:
    """Extract metadata from an EPUB file.

    The title falls back to the file stem. The publication date becomes the
    edition year, and subjects become tags. Nothing is cleaned here.

    Raises:
        EpubReadError: If the file cannot be read or parsed.
    """
    if not path.exists():
        raise EpubReadError(f"File not found: {path}")

    try:
        book = epub.read_epub(str(path), options={"ignore_ncx": True})
    except Exception as exc:
        raise EpubReadError(f"Failed to read EPUB: {path}: {exc}") from exc

    title = _get_metadata_value(book, "DC", "title") or path.stem
    date = _YEAR_RE.search(_get_metadata_value(book, "DC", "date"))

    record = MetadataRecord(
        title=title,
        authors=tuple(_get_all_values(book, "DC", "creator")),
        isbn=_detect_isbn(_get_identifiers(book)),
        edition_year=date.group(0) if date else "",
        description=_get_metadata_value(book, "DC", "description"),
        language=_get_metadata_value(book, "DC", "language"),
        tags=tuple(_get_all_values(book, "DC", "subject")),
        series=_get_series(book),
        publisher=_get_metadata_value(book, "DC", "publisher"),
    )
    logger.debug("Read %s: %s", path, record)
    return record
