# ABOUTME: Deterministic cleanup of a MetadataRecord: ISBN, language, tags, aliases, enums.
# ABOUTME: clean_record is idempotent and pure, so independent records can be cleaned in parallel.

import logging
import re
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from bs4 import BeautifulSoup

from shelfwise.errors import ValidationError
from shelfwise.metadata.aliases import (
    CATEGORY_KEYWORDS,
    DEFAULT_LANGUAGE_ALIASES,
    DEFAULT_TAG_ALIASES,
    FORBIDDEN_TAG_WORDS,
    MAX_TAGS,
    TYPE_KEYWORDS,
    AliasConfig,
    AliasTable,
    classify,
)
from shelfwise.metadata.types import UNKNOWN, UNKNOWN_YEAR, MetadataRecord, SeriesEntry

logger = logging.getLogger(__name__)

_NON_DIGIT_RE = re.compile(r"\D")
_ISBN13_PREFIXES = ("978", "979")
_ISBN13_LENGTH = 13
# Nested escaping deeper than this is left as is.
_MAX_MARKUP_PASSES = 8


def clean_isbn(raw: str) -> str:
    """Extract a valid ISBN-13 from noisy input.

    Keeps digits only. Candidates must start with 978 or 979; anything longer
    than 13 digits is truncated, since trailing noise after a valid ISBN is
    common in embedded metadata.

    Raises:
        ValidationError: If no ISBN-13 can be salvaged.
    """
    candidate = _NON_DIGIT_RE.sub("", raw)
    if not candidate.startswith(_ISBN13_PREFIXES) or len(candidate) < _ISBN13_LENGTH:
        raise ValidationError("isbn", f"ISBN-13 not found in {raw!r}")
    return candidate[:_ISBN13_LENGTH]


def clean_language(raw: str, table: AliasTable = DEFAULT_LANGUAGE_ALIASES) -> str:
    """Trim and reduce a language code to its canonical alias. Unknown codes pass through."""
    return table.resolve(raw.strip())


def _is_forbidden(tag: str) -> bool:
    return any(word in tag for word in FORBIDDEN_TAG_WORDS)


def clean_tags(tags: Iterable[str], table: AliasTable = DEFAULT_TAG_ALIASES) -> tuple[str, ...]:
    """Resolve aliases, drop shelf noise and duplicates, keep the top MAX_TAGS.

    Input order is popularity order and is preserved.
    """
    cleaned: list[str] = []
    for tag in tags:
        name = table.resolve(tag.strip())
        if not name or _is_forbidden(name) or name in cleaned:
            continue
        cleaned.append(name)
    return tuple(cleaned[:MAX_TAGS])


def clean_html(text: str) -> str:
    """Strip markup from a description, keeping its text.

    Decoded entities can spell new markup ("&lt;b&gt;"), so stripping repeats
    until the text stops changing; the result is a fixed point.
    """
    text = text.strip()
    for _ in range(_MAX_MARKUP_PASSES):
        if "<" not in text and "&" not in text:
            break
        stripped = BeautifulSoup(text, "html.parser").get_text().strip()
        if stripped == text:
            break
        text = stripped
    return text


def classify_category(value: str) -> str:
    """Map a value to fiction/nonfiction/unknown.

    Raises:
        ValidationError: If the value is not a known category keyword.
    """
    category = classify(value, CATEGORY_KEYWORDS)
    if category is None:
        raise ValidationError("category", f"{value!r} is not a valid category")
    return category


def classify_type(value: str) -> str:
    """Map a value to one of the narrative forms, or unknown.

    Raises:
        ValidationError: If the value is not a known type keyword.
    """
    book_type = classify(value, TYPE_KEYWORDS)
    if book_type is None:
        raise ValidationError("type", f"{value!r} is not a valid type")
    return book_type


def apply_aliases(record: MetadataRecord, config: AliasConfig) -> MetadataRecord:
    """Replace known variants with their canonical alias.

    Authors and publisher use their own tables; tags, genre and type share
    the tag table.
    """
    tags: list[str] = []
    for tag in record.tags:
        canonical = config.tags.resolve(tag)
        if canonical not in tags:
            tags.append(canonical)
    return replace(
        record,
        authors=tuple(config.authors.resolve(a) for a in record.authors),
        tags=tuple(tags),
        genre=config.tags.resolve(record.genre),
        type=config.tags.resolve(record.type),
        publisher=config.publishers.resolve(record.publisher),
    )


def _default_years(record: MetadataRecord) -> MetadataRecord:
    year = record.year or record.edition_year or UNKNOWN_YEAR
    edition_year = record.edition_year or record.year or UNKNOWN_YEAR
    return replace(record, year=year, edition_year=edition_year)


def _infer_from_tags(
    current: str, tags: tuple[str, ...], keywords: dict[str, tuple[str, ...]]
) -> tuple[str, tuple[str, ...]]:
    """Fill an enum field from the first tag that classifies, removing that tag.

    A value that classifies is canonicalized and its tag removed; anything
    else falls back to unknown when empty.
    """
    value = current
    if not value:
        for tag in tags:
            found = classify(tag, keywords)
            if found is not None and found != UNKNOWN:
                value = found
                tags = tuple(t for t in tags if t != tag)
                break
    if not value:
        value = UNKNOWN
    found = classify(value, keywords)
    if found is not None:
        value = found
        tags = tuple(t for t in tags if classify(t, keywords) != found)
    return value, tags


def clean_record(record: MetadataRecord, config: AliasConfig | None = None) -> MetadataRecord:
    """Clean up a record. Safe to call repeatedly: a cleaned record is a fixed point.

    Steps, in order: year defaulting, description HTML stripping, language,
    aliases, tags, category/type/genre inference, series and publisher
    trimming, then aliases again for the freshly assigned enum values.
    """
    config = config or AliasConfig()

    record = _default_years(record)
    record = replace(
        record,
        description=clean_html(record.description),
        language=clean_language(record.language, config.languages),
    )
    record = apply_aliases(record, config)
    tags = clean_tags(record.tags, config.tags)

    category, tags = _infer_from_tags(record.category, tags, CATEGORY_KEYWORDS)
    book_type, tags = _infer_from_tags(record.type, tags, TYPE_KEYWORDS)

    genre = record.genre
    if not genre and tags:
        genre = tags[0]
        tags = tags[1:]
    if not genre:
        genre = UNKNOWN

    record = replace(
        record,
        tags=tags,
        category=category,
        type=book_type,
        genre=genre,
        series=tuple(SeriesEntry(s.name.strip(), s.index) for s in record.series),
        publisher=record.publisher.strip(),
    )
    return apply_aliases(record, config)


def clean_records(
    records: Iterable[MetadataRecord],
    config: AliasConfig | None = None,
    *,
    max_workers: int = 4,
) -> list[MetadataRecord]:
    """Clean independent records concurrently, preserving input order."""
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda r: clean_record(r, config), records))
