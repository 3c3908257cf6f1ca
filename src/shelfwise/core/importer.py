# ABOUTME: Import pipeline that adds EPUB files to the library.
# ABOUTME: Reads embedded metadata, cleans it, and skips files or books already present.

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from shelfwise.core.library import Library
from shelfwise.formats.epub import EpubReadError, read_epub_metadata
from shelfwise.metadata.normalizer import clean_records
from shelfwise.metadata.types import MetadataRecord

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Summary of an import operation."""

    added: int = 0
    skipped: int = 0
    errors: int = 0
    error_details: list[tuple[Path, str]] = field(default_factory=list)


# Called with (cleaned_metadata, epub_path); returns the metadata to store.
EnrichFn = Callable[[MetadataRecord, Path], MetadataRecord]


def import_books(
    paths: list[Path],
    library: Library,
    *,
    enrich_fn: EnrichFn | None = None,
    is_retail: bool = False,
) -> ImportResult:
    """Import EPUB files into the library's collection.

    Files already in the collection are skipped. A file whose metadata is
    similar to an existing book (same ISBN, or same author and title) is
    recorded as another file of that book. Corrupt files are recorded as
    errors. Metadata is cleaned in parallel; enrich_fn, when given, runs on
    each cleaned record before it is stored.

    The collection is modified in memory only; call ``library.save()``.
    """
    result = ImportResult()

    pending: list[tuple[Path, MetadataRecord]] = []
    for epub_path in paths:
        if library.collection.find_by_path(str(epub_path)) is not None:
            result.skipped += 1
            continue
        try:
            pending.append((epub_path, read_epub_metadata(epub_path)))
        except EpubReadError as exc:
            result.errors += 1
            result.error_details.append((epub_path, str(exc)))

    cleaned = clean_records(
        [metadata for _, metadata in pending], library.config.aliases
    )

    for (epub_path, _), metadata in zip(pending, cleaned, strict=True):
        existing = library.collection.find_similar(metadata)
        if existing is not None:
            logger.info("%s is another copy of %s", epub_path, existing)
            library.add_path(existing, str(epub_path))
            result.skipped += 1
            continue

        if enrich_fn is not None:
            metadata = enrich_fn(metadata, epub_path)

        book = library.add_book(metadata, str(epub_path), is_retail=is_retail)
        logger.info("Added %s", book)
        result.added += 1

    return result
