# ABOUTME: Keeps the search index in step with the collection.
# ABOUTME: Full rebuilds, incremental updates computed from a collection diff, and queries.

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from shelfwise.db.collection import Book, Collection
from shelfwise.errors import StorageError
from shelfwise.index.search_index import Document, SearchIndex
from shelfwise.metadata.fields import series_to_string

logger = logging.getLogger(__name__)


def book_to_document(book: Book) -> dict[str, str]:
    """The searchable projection of a book."""
    md = book.metadata
    return {
        "author": md.author,
        "title": md.title,
        "year": md.year,
        "language": md.language,
        "tags": " ".join(md.tags),
        "series": series_to_string(md.series),
        "publisher": md.publisher,
        "category": md.category,
        "type": md.type,
        "genre": md.genre,
        "description": md.description,
        "progress": book.progress,
        "rating": book.rating,
        "review": book.review,
        "retail": "true" if book.is_retail else "false",
    }


@dataclass
class CollectionDiff:
    """Books added, changed and removed between two versions of a collection."""

    new: dict[str, Book] = field(default_factory=dict)
    modified: dict[str, Book] = field(default_factory=dict)
    deleted: dict[str, Book] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.new or self.modified or self.deleted)


def diff_collections(previous: Collection, current: Collection) -> CollectionDiff:
    """Compare two collections by book key and indexed content."""
    before = {book.key: book for book in previous}
    after = {book.key: book for book in current}
    diff = CollectionDiff()
    for key, book in after.items():
        old = before.get(key)
        if old is None:
            diff.new[key] = book
        elif book_to_document(old) != book_to_document(book):
            diff.modified[key] = book
    for key, book in before.items():
        if key not in after:
            diff.deleted[key] = book
    return diff


class SyncCoordinator:
    """Owns the search index file for one library."""

    def __init__(self, index_path: Path) -> None:
        self._path = index_path

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> SearchIndex:
        return SearchIndex.open(self._path)

    def is_populated(self) -> bool:
        """An index file exists and holds at least one document."""
        if not self._path.is_file():
            return False
        with self.open() as index:
            return index.count() > 0

    def _remove_storage(self) -> None:
        for suffix in ("", "-journal", "-wal", "-shm"):
            candidate = Path(f"{self._path}{suffix}")
            try:
                os.remove(candidate)
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise StorageError(f"Could not remove search index {candidate}: {exc}") from exc

    def rebuild(self, books: Iterable[Book]) -> int:
        """Wipe the index and index every book. Returns the number indexed."""
        self._remove_storage()
        indexed = 0
        with self.open() as index, index.transaction():
            for book in books:
                index.index(book.key, book_to_document(book))
                indexed += 1
        logger.info("Indexed %d book(s) into %s", indexed, self._path)
        return indexed

    def update(
        self,
        new: Mapping[str, Book],
        modified: Mapping[str, Book],
        deleted: Mapping[str, Book],
    ) -> None:
        """Apply a collection diff to the index.

        Stale documents (modified and deleted) are removed before new and
        modified ones are written, all in one transaction.

        Raises:
            ValueError: A key appears in more than one of the maps.
        """
        keys = [set(new), set(modified), set(deleted)]
        if keys[0] & keys[1] or keys[0] & keys[2] or keys[1] & keys[2]:
            raise ValueError("new, modified and deleted books must be distinct")

        documents: dict[str, Document] = {
            key: book_to_document(book) for key, book in {**new, **modified}.items()
        }
        with self.open() as index, index.transaction():
            for key in list(modified) + list(deleted):
                index.delete(key)
            for key, document in documents.items():
                index.index(key, document)
        logger.info(
            "Index updated: %d new, %d modified, %d deleted",
            len(new),
            len(modified),
            len(deleted),
        )

    def apply(self, diff: CollectionDiff) -> None:
        if not diff.is_empty():
            self.update(diff.new, diff.modified, diff.deleted)

    def query(self, text: str) -> list[str]:
        """Ids of the indexed books matching ``text``, best match first."""
        with self.open() as index:
            return index.query(text)
