# ABOUTME: Library facade: the in-memory collection, its snapshot, and its search index.
# ABOUTME: Saving persists the snapshot and brings the index up to date in one step.

import datetime
import logging
import threading
from dataclasses import replace
from pathlib import Path

from shelfwise.config import Config
from shelfwise.db.collection import Book, Collection, set_book_field
from shelfwise.db.store import CollectionStore
from shelfwise.index.sync import SyncCoordinator, diff_collections
from shelfwise.metadata.types import MetadataRecord

logger = logging.getLogger(__name__)


class Library:
    """One collection on disk plus its search index.

    Mutations happen on the in-memory collection; ``save`` persists them and
    updates the index from the difference with the last saved version.
    ``save``, ``rebuild`` and ``backup`` are serialized by a lock.
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._store = CollectionStore(config.snapshot_path)
        self._sync = SyncCoordinator(config.index_path)
        self._lock = threading.Lock()
        self._collection = Collection()
        self._saved = Collection()

    @classmethod
    def open(cls, config: Config) -> "Library":
        """Load the library described by ``config``.

        Raises:
            StorageError: The snapshot exists but cannot be read.
        """
        library = cls(config)
        library.load()
        return library

    @property
    def config(self) -> Config:
        return self._config

    @property
    def collection(self) -> Collection:
        return self._collection

    def load(self) -> None:
        with self._lock:
            self._collection = self._store.load()
            self._saved = self._collection.copy()
        logger.debug("Loaded %d book(s) from %s", len(self._collection), self._store.path)

    def get(self, book_id: int) -> Book | None:
        return self._collection.get(book_id)

    def add_book(self, metadata: MetadataRecord, path: str, *, is_retail: bool = False) -> Book:
        book = Book(
            id=self._collection.next_id(),
            metadata=metadata,
            paths=(path,),
            is_retail=is_retail,
        )
        self._collection.add(book)
        return book

    def add_path(self, book: Book, path: str) -> Book:
        """Record another file for an existing book."""
        if path in book.paths:
            return book
        updated = replace(book, paths=book.paths + (path,))
        self._collection.replace(updated)
        return updated

    def edit(self, book_id: int, field: str, value: str) -> Book:
        """Set one field of a book.

        Raises:
            ValueError: Unknown book id.
            FieldNotFoundError: Unknown field.
            ValidationError: The value was rejected.
        """
        book = self._collection.get(book_id)
        if book is None:
            raise ValueError(f"Book with id {book_id} not found")
        updated = set_book_field(book, field, value, self._config.aliases)
        self._collection.replace(updated)
        return updated

    def edit_metadata(self, book_id: int, metadata: MetadataRecord) -> Book:
        """Replace a book's metadata, e.g. with the result of a refresh.

        Raises:
            ValueError: Unknown book id.
        """
        book = self._collection.get(book_id)
        if book is None:
            raise ValueError(f"Book with id {book_id} not found")
        updated = replace(book, metadata=metadata)
        self._collection.replace(updated)
        return updated

    def remove(self, book_id: int) -> Book:
        return self._collection.remove(book_id)

    def save(self) -> bool:
        """Persist the collection and synchronize the index.

        The index is rebuilt from scratch when it is missing or empty,
        otherwise updated incrementally.

        Returns:
            True if the snapshot file was rewritten.
        """
        with self._lock:
            wrote = self._store.save(self._collection)
            if not self._sync.is_populated():
                self._sync.rebuild(self._collection)
            else:
                self._sync.apply(diff_collections(self._saved, self._collection))
            self._saved = self._collection.copy()
        return wrote

    def rebuild(self) -> int:
        """Re-index every book. Returns the number indexed."""
        with self._lock:
            return self._sync.rebuild(self._collection)

    def search(self, query: str) -> list[Book]:
        """Books matching ``query``, best match first.

        Raises:
            QuerySyntaxError: The query could not be parsed.
        """
        if not self._sync.path.is_file():
            self.rebuild()
        books = []
        for doc_id in self._sync.query(query):
            book = self._collection.find_by_key(doc_id)
            if book is None:
                logger.warning("Search index refers to unknown book %s", doc_id)
                continue
            books.append(book)
        return books

    def backup(self, destination: Path | None = None) -> Path:
        """Archive the snapshot, by default into a timestamped file in the library directory."""
        if destination is None:
            stamp = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            destination = self._config.library_dir / f"shelfwise-{stamp}.tar.gz"
        with self._lock:
            return self._store.backup(destination)
