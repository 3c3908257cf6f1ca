# ABOUTME: Full-text search index over book documents, stored in a SQLite FTS5 table.
# ABOUTME: Opens an existing index or creates a fresh one; documents are upserted by id.

import logging
import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from types import TracebackType

from shelfwise.errors import IndexOpenError, QuerySyntaxError, StorageError
from shelfwise.index.query import to_fts_query
from shelfwise.index.schema import INDEX_FIELDS, SCHEMA

logger = logging.getLogger(__name__)

Document = Mapping[str, str]


def _has_documents_table(conn: sqlite3.Connection) -> bool:
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='documents'"
    )
    return cursor.fetchone() is not None


class SearchIndex:
    """Searchable documents keyed by book id.

    Use ``open`` to get an instance. Writes made outside ``transaction()``
    are committed immediately.
    """

    def __init__(self, conn: sqlite3.Connection, path: Path) -> None:
        self._conn = conn
        self._path = path
        self._in_transaction = False

    @classmethod
    def open(cls, path: Path) -> "SearchIndex":
        """Open the index at ``path``, creating it if the file does not exist.

        Raises:
            IndexOpenError: The path exists but is not a search index.
        """
        if path.exists() and not path.is_file():
            raise IndexOpenError(f"{path} is not a search index file")
        is_new = not path.exists() or path.stat().st_size == 0
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(path))
        except (OSError, sqlite3.Error) as exc:
            raise IndexOpenError(f"Could not open search index {path}: {exc}") from exc

        try:
            if is_new:
                conn.executescript(SCHEMA)
                logger.debug("Created search index at %s", path)
            elif not _has_documents_table(conn):
                raise IndexOpenError(f"{path} is not a search index")
        except sqlite3.Error as exc:
            conn.close()
            raise IndexOpenError(f"Could not open search index {path}: {exc}") from exc
        except IndexOpenError:
            conn.close()
            raise
        return cls(conn, path)

    @property
    def path(self) -> Path:
        return self._path

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "SearchIndex":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator["SearchIndex"]:
        """Group writes so readers see all of them or none of them."""
        self._in_transaction = True
        try:
            with self._conn:
                yield self
        finally:
            self._in_transaction = False

    def _commit(self) -> None:
        if not self._in_transaction:
            self._conn.commit()

    def count(self) -> int:
        cursor = self._conn.execute("SELECT count(*) FROM documents")
        return cursor.fetchone()[0]

    def ids(self) -> set[str]:
        cursor = self._conn.execute("SELECT doc_id FROM documents")
        return {row[0] for row in cursor.fetchall()}

    def index(self, doc_id: str, document: Document) -> None:
        """Add or replace the document stored under ``doc_id``."""
        columns = ", ".join(("doc_id",) + INDEX_FIELDS)
        placeholders = ", ".join("?" * (len(INDEX_FIELDS) + 1))
        values = [doc_id] + [document.get(name, "") for name in INDEX_FIELDS]
        try:
            self._conn.execute("DELETE FROM documents WHERE doc_id = ?", (doc_id,))
            self._conn.execute(
                f"INSERT INTO documents ({columns}) VALUES ({placeholders})", values
            )
        except sqlite3.Error as exc:
            raise StorageError(f"Could not index document {doc_id}: {exc}") from exc
        self._commit()

    def delete(self, doc_id: str) -> None:
        """Remove a document. Unknown ids are ignored."""
        try:
            self._conn.execute("DELETE FROM documents WHERE doc_id = ?", (doc_id,))
        except sqlite3.Error as exc:
            raise StorageError(f"Could not delete document {doc_id}: {exc}") from exc
        self._commit()

    def query(self, text: str) -> list[str]:
        """Ids of the documents matching ``text``, best match first.

        Raises:
            QuerySyntaxError: The query could not be parsed.
        """
        expression = to_fts_query(text)
        if expression is None:
            return []
        logger.debug("FTS expression for %r: %s", text, expression)
        try:
            cursor = self._conn.execute(
                "SELECT doc_id FROM documents WHERE documents MATCH ? ORDER BY rank",
                (expression,),
            )
            rows = cursor.fetchall()
        except sqlite3.OperationalError as exc:
            raise QuerySyntaxError(f"Invalid query {text!r}: {exc}") from exc
        return list(dict.fromkeys(row[0] for row in rows))
