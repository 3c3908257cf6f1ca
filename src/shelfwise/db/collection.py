# ABOUTME: Book (a MetadataRecord plus user-owned fields) and the ordered Collection of books.
# ABOUTME: Books are immutable; the collection adopts replacement books produced by edits.

import datetime
from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from shelfwise.errors import ValidationError
from shelfwise.metadata.aliases import AliasConfig
from shelfwise.metadata.fields import get_field, set_field
from shelfwise.metadata.types import MetadataRecord

UNREAD = "unread"
READING = "reading"
READ = "read"
SHORTLISTED = "shortlisted"
VALID_PROGRESS = (UNREAD, READING, READ, SHORTLISTED)

_TRUE_WORDS = ("true", "yes", "y", "1")
_FALSE_WORDS = ("false", "no", "n", "0")

USER_FIELDS = ("progress", "read_date", "rating", "review", "retail")


@dataclass(frozen=True)
class Book:
    """One entry of the collection."""

    id: int
    metadata: MetadataRecord
    paths: tuple[str, ...] = ()
    is_retail: bool = False
    progress: str = UNREAD
    read_date: str = ""
    rating: str = ""
    review: str = ""

    @property
    def key(self) -> str:
        """Stable id used for the book's index document."""
        return str(self.id)

    @property
    def main_path(self) -> str:
        return self.paths[0] if self.paths else ""

    def __str__(self) -> str:
        return f"{self.id}: {self.metadata}"


def get_book_field(book: Book, name: str) -> str:
    """Display value of a user field or, failing that, of a metadata field."""
    name = name.strip().lower()
    if name == "retail":
        return "true" if book.is_retail else "false"
    if name in USER_FIELDS:
        return getattr(book, name)
    return get_field(book.metadata, name)


def set_book_field(
    book: Book, name: str, value: str, aliases: AliasConfig | None = None
) -> Book:
    """Validate and set a user field or a metadata field, returning a new Book.

    Raises:
        FieldNotFoundError: Neither a user field nor a metadata field.
        ValidationError: The value was rejected.
    """
    name = name.strip().lower()
    value = value.strip()
    if name == "progress":
        if value not in VALID_PROGRESS:
            raise ValidationError(name, f"invalid reading progress {value!r}")
        return replace(book, progress=value)
    if name == "read_date":
        try:
            datetime.date.fromisoformat(value)
        except ValueError as exc:
            raise ValidationError(name, f"invalid read date {value!r}") from exc
        return replace(book, read_date=value)
    if name == "rating":
        try:
            rating = float(value)
        except ValueError as exc:
            raise ValidationError(name, "rating must be between 0 and 5") from exc
        if not 0 <= rating <= 5:
            raise ValidationError(name, "rating must be between 0 and 5")
        return replace(book, rating=value)
    if name == "review":
        return replace(book, review=value)
    if name == "retail":
        lowered = value.lower()
        if lowered not in _TRUE_WORDS + _FALSE_WORDS:
            raise ValidationError(name, f"expected true or false, got {value!r}")
        return replace(book, is_retail=lowered in _TRUE_WORDS)
    return replace(book, metadata=set_field(book.metadata, name, value, aliases))


@dataclass
class Collection:
    """Ordered mapping of book id -> Book.

    The collection is the only owner of its books. Changes come in as whole
    replacement books (see set_book_field, reconcile) and are adopted here.
    """

    books: dict[int, Book] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.books)

    def __iter__(self) -> Iterator[Book]:
        return iter(self.books.values())

    def __contains__(self, book_id: object) -> bool:
        return book_id in self.books

    def get(self, book_id: int) -> Book | None:
        return self.books.get(book_id)

    def next_id(self) -> int:
        return max(self.books, default=0) + 1

    def add(self, book: Book) -> None:
        """Add a new book.

        Raises:
            ValueError: If the id is already taken.
        """
        if book.id in self.books:
            raise ValueError(f"Book with id {book.id} already exists")
        self.books[book.id] = book

    def replace(self, book: Book) -> None:
        """Adopt an updated version of an existing book.

        Raises:
            ValueError: If the book is not in the collection.
        """
        if book.id not in self.books:
            raise ValueError(f"Book with id {book.id} not found")
        self.books[book.id] = book

    def remove(self, book_id: int) -> Book:
        """Remove and return a book.

        Raises:
            ValueError: If the book is not in the collection.
        """
        try:
            return self.books.pop(book_id)
        except KeyError:
            raise ValueError(f"Book with id {book_id} not found") from None

    def find_by_key(self, key: str) -> Book | None:
        for book in self.books.values():
            if book.key == key:
                return book
        return None

    def find_by_path(self, path: str) -> Book | None:
        for book in self.books.values():
            if path in book.paths:
                return book
        return None

    def find_similar(self, metadata: MetadataRecord) -> Book | None:
        """First book whose metadata is similar (same ISBN, or same author and title)."""
        for book in self.books.values():
            if book.metadata.is_similar(metadata):
                return book
        return None

    def copy(self) -> "Collection":
        return Collection(dict(self.books))
