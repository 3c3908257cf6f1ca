# ABOUTME: Unit tests for Book, Collection, and user-field validation.
# ABOUTME: Books are immutable; edits return replacements the collection adopts.

import pytest

from shelfwise.db.collection import (
    READ,
    UNREAD,
    Book,
    Collection,
    get_book_field,
    set_book_field,
)
from shelfwise.errors import FieldNotFoundError, ValidationError
from shelfwise.metadata.types import MetadataRecord

DUNE = MetadataRecord(title="Dune", authors=("Frank Herbert",), isbn="9780441013593")
EMMA = MetadataRecord(title="Emma", authors=("Jane Austen",))


def _book(book_id: int, metadata: MetadataRecord = DUNE, path: str = "") -> Book:
    return Book(id=book_id, metadata=metadata, paths=(path,) if path else ())


class TestBook:
    """Tests for Book basics."""

    def test_key_is_id(self) -> None:
        assert _book(7).key == "7"

    def test_defaults(self) -> None:
        book = _book(1)
        assert book.progress == UNREAD
        assert book.main_path == ""
        assert not book.is_retail


class TestBookFields:
    """Tests for get_book_field and set_book_field."""

    def test_progress(self) -> None:
        book = set_book_field(_book(1), "progress", "read")
        assert book.progress == READ

    def test_progress_rejected(self) -> None:
        with pytest.raises(ValidationError, match="progress"):
            set_book_field(_book(1), "progress", "skimmed")

    def test_read_date(self) -> None:
        assert set_book_field(_book(1), "read_date", "2024-02-29").read_date == "2024-02-29"
        with pytest.raises(ValidationError, match="read_date"):
            set_book_field(_book(1), "read_date", "yesterday")

    @pytest.mark.parametrize("value", ["0", "3.5", "5"])
    def test_rating_in_range(self, value: str) -> None:
        assert set_book_field(_book(1), "rating", value).rating == value

    @pytest.mark.parametrize("value", ["-1", "5.5", "great"])
    def test_rating_rejected(self, value: str) -> None:
        with pytest.raises(ValidationError, match="rating"):
            set_book_field(_book(1), "rating", value)

    def test_retail_flag(self) -> None:
        book = set_book_field(_book(1), "retail", "Yes")
        assert book.is_retail
        assert get_book_field(book, "retail") == "true"
        with pytest.raises(ValidationError, match="retail"):
            set_book_field(book, "retail", "perhaps")

    def test_metadata_fields_delegate(self) -> None:
        book = set_book_field(_book(1), "year", "1965")
        assert book.metadata.year == "1965"
        assert get_book_field(book, "Title") == "Dune"

    def test_unknown_field(self) -> None:
        with pytest.raises(FieldNotFoundError):
            set_book_field(_book(1), "colour", "blue")

    def test_original_unchanged(self) -> None:
        book = _book(1)
        set_book_field(book, "review", "Great.")
        assert book.review == ""


class TestCollection:
    """Tests for Collection operations."""

    def test_add_and_get(self) -> None:
        collection = Collection()
        collection.add(_book(1))
        assert len(collection) == 1
        assert 1 in collection
        assert collection.get(1) == _book(1)
        assert collection.get(2) is None

    def test_add_duplicate_id(self) -> None:
        collection = Collection()
        collection.add(_book(1))
        with pytest.raises(ValueError, match="already exists"):
            collection.add(_book(1, EMMA))

    def test_next_id(self) -> None:
        collection = Collection()
        assert collection.next_id() == 1
        collection.add(_book(4))
        assert collection.next_id() == 5

    def test_replace(self) -> None:
        collection = Collection()
        collection.add(_book(1))
        collection.replace(set_book_field(_book(1), "progress", "reading"))
        assert collection.get(1).progress == "reading"
        with pytest.raises(ValueError, match="not found"):
            collection.replace(_book(2))

    def test_remove(self) -> None:
        collection = Collection()
        collection.add(_book(1))
        assert collection.remove(1).id == 1
        with pytest.raises(ValueError, match="not found"):
            collection.remove(1)

    def test_iteration_in_insertion_order(self) -> None:
        collection = Collection()
        for book_id in (3, 1, 2):
            collection.add(_book(book_id))
        assert [book.id for book in collection] == [3, 1, 2]

    def test_finders(self) -> None:
        collection = Collection()
        collection.add(_book(1, DUNE, "/books/dune.epub"))
        collection.add(_book(2, EMMA, "/books/emma.epub"))
        assert collection.find_by_key("2").metadata == EMMA
        assert collection.find_by_path("/books/dune.epub").id == 1
        assert collection.find_by_path("/books/other.epub") is None
        similar = MetadataRecord(title="Dune: deluxe", isbn="9780441013593")
        assert collection.find_similar(similar).id == 1

    def test_copy_is_independent(self) -> None:
        collection = Collection()
        collection.add(_book(1))
        copy = collection.copy()
        copy.add(_book(2, EMMA))
        assert len(collection) == 1
