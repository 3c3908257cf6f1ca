# ABOUTME: Public API for the shelfwise collection layer.
# ABOUTME: Exports the Book and Collection types and the snapshot store.

from shelfwise.db.collection import Book, Collection, get_book_field, set_book_field
from shelfwise.db.store import CollectionStore

__all__ = [
    "Book",
    "Collection",
    "CollectionStore",
    "get_book_field",
    "set_book_field",
]
