# ABOUTME: Search index package: FTS5-backed index and its synchronization with the collection.
# ABOUTME: Re-exports the index, the coordinator and the diff helpers.

from shelfwise.index.search_index import SearchIndex
from shelfwise.index.sync import (
    CollectionDiff,
    SyncCoordinator,
    book_to_document,
    diff_collections,
)

__all__ = [
    "CollectionDiff",
    "SearchIndex",
    "SyncCoordinator",
    "book_to_document",
    "diff_collections",
]
