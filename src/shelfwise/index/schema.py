# ABOUTME: SQL DDL for the search index: one FTS5 table of documents keyed by book id.
# ABOUTME: The index is derived data and can always be rebuilt from the collection.

INDEX_VERSION = 1

# Searchable columns, in the order documents are stored.
INDEX_FIELDS = (
    "author",
    "title",
    "year",
    "language",
    "tags",
    "series",
    "publisher",
    "category",
    "type",
    "genre",
    "description",
    "progress",
    "rating",
    "review",
    "retail",
)

SCHEMA = f"""
-- One row per indexed book; doc_id is the book's stable key.
CREATE VIRTUAL TABLE documents USING fts5(
    doc_id UNINDEXED,
    {", ".join(INDEX_FIELDS)},
    tokenize = 'unicode61'
);

CREATE TABLE index_info (
    version    INTEGER NOT NULL,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO index_info (version) VALUES ({INDEX_VERSION});
"""
