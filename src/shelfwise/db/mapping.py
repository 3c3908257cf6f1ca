# ABOUTME: Converts between Book/MetadataRecord dataclasses and snapshot JSON dictionaries.
# ABOUTME: Keys are fixed and stable so snapshots diff cleanly under version control.

from typing import Any

from shelfwise.db.collection import UNREAD, Book, Collection
from shelfwise.metadata.types import MetadataRecord, SeriesEntry


def metadata_to_dict(metadata: MetadataRecord) -> dict[str, Any]:
    return {
        "title": metadata.title,
        "authors": list(metadata.authors),
        "isbn": metadata.isbn,
        "year": metadata.year,
        "edition_year": metadata.edition_year,
        "description": metadata.description,
        "series": [{"name": s.name, "index": s.index or ""} for s in metadata.series],
        "average_rating": metadata.average_rating,
        "tags": list(metadata.tags),
        "category": metadata.category,
        "type": metadata.type,
        "genre": metadata.genre,
        "language": metadata.language,
        "publisher": metadata.publisher,
        "image_url": metadata.image_url,
        "num_pages": metadata.num_pages,
    }


def dict_to_metadata(data: dict[str, Any]) -> MetadataRecord:
    """Inverse of metadata_to_dict. Missing keys fall back to empty values."""
    return MetadataRecord(
        title=data.get("title", ""),
        authors=tuple(data.get("authors") or ()),
        isbn=data.get("isbn", ""),
        year=data.get("year", ""),
        edition_year=data.get("edition_year", ""),
        description=data.get("description", ""),
        series=tuple(
            SeriesEntry(name=s.get("name", ""), index=s.get("index") or None)
            for s in data.get("series") or ()
        ),
        average_rating=data.get("average_rating", ""),
        tags=tuple(data.get("tags") or ()),
        category=data.get("category", ""),
        type=data.get("type", ""),
        genre=data.get("genre", ""),
        language=data.get("language", ""),
        publisher=data.get("publisher", ""),
        image_url=data.get("image_url", ""),
        num_pages=data.get("num_pages", ""),
    )


def book_to_dict(book: Book) -> dict[str, Any]:
    return {
        "id": book.id,
        "paths": list(book.paths),
        "is_retail": book.is_retail,
        "progress": book.progress,
        "read_date": book.read_date,
        "rating": book.rating,
        "review": book.review,
        "metadata": metadata_to_dict(book.metadata),
    }


def dict_to_book(data: dict[str, Any]) -> Book:
    return Book(
        id=int(data["id"]),
        metadata=dict_to_metadata(data.get("metadata") or {}),
        paths=tuple(data.get("paths") or ()),
        is_retail=bool(data.get("is_retail", False)),
        progress=data.get("progress") or UNREAD,
        read_date=data.get("read_date", ""),
        rating=data.get("rating", ""),
        review=data.get("review", ""),
    )


def collection_to_list(collection: Collection) -> list[dict[str, Any]]:
    return [book_to_dict(book) for book in collection]


def list_to_collection(data: list[dict[str, Any]]) -> Collection:
    collection = Collection()
    for entry in data:
        collection.add(dict_to_book(entry))
    return collection
