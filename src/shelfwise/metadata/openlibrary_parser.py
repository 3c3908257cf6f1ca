# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts works, editions, ratings, and search payloads into shelfwise types.

import re
from typing import Any

from shelfwise.metadata.provider import SearchHit, SearchResults
from shelfwise.metadata.types import SeriesEntry

_COVERS_BASE_URL = "https://covers.openlibrary.org/b/id"
_YEAR_RE = re.compile(r"\b(\d{4})\b")
# "Dune Chronicles ; 1", "The Expanse #2.5", "Foundation (3)", "Discworld, no. 3"
_SERIES_RE = re.compile(
    r"^(?P<name>.+?)\s*(?:[;#,(]|\bno\.|\bbook\b|\bvol\.?)\s*(?P<index>\d+(?:\.\d+)?)\)?\s*$",
    re.IGNORECASE,
)

# Format preference for edition selection (lower = better).
_FORMAT_RANK: dict[str, int] = {
    "ebook": 0,
    "electronic resource": 0,
    "hardcover": 1,
    "paperback": 1,
    "trade paperback": 1,
    "mass market paperback": 1,
    "audio cd": 3,
    "audio cassette": 3,
}
_FORMAT_RANK_DEFAULT = 2


def extract_year(text: str | None) -> str:
    """First four-digit year in a free-form Open Library date, or ""."""
    if not text:
        return ""
    m = _YEAR_RE.search(str(text))
    return m.group(1) if m else ""


def parse_description(data: dict[str, Any]) -> str:
    """Description is either a plain string or {"type": ..., "value": "..."}."""
    desc = data.get("description")
    if isinstance(desc, str):
        return desc
    if isinstance(desc, dict):
        return str(desc.get("value", ""))
    return ""


def parse_series_label(label: str) -> SeriesEntry:
    """Split an edition's series label into name and index."""
    m = _SERIES_RE.match(label.strip())
    if m:
        name = m.group("name").strip().rstrip(",").strip()
        return SeriesEntry(name=name, index=m.group("index"))
    return SeriesEntry(name=label.strip())


def parse_search_results(data: dict[str, Any]) -> SearchResults:
    """Parse /search.json into a hit count and {id, author, title} hits."""
    hits = []
    for doc in data.get("docs", []):
        key = doc.get("key")
        if not key:
            continue
        authors = doc.get("author_name", [])
        hits.append(
            SearchHit(
                id=key,
                author=authors[0] if authors else "",
                title=doc.get("title", ""),
            )
        )
    total = data.get("numFound", data.get("num_found", len(hits)))
    return SearchResults(total=int(total), hits=tuple(hits))


def parse_work(data: dict[str, Any]) -> dict[str, Any]:
    """Extract title, description, subjects, original year, and author keys from a work."""
    author_keys = []
    for entry in data.get("authors", []):
        key = entry.get("author", {}).get("key", "")
        if key:
            author_keys.append(key)
    covers = [c for c in data.get("covers", []) if isinstance(c, int) and c > 0]
    return {
        "title": data.get("title", ""),
        "description": parse_description(data),
        "tags": [str(s).strip().lower() for s in data.get("subjects", [])],
        "year": extract_year(data.get("first_publish_date")),
        "author_keys": author_keys,
        "cover_id": covers[0] if covers else None,
    }


def parse_edition(entry: dict[str, Any]) -> dict[str, Any]:
    """Extract edition-level fields: ISBN, publisher, year, pages, language, series."""
    isbn_13 = entry.get("isbn_13", [])
    publishers = entry.get("publishers", [])
    languages = entry.get("languages", [])
    language = ""
    if languages:
        lang_key = languages[0].get("key", "")
        language = lang_key.rsplit("/", 1)[-1]
    pages = entry.get("number_of_pages")
    covers = [c for c in entry.get("covers", []) if isinstance(c, int) and c > 0]
    return {
        "isbn": isbn_13[0] if isbn_13 else "",
        "publisher": publishers[0] if publishers else "",
        "edition_year": extract_year(entry.get("publish_date")),
        "num_pages": str(pages) if pages else "",
        "language": language,
        "series": [parse_series_label(s) for s in entry.get("series", []) if s],
        "cover_id": covers[0] if covers else None,
    }


def select_best_edition(
    entries: list[dict[str, Any]], isbn: str | None = None
) -> dict[str, Any] | None:
    """Pick the edition matching ``isbn``, else the best-ranked edition with an ISBN-13."""
    if isbn:
        for entry in entries:
            if isbn in entry.get("isbn_13", []):
                return entry

    scored: list[tuple[int, int, dict[str, Any]]] = []
    for position, entry in enumerate(entries):
        if not entry.get("isbn_13"):
            continue
        fmt = (entry.get("physical_format") or "").lower()
        scored.append((_FORMAT_RANK.get(fmt, _FORMAT_RANK_DEFAULT), position, entry))

    if not scored:
        return entries[0] if entries else None
    scored.sort(key=lambda item: (item[0], item[1]))
    return scored[0][2]


def parse_rating(data: dict[str, Any]) -> str:
    """Average rating from /ratings.json, two decimals, or ""."""
    average = data.get("summary", {}).get("average")
    if average is None:
        return ""
    return f"{float(average):.2f}"


def parse_author_name(data: dict[str, Any]) -> str:
    return data.get("name", "")


def build_cover_url(cover_id: int, size: str = "L") -> str:
    """Cover image URL for an Open Library cover id. ``size`` is S, M or L."""
    return f"{_COVERS_BASE_URL}/{cover_id}-{size}.jpg"
