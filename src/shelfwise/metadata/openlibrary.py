# ABOUTME: Open Library enrichment source.
# ABOUTME: Finds a work by ISBN or author/title and assembles a MetadataRecord from several endpoints.

import logging
from typing import Any

from shelfwise.errors import ExternalServiceError
from shelfwise.metadata.http import HttpClient
from shelfwise.metadata.openlibrary_parser import (
    build_cover_url,
    parse_author_name,
    parse_edition,
    parse_rating,
    parse_search_results,
    parse_work,
    select_best_edition,
)
from shelfwise.metadata.provider import SearchResults
from shelfwise.metadata.titles import search_title
from shelfwise.metadata.types import MetadataRecord

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"
_SEARCH_LIMIT = 10
_SEARCH_FIELDS = "key,title,author_name"


class OpenLibrarySource:
    """EnrichmentSource backed by the Open Library JSON API.

    The returned records are raw; callers run clean_record on them.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return "openlibrary"

    def search(self, author: str, title: str) -> SearchResults:
        params = {"title": title, "limit": str(_SEARCH_LIMIT), "fields": _SEARCH_FIELDS}
        if author:
            params["author"] = author
        data = self._http.get(f"{_OL_BASE}/search.json", params=params)
        return parse_search_results(data)

    def find_id(self, record: MetadataRecord) -> str:
        """Resolve a record to an Open Library works key.

        ISBN lookup first; otherwise search by author and title, preferring
        an exact match and falling back to the first hit.

        Raises:
            ExternalServiceError: Nothing found.
        """
        if record.isbn:
            try:
                edition = self._http.get(f"{_OL_BASE}/isbn/{record.isbn}.json")
            except ExternalServiceError as exc:
                logger.warning("ISBN lookup failed for %s: %s", record.isbn, exc)
            else:
                works = edition.get("works", [])
                if works and works[0].get("key"):
                    return works[0]["key"]

        author = record.authors[0] if record.authors else ""
        title = search_title(record.title)
        if not title:
            raise ExternalServiceError("Cannot search without a title or ISBN")
        results = self.search(author, title)
        if results.total == 0 or not results.hits:
            raise ExternalServiceError(f"Could not find online data for {record}")
        for hit in results.hits:
            if hit.author == author and hit.title == record.title:
                return hit.id
        logger.info("No exact match for %s, using first hit %s", record, results.hits[0].id)
        return results.hits[0].id

    def get_record(self, source_id: str, isbn: str | None = None) -> MetadataRecord:
        """Assemble a record from the works, editions, ratings and author endpoints.

        Raises:
            ExternalServiceError: The works endpoint failed.
        """
        work = parse_work(self._http.get(f"{_OL_BASE}{source_id}.json"))

        edition: dict[str, Any] = {}
        try:
            editions = self._http.get(f"{_OL_BASE}{source_id}/editions.json")
        except ExternalServiceError as exc:
            logger.warning("Editions lookup failed for %s: %s", source_id, exc)
        else:
            best = select_best_edition(editions.get("entries", []), isbn)
            if best is not None:
                edition = parse_edition(best)

        average_rating = ""
        try:
            average_rating = parse_rating(self._http.get(f"{_OL_BASE}{source_id}/ratings.json"))
        except ExternalServiceError as exc:
            logger.debug("Ratings lookup failed for %s: %s", source_id, exc)

        cover_id = edition.get("cover_id") or work["cover_id"]
        return MetadataRecord(
            title=work["title"],
            authors=tuple(self._author_names(work["author_keys"])),
            isbn=edition.get("isbn", ""),
            year=work["year"],
            edition_year=edition.get("edition_year", ""),
            description=work["description"],
            language=edition.get("language", ""),
            tags=tuple(work["tags"]),
            series=tuple(edition.get("series", ())),
            publisher=edition.get("publisher", ""),
            average_rating=average_rating,
            num_pages=edition.get("num_pages", ""),
            image_url=build_cover_url(cover_id) if cover_id else "",
        )

    def _author_names(self, author_keys: list[str]) -> list[str]:
        names = []
        for key in author_keys:
            try:
                name = parse_author_name(self._http.get(f"{_OL_BASE}{key}.json"))
            except ExternalServiceError:
                continue
            if name:
                names.append(name)
        return names
