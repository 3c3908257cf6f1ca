# ABOUTME: EnrichmentSource protocol: the contract for remote bibliographic services.
# ABOUTME: Also defines the search-result types exposing a hit count and {id, author, title} hits.

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from shelfwise.metadata.types import MetadataRecord


@dataclass(frozen=True)
class SearchHit:
    id: str
    author: str
    title: str


@dataclass(frozen=True)
class SearchResults:
    total: int = 0
    hits: tuple[SearchHit, ...] = field(default_factory=tuple)


@runtime_checkable
class EnrichmentSource(Protocol):
    """A remote source of metadata records.

    ``find_id`` and ``get_record`` raise ExternalServiceError when nothing
    usable comes back; callers degrade to manual entry.
    """

    @property
    def name(self) -> str: ...

    def search(self, author: str, title: str) -> SearchResults: ...

    def find_id(self, record: MetadataRecord) -> str: ...

    def get_record(self, source_id: str, isbn: str | None = None) -> MetadataRecord: ...
