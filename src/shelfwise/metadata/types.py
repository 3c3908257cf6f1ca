# ABOUTME: Core metadata data structures for one edition of a book.
# ABOUTME: MetadataRecord is immutable; cleaning and merging return new records.

from dataclasses import dataclass, field

UNKNOWN = "unknown"
UNKNOWN_AUTHOR = "Unknown"
UNKNOWN_YEAR = "XXXX"


@dataclass(frozen=True)
class SeriesEntry:
    """One series membership. ``index`` is a numeric string such as "2.5", or None."""

    name: str
    index: str | None = None

    def __str__(self) -> str:
        if self.index:
            return f"{self.name} #{self.index}"
        return self.name

    @property
    def raw(self) -> str:
        """Editable ``name:index`` form, the inverse of the series setter."""
        if self.index:
            return f"{self.name}:{self.index}"
        return self.name


@dataclass(frozen=True)
class MetadataRecord:
    """Structured metadata for one edition.

    This is the value that flows through the core: extraction -> cleaning ->
    reconciliation with enrichment data -> collection. Records are never
    mutated; use ``dataclasses.replace`` or the field registry setters.

    ``average_rating``, ``num_pages`` and ``image_url`` only ever come from
    the enrichment side.
    """

    title: str = ""
    authors: tuple[str, ...] = ()
    isbn: str = ""
    year: str = ""
    edition_year: str = ""
    description: str = ""
    language: str = ""
    tags: tuple[str, ...] = ()
    series: tuple[SeriesEntry, ...] = field(default_factory=tuple)
    category: str = ""
    type: str = ""
    genre: str = ""
    publisher: str = ""
    average_rating: str = ""
    num_pages: str = ""
    image_url: str = ""

    def __str__(self) -> str:
        if self.series:
            return f"{self.author} ({self.year}) {self.title} [{self.series[0]}]"
        return f"{self.author} ({self.year}) {self.title}"

    @property
    def author(self) -> str:
        """Joined author string for display."""
        return ", ".join(self.authors) if self.authors else UNKNOWN_AUTHOR

    @property
    def main_series(self) -> SeriesEntry | None:
        return self.series[0] if self.series else None

    def has_any(self) -> bool:
        """Whether anything was parsed at all (a title and a real author)."""
        return bool(self.title) and bool(self.authors)

    def is_complete(self) -> bool:
        """Whether every curated field holds a real value."""
        return all(
            (
                self.authors,
                self.title,
                self.year and self.year != UNKNOWN_YEAR,
                self.language,
                self.description,
                self.category and self.category != UNKNOWN,
                self.type and self.type != UNKNOWN,
                self.genre and self.genre != UNKNOWN,
                self.isbn,
                self.publisher,
                self.tags,
            )
        )

    def is_similar(self, other: "MetadataRecord") -> bool:
        """Two records describe the same book: same ISBN, or same author and title."""
        if self.isbn and other.isbn and self.isbn == other.isbn:
            return True
        return self.author == other.author and self.title == other.title
