# ABOUTME: Alias tables mapping canonical names to their interchangeable variants.
# ABOUTME: Also holds the forbidden shelf-noise words and the category/type keyword sets.

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from shelfwise.metadata.types import UNKNOWN


class AliasTable:
    """Canonical name -> variants mapping.

    Lookups try canonical names in lexicographic order, so a value listed as
    a variant of two canonical names always resolves to the smallest one.
    """

    def __init__(self, entries: Mapping[str, Iterable[str]] | None = None) -> None:
        self._entries: dict[str, tuple[str, ...]] = {}
        for canonical, variants in (entries or {}).items():
            self._entries[canonical] = tuple(variants)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AliasTable):
            return NotImplemented
        return self._entries == other._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AliasTable({self._entries!r})"

    def resolve(self, value: str) -> str:
        """Return the canonical alias for a known variant, or the value unchanged.

        A canonical name that is itself listed as a variant is followed on to
        its own canonical name. A cycle resolves to its smallest member, so
        resolving a resolved value never changes it.
        """
        seen = [value]
        while True:
            canonical = self._lookup(seen[-1])
            if canonical == seen[-1]:
                return canonical
            if canonical in seen:
                return min(seen[seen.index(canonical) :])
            seen.append(canonical)

    def _lookup(self, value: str) -> str:
        for canonical in sorted(self._entries):
            if value in self._entries[canonical]:
                return canonical
        return value

    def merged(self, other: "AliasTable") -> "AliasTable":
        """Union of both tables; variants of a shared canonical name are combined."""
        combined: dict[str, list[str]] = {k: list(v) for k, v in self._entries.items()}
        for canonical, variants in other._entries.items():
            bucket = combined.setdefault(canonical, [])
            bucket.extend(v for v in variants if v not in bucket)
        return AliasTable(combined)

    def as_dict(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._entries.items()}


DEFAULT_LANGUAGE_ALIASES = AliasTable(
    {
        "en": ["en-US", "en-GB", "eng"],
        "fr": ["fr-FR", "fre", "fra"],
        "de": ["de-DE", "ger", "deu"],
        "es": ["es-ES", "spa"],
        "it": ["it-IT", "ita"],
    }
)

DEFAULT_TAG_ALIASES = AliasTable(
    {
        "science-fiction": [
            "sf",
            "sci-fi",
            "scifi-fantasy",
            "scifi",
            "science fiction",
            "sciencefiction",
            "sci-fi-fantasy",
        ],
        "fantasy": ["fantasy-sci-fi", "fantasy-scifi", "fantasy-fiction"],
        "dystopia": ["dystopian"],
    }
)

# Shelf names that are obviously not genres. A tag containing any of these is dropped.
FORBIDDEN_TAG_WORDS = (
    "own",
    "school",
    "favorite",
    "favourite",
    "book",
    "adult",
    "read",
    "kindle",
    "borrowed",
    "classic",
    "novel",
    "buy",
    "star",
    "release",
    "wait",
    "soon",
    "wish",
    "published",
    "want",
    "tbr",
    "series",
    "finish",
    "to-",
    "not-",
    "library",
    "audible",
    "coming",
    "anticipated",
    "default",
    "recommended",
    "-list",
    "sequel",
    "general",
    "have",
    "bundle",
)

MAX_TAGS = 10

FICTION = "fiction"
NONFICTION = "nonfiction"

# Canonical value -> keywords that classify into it. Order is the scan order.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    FICTION: ("fiction",),
    NONFICTION: ("nonfiction", "non-fiction", "non fiction"),
}

TYPE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "essay": ("essay", "essays"),
    "biography": ("biography", "biographies"),
    "autobiography": ("autobiography",),
    "memoir": ("memoir", "memoirs"),
    "novel": ("novel",),
    "novella": ("novella", "novellas"),
    "short-stories": ("short-stories", "short stories", "short-story", "short story"),
    "anthology": ("anthology", "anthologies"),
    "poetry": ("poetry", "poems"),
    "play": ("play", "plays", "theatre"),
    "graphic-novel": ("graphic-novel", "graphic novel", "comics", "comic"),
    "reference": ("reference",),
    "textbook": ("textbook", "textbooks"),
}

VALID_CATEGORIES = tuple(CATEGORY_KEYWORDS)
VALID_TYPES = tuple(TYPE_KEYWORDS)


@dataclass(frozen=True)
class AliasConfig:
    """Alias tables threaded through cleaning and merging.

    Tag and language tables start from the built-in defaults; whatever the
    configuration file supplies is merged on top.
    """

    authors: AliasTable = field(default_factory=AliasTable)
    tags: AliasTable = field(default_factory=lambda: DEFAULT_TAG_ALIASES)
    publishers: AliasTable = field(default_factory=AliasTable)
    languages: AliasTable = field(default_factory=lambda: DEFAULT_LANGUAGE_ALIASES)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AliasConfig":
        """Build from a ``{"authors": {canonical: [variants]}, ...}`` mapping."""
        return cls(
            authors=AliasTable(data.get("authors", {})),
            tags=DEFAULT_TAG_ALIASES.merged(AliasTable(data.get("tags", {}))),
            publishers=AliasTable(data.get("publishers", {})),
            languages=DEFAULT_LANGUAGE_ALIASES.merged(AliasTable(data.get("languages", {}))),
        )


def classify(value: str, keywords: Mapping[str, tuple[str, ...]]) -> str | None:
    """Map a free-form value onto a closed enum, or None if no keyword matches."""
    candidate = value.strip().lower()
    if candidate == UNKNOWN:
        return UNKNOWN
    for canonical, words in keywords.items():
        if candidate == canonical or candidate in words:
            return canonical
    return None
