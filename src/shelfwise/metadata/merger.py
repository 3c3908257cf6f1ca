# ABOUTME: Field-by-field reconciliation of local metadata with an enrichment record.
# ABOUTME: Conflicts go through an injected ConflictResolver; results are validated and cleaned.

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Protocol, runtime_checkable

from shelfwise.metadata.aliases import VALID_CATEGORIES, VALID_TYPES, AliasConfig
from shelfwise.metadata.fields import get_spec, set_field
from shelfwise.metadata.normalizer import clean_record
from shelfwise.metadata.types import UNKNOWN, UNKNOWN_AUTHOR, UNKNOWN_YEAR, MetadataRecord

logger = logging.getLogger(__name__)

MERGE_FIELDS = (
    "title",
    "author",
    "year",
    "edition_year",
    "publisher",
    "description",
    "language",
    "category",
    "type",
    "genre",
    "tags",
    "series",
    "isbn",
)

# Closed enums offer every value; free text would only fail validation.
_CLOSED_FIELDS = {"category": VALID_CATEGORIES, "type": VALID_TYPES}


@runtime_checkable
class ConflictResolver(Protocol):
    """Decides the value of one field when local and online data are reconciled.

    Implementations return the chosen value (one of ``options`` or, when
    ``allow_free_text`` is set, anything the user typed) or raise
    ConflictUnresolved to cancel the merge.
    """

    def resolve(
        self,
        field: str,
        label: str,
        usage: str,
        options: Sequence[str],
        allow_free_text: bool,
    ) -> str: ...


@dataclass(frozen=True)
class DiffRow:
    """One field compared across the local and online records."""

    field: str
    local: str
    online: str

    @property
    def differs(self) -> bool:
        return self.local != self.online


def _dedupe(values: Iterable[str]) -> list[str]:
    options: list[str] = []
    for value in values:
        if value and value not in options:
            options.append(value)
    return options


def merge_options(field: str, local_value: str, online_value: str) -> list[str]:
    """Candidate values offered for a field: local, online, then the field's sentinel(s)."""
    if field in ("year", "edition_year"):
        sentinels: Sequence[str] = (UNKNOWN_YEAR,)
    elif field == "author":
        sentinels = (UNKNOWN_AUTHOR,)
    elif field in _CLOSED_FIELDS:
        sentinels = (*_CLOSED_FIELDS[field], UNKNOWN)
    else:
        sentinels = (UNKNOWN,)
    return _dedupe((local_value, online_value, *sentinels))


def diff_rows(
    local: MetadataRecord, online: MetadataRecord, *, diff_only: bool = False
) -> list[DiffRow]:
    """Side-by-side display values for every merge field."""
    rows = []
    for field in MERGE_FIELDS:
        spec = get_spec(field)
        row = DiffRow(field=field, local=spec.get(local), online=spec.get(online))
        if not diff_only or row.differs:
            rows.append(row)
    return rows


def merge_field(
    local: MetadataRecord,
    online: MetadataRecord,
    field: str,
    resolver: ConflictResolver,
    config: AliasConfig | None = None,
    *,
    diff_only: bool = False,
) -> MetadataRecord:
    """Ask the resolver for one field's value and set it through the validating setter.

    Raises:
        FieldNotFoundError: Unknown field.
        ValidationError: The chosen value was rejected; nothing is applied.
        ConflictUnresolved: The resolver gave up.
    """
    spec = get_spec(field)
    current = spec.get(local)
    candidate = spec.get(online)
    if diff_only and current == candidate:
        return local

    options = merge_options(spec.name, current, candidate)
    choice = resolver.resolve(
        spec.name,
        spec.label,
        spec.usage,
        options,
        spec.name not in _CLOSED_FIELDS,
    )
    logger.debug("Merged %s: %r", spec.name, choice)
    return set_field(local, spec.name, choice, config)


def copy_enrichment_fields(local: MetadataRecord, online: MetadataRecord) -> MetadataRecord:
    """Copy the fields local extraction can never produce."""
    return replace(
        local,
        image_url=online.image_url,
        num_pages=online.num_pages,
        average_rating=online.average_rating,
    )


def reconcile(
    local: MetadataRecord,
    online: MetadataRecord,
    resolver: ConflictResolver,
    config: AliasConfig | None = None,
    *,
    diff_only: bool = False,
    fields: Sequence[str] | None = None,
) -> MetadataRecord:
    """Merge an enrichment record into a local one, field by field.

    Every field in ``fields`` (default: all MERGE_FIELDS) is adjudicated by
    the resolver; the first rejected value aborts the whole merge. The
    enrichment-only fields are then copied and the result is cleaned again,
    since free-text answers skip alias and category inference.
    """
    merged = local
    for field in fields or MERGE_FIELDS:
        merged = merge_field(merged, online, field, resolver, config, diff_only=diff_only)
    merged = copy_enrichment_fields(merged, online)
    return clean_record(merged, config)
