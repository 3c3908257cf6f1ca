# ABOUTME: Metadata package: the record type, cleaning, field access, and reconciliation.
# ABOUTME: Exports the names most callers need from the submodules.

from shelfwise.metadata.aliases import AliasConfig, AliasTable
from shelfwise.metadata.fields import get_field, set_field
from shelfwise.metadata.merger import ConflictResolver, reconcile
from shelfwise.metadata.normalizer import clean_isbn, clean_record, clean_tags
from shelfwise.metadata.provider import EnrichmentSource
from shelfwise.metadata.types import MetadataRecord, SeriesEntry

__all__ = [
    "AliasConfig",
    "AliasTable",
    "ConflictResolver",
    "EnrichmentSource",
    "MetadataRecord",
    "SeriesEntry",
    "clean_isbn",
    "clean_record",
    "clean_tags",
    "get_field",
    "reconcile",
    "set_field",
]
