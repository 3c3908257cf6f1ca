# ABOUTME: Refresh flow: fetch enrichment data, show the diff, then edit or abort.
# ABOUTME: Degrades to manual entry when the enrichment source has nothing to offer.

import logging
from collections.abc import Callable, Sequence

from shelfwise.errors import ConflictUnresolved, ExternalServiceError, MergeAborted
from shelfwise.metadata.aliases import AliasConfig
from shelfwise.metadata.merger import ConflictResolver, DiffRow, diff_rows, reconcile
from shelfwise.metadata.normalizer import clean_record
from shelfwise.metadata.provider import EnrichmentSource
from shelfwise.metadata.types import MetadataRecord

logger = logging.getLogger(__name__)

# Invalid answers tolerated at the edit/abort prompt; one more aborts the refresh.
MAX_INVALID_CHOICES = 10

# Shown the local record, the online record and their diff; returns "e" or "a".
ActionPrompt = Callable[[MetadataRecord, MetadataRecord, list[DiffRow]], str]


def fetch_online(
    record: MetadataRecord, source: EnrichmentSource, config: AliasConfig | None = None
) -> MetadataRecord:
    """Find and fetch the enrichment record for ``record``, cleaned.

    Raises:
        ExternalServiceError: The source found nothing or failed.
    """
    source_id = source.find_id(record)
    online = source.get_record(source_id, record.isbn or None)
    return clean_record(online, config)


def choose_action(
    local: MetadataRecord, online: MetadataRecord, prompt: ActionPrompt
) -> str:
    """Ask for "e" (edit) or "a" (abort), tolerating up to MAX_INVALID_CHOICES bad answers.

    Raises:
        ConflictUnresolved: Too many invalid answers.
    """
    rows = diff_rows(local, online)
    invalid = 0
    while True:
        choice = prompt(local, online, rows).strip().lower()
        if choice in ("e", "a"):
            return choice
        invalid += 1
        logger.warning("Invalid choice %r", choice)
        if invalid > MAX_INVALID_CHOICES:
            raise ConflictUnresolved("action", "too many invalid choices")


def refresh_metadata(
    record: MetadataRecord,
    source: EnrichmentSource,
    resolver: ConflictResolver,
    config: AliasConfig | None = None,
    *,
    prompt: ActionPrompt,
    fields: Sequence[str] | None = None,
) -> MetadataRecord:
    """Reconcile ``record`` with what the enrichment source knows about it.

    When nothing can be fetched, every field is reviewed against an empty
    record instead. Otherwise the user sees the diff and either edits
    (all fields, or only ``fields``) or aborts.

    Raises:
        MergeAborted: The user chose to abort.
        ConflictUnresolved: Too many invalid answers, or the resolver gave up.
        ValidationError: A chosen value was rejected.
    """
    try:
        online = fetch_online(record, source, config)
    except ExternalServiceError as exc:
        logger.warning("Could not retrieve information from %s: %s", source.name, exc)
        logger.warning("Manual review.")
        return reconcile(record, MetadataRecord(), resolver, config)

    if choose_action(record, online, prompt) == "a":
        raise MergeAborted(f"Refresh of {record} aborted")
    return reconcile(record, online, resolver, config, fields=fields)
