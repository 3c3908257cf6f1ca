# ABOUTME: Exception hierarchy shared by the shelfwise core and its collaborators.
# ABOUTME: Validation and conflict errors carry the offending field for re-prompting.


class ShelfwiseError(Exception):
    """Base class for all errors raised by shelfwise."""


class ValidationError(ShelfwiseError):
    """Raised when a field setter rejects a value. Nothing is applied."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid value for {field}: {reason}")
        self.field = field
        self.reason = reason


class FieldNotFoundError(ShelfwiseError):
    """Raised for an unknown field name in get/set."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Invalid field: {field}")
        self.field = field


class ConflictUnresolved(ShelfwiseError):
    """Raised when no usable choice was obtained for a merge decision."""

    def __init__(self, field: str, reason: str = "no usable choice") -> None:
        super().__init__(f"Could not resolve {field}: {reason}")
        self.field = field
        self.reason = reason


class MergeAborted(ShelfwiseError):
    """Raised when the user explicitly aborts a refresh."""


class ExternalServiceError(ShelfwiseError):
    """Raised when the enrichment source cannot provide a record."""


class StorageError(ShelfwiseError):
    """Raised on snapshot or index read/write failure."""


class IndexOpenError(StorageError):
    """Raised when an index path exists but does not hold a valid index."""


class QuerySyntaxError(ShelfwiseError):
    """Raised when a search query cannot be translated."""
