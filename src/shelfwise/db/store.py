# ABOUTME: Persists the whole collection as one pretty-printed JSON snapshot.
# ABOUTME: Saving is idempotent: the file is only rewritten when its bytes would change.

import json
import logging
import os
import tarfile
import tempfile
from pathlib import Path

from shelfwise.db.collection import Collection
from shelfwise.db.mapping import collection_to_list, list_to_collection
from shelfwise.errors import StorageError

logger = logging.getLogger(__name__)

_INDENT = 4


def serialize(collection: Collection) -> bytes:
    """Deterministic snapshot bytes: sorted keys, fixed indentation, trailing newline."""
    text = json.dumps(
        collection_to_list(collection), indent=_INDENT, sort_keys=True, ensure_ascii=False
    )
    return (text + "\n").encode("utf-8")


class CollectionStore:
    """Snapshot file holding a collection.

    A missing file is a valid, empty collection (first run). Every other
    read or write failure is raised as StorageError.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _read_bytes(self) -> bytes | None:
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Could not read snapshot {self._path}: {exc}") from exc

    def load(self) -> Collection:
        """Read the snapshot. Returns an empty collection if none exists yet.

        Raises:
            StorageError: Unreadable or malformed snapshot.
        """
        content = self._read_bytes()
        if content is None:
            logger.debug("No snapshot at %s, starting empty", self._path)
            return Collection()
        try:
            return list_to_collection(json.loads(content))
        except (ValueError, TypeError, KeyError) as exc:
            raise StorageError(f"Malformed snapshot {self._path}: {exc}") from exc

    def save(self, collection: Collection) -> bool:
        """Write the collection if it differs from what is on disk.

        The new snapshot is written to a temporary file and moved into
        place, so a failure leaves the previous snapshot intact.

        Returns:
            True if the file was written, False if it was already up to date.

        Raises:
            StorageError: Serialization or write failure.
        """
        try:
            content = serialize(collection)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Could not serialize collection: {exc}") from exc

        if content == self._read_bytes():
            return False

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as tmp:
                    tmp.write(content)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Could not write snapshot {self._path}: {exc}") from exc

        logger.info("Saved %d book(s) to %s", len(collection), self._path)
        return True

    def equals(self, other: "CollectionStore") -> bool:
        """Same bytes on disk, or neither snapshot exists."""
        try:
            return self._read_bytes() == other._read_bytes()
        except StorageError:
            return False

    def backup(self, destination: Path) -> Path:
        """Write a gzipped tarball containing the snapshot.

        Raises:
            StorageError: Missing destination directory or snapshot, or write failure.
        """
        if not destination.parent.is_dir():
            raise StorageError(f"Backup directory {destination.parent} does not exist")
        if not self._path.is_file():
            raise StorageError(f"No snapshot to back up at {self._path}")
        try:
            with tarfile.open(destination, "w:gz") as tar:
                tar.add(self._path, arcname=self._path.name)
        except (OSError, tarfile.TarError) as exc:
            raise StorageError(f"Could not write backup {destination}: {exc}") from exc
        logger.info("Backed up %s to %s", self._path, destination)
        return destination
