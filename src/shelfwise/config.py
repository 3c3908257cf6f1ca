# ABOUTME: Library locations and alias tables, read from an optional TOML config file.
# ABOUTME: A missing file means defaults; a malformed one is an error.

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from shelfwise.errors import ShelfwiseError
from shelfwise.metadata.aliases import AliasConfig

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_DIR = Path.home() / ".shelfwise"
CONFIG_FILENAME = "config.toml"
SNAPSHOT_FILENAME = "library.json"
INDEX_FILENAME = "index.db"


@dataclass(frozen=True)
class Config:
    """Where the library lives and how values are canonicalized."""

    library_dir: Path = DEFAULT_LIBRARY_DIR
    aliases: AliasConfig = field(default_factory=AliasConfig)

    @property
    def snapshot_path(self) -> Path:
        return self.library_dir / SNAPSHOT_FILENAME

    @property
    def index_path(self) -> Path:
        return self.library_dir / INDEX_FILENAME


def _parse(data: dict[str, Any], library_dir: Path | None) -> Config:
    aliases = data.get("aliases", {})
    if not isinstance(aliases, dict):
        raise ShelfwiseError("[aliases] must be a table")
    for section, entries in aliases.items():
        if not isinstance(entries, dict) or not all(
            isinstance(variants, list) for variants in entries.values()
        ):
            raise ShelfwiseError(
                f"[aliases.{section}] must map canonical names to lists of variants"
            )

    if library_dir is None:
        configured = data.get("library_dir")
        library_dir = Path(configured).expanduser() if configured else DEFAULT_LIBRARY_DIR
    return Config(library_dir=library_dir, aliases=AliasConfig.from_dict(aliases))


def load_config(path: Path | None = None, library_dir: Path | None = None) -> Config:
    """Load configuration.

    Args:
        path: Config file. Defaults to ``config.toml`` inside the library directory.
        library_dir: Overrides the library directory named in the file.

    Raises:
        ShelfwiseError: The file exists but cannot be read or parsed.
    """
    config_path = path or (library_dir or DEFAULT_LIBRARY_DIR) / CONFIG_FILENAME
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.debug("No config file at %s, using defaults", config_path)
        return Config(library_dir=library_dir or DEFAULT_LIBRARY_DIR)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ShelfwiseError(f"Could not read config {config_path}: {exc}") from exc
    return _parse(data, library_dir)
