"""
Configuration loader — reads a release table YAML into domain models.

This is the primary entry point for loading the release table. It
reads YAML, validates against Pydantic schemas, and returns the
flattened, indexed :class:`ReleaseTable`. The table is loaded once
per invocation and treated as immutable afterwards.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from binstall.core.data import DEFAULT_TABLE
from binstall.core.models.release import ReleaseTable, TableDecl

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the release table or settings are invalid or missing."""


def load_table(path: Path | None = None) -> ReleaseTable:
    """Load and validate a release table.

    Args:
        path: Path to the table YAML. Defaults to the bundled table.

    Returns:
        Validated ReleaseTable, one row per (version, os, arch).

    Raises:
        ConfigError: If the file is missing, not YAML, or invalid.
    """
    if path is None:
        path = DEFAULT_TABLE

    if not path.is_file():
        raise ConfigError(f"Release table not found: {path}")

    logger.debug("Loading release table from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        table = TableDecl.model_validate(data).to_table()
    except ValueError as e:
        raise ConfigError(f"Invalid release table {path}: {e}") from e

    pending = sum(1 for a in table.artifacts if not a.has_digest)
    logger.info(
        "Loaded release table '%s': %d artifacts across %d versions (%d pending digests)",
        table.formula.name, len(table.artifacts), len(table.versions()), pending,
    )
    return table
