"""
Table check use case — validate a release table and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from binstall.core.config.loader import ConfigError, load_table
from binstall.core.models.release import ReleaseTable

_PLATFORMS = [(o, a) for o in ("macos", "linux") for a in ("arm64", "amd64")]


@dataclass
class TableCheckResult:
    """Result of release table validation."""

    valid: bool = False
    table: ReleaseTable | None = None
    table_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "table_path": str(self.table_path) if self.table_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "formula": self.table.formula.name if self.table else None,
            "artifact_count": len(self.table.artifacts) if self.table else 0,
            "versions": self.table.versions() if self.table else [],
        }


def check_table(table_path: Path | None = None) -> TableCheckResult:
    """Validate a release table.

    Structural problems (bad YAML, duplicate rows, unknown platforms)
    are errors. Placeholder digests and versions missing a platform
    are warnings: the table loads, those rows just cannot install.
    """
    result = TableCheckResult(table_path=table_path)

    try:
        table = load_table(table_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    result.table = table

    if not table.artifacts:
        result.warnings.append("No artifacts declared. Nothing can be installed.")

    for art in table.artifacts:
        if not art.has_digest:
            result.warnings.append(
                f"{art.version} {art.os}/{art.arch}: sha256 not published ({art.digest})"
            )
        if not art.url.startswith(("https://", "file://")):
            result.warnings.append(
                f"{art.version} {art.os}/{art.arch}: URL is not https ({art.url})"
            )

    for version in table.versions():
        missing = [f"{o}/{a}" for o, a in _PLATFORMS if table.get(version, o, a) is None]
        if missing:
            result.warnings.append(f"{version}: no artifact for {', '.join(missing)}")

    if not table.formula.probe.marker:
        result.warnings.append("Probe has no marker string; only the exit status is checked.")

    result.valid = not result.errors
    return result
