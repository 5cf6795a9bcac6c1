"""
Install ledger — append-only record of install runs.

Every pipeline run the CLI performs appends one line to an NDJSON
file in the state directory: what was asked for, which artifact and
digest were used, where the binary went, and how it ended. Entries
are never modified or deleted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from binstall.core.models.install import InstallOutcome

logger = logging.getLogger(__name__)


class InstallRecord(BaseModel):
    """A single ledger entry."""

    timestamp: str = ""
    formula: str = ""
    version: str = ""
    os: str = ""
    arch: str = ""
    url: str = ""
    digest: str = ""
    path: str = ""

    status: str = ""               # installed, installed_with_warning, failed
    stage: str = ""
    error_type: str = ""
    error: str | None = None
    warning: str | None = None
    duration_ms: int = 0

    states: list[str] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: InstallOutcome) -> InstallRecord:
        return cls(
            timestamp=outcome.ended_at,
            formula=outcome.formula,
            version=outcome.version,
            os=outcome.os,
            arch=outcome.arch,
            url=outcome.url,
            digest=outcome.digest,
            path=outcome.path,
            status=outcome.status,
            stage=outcome.stage,
            error_type=outcome.error_type,
            error=outcome.error,
            warning=outcome.warning,
            duration_ms=outcome.duration_ms,
            states=[s.value for s in outcome.states],
        )


class LedgerWriter:
    """Append-only install ledger.

    Each call to write() appends a single JSON line. The file and its
    directory are created on first write.
    """

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, record: InstallRecord) -> None:
        """Append a record. Ledger failures are logged, never fatal."""
        line = json.dumps(record.model_dump(mode="json"), ensure_ascii=False) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Ledger entry written: %s %s %s", record.formula, record.version, record.status)
        except OSError as e:
            logger.error("Failed to write install ledger %s: %s", self._path, e)

    def read_all(self) -> list[InstallRecord]:
        """All records, oldest first. Corrupt lines are skipped."""
        if not self._path.is_file():
            return []

        records: list[InstallRecord] = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        records.append(InstallRecord.model_validate(json.loads(line)))
                    except (json.JSONDecodeError, ValidationError) as e:
                        logger.warning("Skipping corrupt ledger entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read install ledger %s: %s", self._path, e)

        return records

    def read_recent(self, n: int = 20) -> list[InstallRecord]:
        """The most recent ``n`` records, newest first."""
        records = self.read_all()
        return list(reversed(records[-n:])) if n > 0 else []
