"""
Install models — the pipeline's target, transient results, and outcome.

``InstallOutcome`` is the caller-facing contract: the pipeline returns
one of ``installed``, ``installed_with_warning`` or ``failed``, never
raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from binstall.core.services.installer.errors import InstallError


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class PipelineState(str, Enum):
    """States of a single install run.

    ``FAILED`` and ``PROBED`` are the only terminal states.
    """

    START = "start"
    RESOLVED = "resolved"
    LOCATED = "located"
    FETCHED = "fetched"
    VERIFIED = "verified"
    INSTALLED = "installed"
    PROBED = "probed"
    FAILED = "failed"


class InstallTarget(BaseModel):
    """Where the binary is written. Fixed per invocation."""

    binary_name: str
    install_dir: Path

    @property
    def path(self) -> Path:
        return self.install_dir / self.binary_name


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of fetch-and-verify. Never persisted.

    Either verified (``data`` holds the archive bytes) or failed
    (``error`` holds the typed failure).
    """

    ok: bool
    data: bytes = b""
    digest: str = ""
    error: InstallError | None = None

    @classmethod
    def verified(cls, data: bytes, digest: str) -> VerificationResult:
        return cls(ok=True, data=data, digest=digest)

    @classmethod
    def failed(cls, error: InstallError) -> VerificationResult:
        return cls(ok=False, error=error)

    @property
    def reason(self) -> str:
        return str(self.error) if self.error is not None else ""


class InstallOutcome(BaseModel):
    """Result of one pipeline run."""

    status: Literal["installed", "installed_with_warning", "failed"]
    state: PipelineState = PipelineState.START
    states: list[PipelineState] = Field(default_factory=list)

    # Failure details (status == "failed")
    stage: str = ""                 # resolve, locate, fetch, verify, install
    error_type: str = ""            # error class name, e.g. VerificationFailure
    error: str | None = None

    # Probe warning (status == "installed_with_warning")
    warning: str | None = None

    formula: str = ""
    version: str = ""
    os: str = ""
    arch: str = ""
    url: str = ""
    digest: str = ""
    path: str = ""

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """Whether the binary ended up installed (probe warning or not)."""
        return self.status != "failed"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
