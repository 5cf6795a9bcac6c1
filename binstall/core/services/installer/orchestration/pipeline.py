"""
L5 Orchestration — The verified-install pipeline.

Ties the stages together, strictly forward:

    Start → Resolved → Located → Fetched → Verified → Installed → Probed

Any stage may fail, which ends the run in ``Failed``. Errors raised by
the stages are typed (see ``errors.py``); this module converts them
into an :class:`InstallOutcome` once, at the boundary, and never
raises itself. Only a probe failure is non-fatal.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import UTC, datetime
from pathlib import Path

from binstall.core.models.install import InstallOutcome, InstallTarget, PipelineState
from binstall.core.models.release import ReleaseArtifact, ReleaseTable
from binstall.core.services.installer.data.constants import (
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_TIMEOUT,
)
from binstall.core.services.installer.detection.platform import resolve
from binstall.core.services.installer.domain.locator import locate
from binstall.core.services.installer.errors import (
    InstallCancelled,
    InstallError,
    ProbeFailure,
    TimeoutFailure,
)
from binstall.core.services.installer.execution.fetch import fetch_and_verify
from binstall.core.services.installer.execution.placement import install
from binstall.core.services.installer.execution.probe import probe_binary

logger = logging.getLogger(__name__)

# Legal transitions. FAILED is reachable from every non-terminal state.
_NEXT: dict[PipelineState, PipelineState] = {
    PipelineState.START: PipelineState.RESOLVED,
    PipelineState.RESOLVED: PipelineState.LOCATED,
    PipelineState.LOCATED: PipelineState.FETCHED,
    PipelineState.FETCHED: PipelineState.VERIFIED,
    PipelineState.VERIFIED: PipelineState.INSTALLED,
    PipelineState.INSTALLED: PipelineState.PROBED,
}


class _Run:
    """Tracks the state machine and the facts gathered along the way."""

    def __init__(self, formula: str) -> None:
        self.state = PipelineState.START
        self.states: list[PipelineState] = [PipelineState.START]
        self.started = time.monotonic()
        self.started_at = datetime.now(UTC).isoformat()
        self.facts: dict[str, str] = {"formula": formula}

    def advance(self, new: PipelineState) -> None:
        expected = _NEXT.get(self.state)
        if new is not expected:
            raise RuntimeError(f"Illegal pipeline transition {self.state.value} → {new.value}")
        logger.debug("Pipeline %s → %s", self.state.value, new.value)
        self.state = new
        self.states.append(new)

    def record(self, artifact: ReleaseArtifact) -> None:
        self.facts.update(
            version=artifact.version, os=artifact.os, arch=artifact.arch,
            url=artifact.url, digest=artifact.digest.lower(),
        )

    def outcome(self, status: str, **kwargs: object) -> InstallOutcome:
        return InstallOutcome(
            status=status,
            state=self.state,
            states=list(self.states),
            started_at=self.started_at,
            duration_ms=int((time.monotonic() - self.started) * 1000),
            **self.facts,
            **kwargs,
        )

    def fail(self, error: InstallError) -> InstallOutcome:
        self.state = PipelineState.FAILED
        self.states.append(PipelineState.FAILED)
        logger.error("Install failed at %s: %s", error.stage, error)
        return self.outcome(
            "failed",
            stage=error.stage,
            error_type=type(error).__name__,
            error=str(error),
        )


def install_formula(
    table: ReleaseTable,
    *,
    install_dir: Path,
    version: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
    platform: tuple[str, str] | None = None,
    cancel: threading.Event | None = None,
) -> InstallOutcome:
    """Run the full pipeline once for the formula in ``table``.

    Args:
        table: Loaded release table.
        install_dir: Directory that receives the binary.
        version: Exact version to install, or None for the newest.
        timeout: Seconds for fetch and placement together.
        probe_timeout: Seconds for the post-install probe.
        platform: ``(system, machine)`` override for the resolver,
            e.g. ``("Darwin", "arm64")``. Detected when None.
        cancel: Caller's cancellation flag. Honoured up to the atomic
            rename; ignored afterwards.

    Returns:
        An :class:`InstallOutcome` with status ``installed``,
        ``installed_with_warning`` or ``failed``.
    """
    formula = table.formula
    run = _Run(formula.name)
    deadline = time.monotonic() + timeout

    try:
        # ── Resolve ──
        if platform is not None:
            os_name, arch = resolve(*platform)
        else:
            os_name, arch = resolve()
        run.facts.update(os=os_name, arch=arch)
        run.advance(PipelineState.RESOLVED)

        # ── Locate ──
        artifact = locate(table, os_name, arch, version)
        run.record(artifact)
        run.advance(PipelineState.LOCATED)
        logger.info("Installing %s %s for %s/%s", formula.name, artifact.version, os_name, arch)

        # ── Fetch + verify ──
        result = fetch_and_verify(
            artifact,
            timeout=max(deadline - time.monotonic(), 0.0),
            cancel=cancel,
        )
        if result.error is not None and result.error.stage != "verify":
            raise result.error
        run.advance(PipelineState.FETCHED)
        if result.error is not None:
            raise result.error
        run.advance(PipelineState.VERIFIED)

        # ── Install (point of no return is the rename inside) ──
        if cancel is not None and cancel.is_set():
            raise InstallCancelled("Cancelled before install", stage="install")
        if time.monotonic() > deadline:
            raise TimeoutFailure("Time budget exhausted before install", stage="install")

        target = InstallTarget(binary_name=formula.binary_name, install_dir=install_dir)
        path = install(result.data, target)
        run.facts["path"] = str(path)
        run.advance(PipelineState.INSTALLED)
    except InstallError as e:
        return run.fail(e)

    # ── Probe (non-fatal) ──
    try:
        probe_binary(
            path,
            args=formula.probe.args,
            marker=formula.probe.marker,
            timeout=probe_timeout,
        )
    except ProbeFailure as e:
        run.advance(PipelineState.PROBED)
        logger.warning("Installed %s but could not confirm it works: %s", path, e)
        return run.outcome("installed_with_warning", warning=str(e))

    run.advance(PipelineState.PROBED)
    logger.info("Installed and probed %s", path)
    return run.outcome("installed")
