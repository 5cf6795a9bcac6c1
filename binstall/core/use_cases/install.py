"""
Install use case — run the pipeline as a well-behaved caller.

The pipeline assumes it is the only writer of the install directory.
This caller makes that true by holding an exclusive lock keyed on the
directory for the whole run, then records the outcome in the ledger.
The lock file lives in the state directory, never next to the binary.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from pathlib import Path

import portalocker

from binstall.core.config.settings import Settings
from binstall.core.models.install import InstallOutcome
from binstall.core.models.release import ReleaseTable
from binstall.core.persistence.ledger import InstallRecord, LedgerWriter
from binstall.core.services.installer.orchestration.pipeline import install_formula

logger = logging.getLogger(__name__)


def lock_path_for(settings: Settings, install_dir: Path) -> Path:
    """Lock file for one install directory (stable across invocations)."""
    key = hashlib.sha256(str(install_dir.resolve()).encode("utf-8")).hexdigest()[:16]
    return settings.lock_dir / f"{key}.lock"


def run_install(
    table: ReleaseTable,
    settings: Settings,
    *,
    version: str | None = None,
    platform: tuple[str, str] | None = None,
    cancel: threading.Event | None = None,
    record: bool = True,
) -> InstallOutcome:
    """Install the table's formula under the install-directory lock.

    Args:
        table: Loaded release table.
        settings: Resolved settings (install dir, timeouts, state dir).
        version: Exact version, or None for the newest.
        platform: ``(system, machine)`` override, mainly for testing.
        cancel: Cancellation flag passed through to the pipeline.
        record: Append the outcome to the install ledger.
    """
    lock_path = lock_path_for(settings, settings.install_dir)
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    logger.debug("Acquiring install lock %s for %s", lock_path, settings.install_dir)
    try:
        with portalocker.Lock(
            str(lock_path),
            mode="a",
            timeout=settings.lock_timeout,
            flags=portalocker.LOCK_EX | portalocker.LOCK_NB,
        ):
            outcome = install_formula(
                table,
                install_dir=settings.install_dir,
                version=version,
                timeout=settings.timeout,
                probe_timeout=settings.probe_timeout,
                platform=platform,
                cancel=cancel,
            )
    except portalocker.exceptions.LockException as e:
        logger.error("Another install into %s is in progress: %s", settings.install_dir, e)
        outcome = InstallOutcome(
            status="failed",
            stage="lock",
            error_type="LockTimeout",
            error=(
                f"Another install into {settings.install_dir} is in progress "
                f"(waited {settings.lock_timeout:g}s)"
            ),
            formula=table.formula.name,
        )

    if record:
        LedgerWriter(settings.ledger_path).write(InstallRecord.from_outcome(outcome))

    return outcome
