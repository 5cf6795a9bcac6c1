"""
L4 Execution — Post-install smoke test.

Runs the installed binary with its help flag and looks for the
formula's marker string in the combined stdout/stderr (``ga --help 2>&1``).
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from binstall.core.services.installer.data.constants import DEFAULT_PROBE_TIMEOUT
from binstall.core.services.installer.errors import ProbeFailure

logger = logging.getLogger(__name__)


def probe_binary(
    path: Path,
    *,
    args: Sequence[str] = ("--help",),
    marker: str = "",
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> str:
    """Run ``path`` with ``args`` and confirm the output carries ``marker``.

    Returns:
        The combined output.

    Raises:
        ProbeFailure: The binary could not be executed, timed out,
            exited non-zero, or did not print the marker.
    """
    cmd = [str(path), *args]
    try:
        r = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ProbeFailure(f"'{' '.join(cmd)}' timed out after {timeout}s") from e
    except OSError as e:
        raise ProbeFailure(f"Cannot execute {path}: {e}") from e

    output = r.stdout or ""
    logger.debug("Probe output (exit %d): %s", r.returncode, output[:500])

    if r.returncode != 0:
        raise ProbeFailure(
            f"'{' '.join(cmd)}' exited with status {r.returncode}: {output[-200:].strip()}"
        )
    if marker and marker not in output:
        raise ProbeFailure(f"'{' '.join(cmd)}' output does not contain {marker!r}")

    return output
