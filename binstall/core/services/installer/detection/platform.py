"""
L3 Detection — Host platform resolution.

Read-only probes of the running OS family and CPU architecture.
No network, no user input, no side effects.
"""

from __future__ import annotations

import logging
import platform
import subprocess

from binstall.core.services.installer.data.constants import _ARCH_MAP, _OS_MAP
from binstall.core.services.installer.errors import UnsupportedPlatform

logger = logging.getLogger(__name__)


def _is_rosetta_translated() -> bool:
    """Whether this macOS process runs under Rosetta 2 translation.

    An x86-64 Python on Apple silicon reports ``x86_64`` from
    ``platform.machine()``; the kernel still knows the truth.
    """
    try:
        r = subprocess.run(
            ["sysctl", "-n", "sysctl.proc_translated"],
            capture_output=True, text=True, timeout=5,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return r.returncode == 0 and r.stdout.strip() == "1"


def resolve(
    system: str | None = None,
    machine: str | None = None,
) -> tuple[str, str]:
    """Resolve the host to an ``(os, arch)`` pair.

    Args:
        system: ``platform.system()``-style name. Detected when None.
        machine: ``platform.machine()``-style name. Detected when None.

    Returns:
        ``("macos" | "linux", "arm64" | "amd64")``.

    Raises:
        UnsupportedPlatform: For any other OS or architecture.
    """
    detected = system is None and machine is None
    system = system if system is not None else platform.system()
    machine = machine if machine is not None else platform.machine()

    os_name = _OS_MAP.get(system)
    arch = _ARCH_MAP.get(machine)

    if os_name is None or arch is None:
        raise UnsupportedPlatform(
            f"Unsupported platform: {system or '?'}/{machine or '?'} "
            f"(supported: macos or linux on arm64 or amd64)"
        )

    if detected and os_name == "macos" and arch == "amd64" and _is_rosetta_translated():
        logger.info("Running under Rosetta 2 — using native arm64 artifact")
        arch = "arm64"

    logger.debug("Resolved platform %s/%s → %s/%s", system, machine, os_name, arch)
    return os_name, arch
