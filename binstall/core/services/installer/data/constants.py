"""
L0 Data — Module-level constants.

Pure data. No logic. No imports beyond stdlib.
"""

from __future__ import annotations

# ``platform.system()`` → OS family used in the release table.
_OS_MAP: dict[str, str] = {
    "Darwin": "macos",
    "Linux": "linux",
}

# ``platform.machine()`` → Go-style architecture name.
#
# Only arm64 and amd64 have release artifacts. Anything not listed
# here (armv7l, i686, riscv64, ...) is unsupported; there is no
# nearest-match fallback.
_ARCH_MAP: dict[str, str] = {
    "x86_64": "amd64",
    "AMD64": "amd64",      # Windows / WSL2
    "amd64": "amd64",      # FreeBSD
    "aarch64": "arm64",
    "arm64": "arm64",      # macOS (Darwin reports arm64)
    "ARM64": "arm64",
}

# Fetch tuning.
DEFAULT_TIMEOUT: float = 60.0
DEFAULT_PROBE_TIMEOUT: float = 10.0
CHUNK_SIZE: int = 64 * 1024

USER_AGENT_PREFIX = "binstall"

# Permissions of the installed binary.
BINARY_MODE: int = 0o755
