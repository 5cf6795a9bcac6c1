"""
L4 Execution — Atomic binary placement.

Writes the verified binary into the install directory so that the
final path is either the previous version or the complete new
executable, never anything in between:

    temp file in the same directory → fsync → chmod 0755 → os.replace

The rename is the point of no return.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from binstall.core.models.install import InstallTarget
from binstall.core.services.installer.data.constants import BINARY_MODE
from binstall.core.services.installer.domain.archive import extract_binary
from binstall.core.services.installer.errors import FilesystemError

logger = logging.getLogger(__name__)


def place_binary(payload: bytes, target: InstallTarget) -> Path:
    """Atomically write ``payload`` to ``target.path`` as an executable.

    Raises:
        FilesystemError: Directory not creatable, not writable, out of
            space, or the rename failed. The temp file is removed and
            the final path is left untouched.
    """
    install_dir = target.install_dir
    final = target.path

    try:
        install_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=install_dir,
            prefix=f".{target.binary_name}_",
            suffix=".tmp",
        )
    except OSError as e:
        raise FilesystemError(f"Cannot write to {install_dir}: {e}") from e

    tmp = Path(tmp_name)
    try:
        with open(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, BINARY_MODE)
        os.replace(tmp, final)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise FilesystemError(f"Failed to install {final}: {e}") from e
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    logger.info("Installed %s (%d bytes)", final, len(payload))
    return final


def install(verified_bytes: bytes, target: InstallTarget) -> Path:
    """Extract the expected binary from a verified archive and place it.

    Raises:
        MalformedArchive: The archive does not hold exactly one
            top-level executable named ``target.binary_name``.
        FilesystemError: Placement failed (see :func:`place_binary`).
    """
    payload = extract_binary(verified_bytes, target.binary_name)
    return place_binary(payload, target)
