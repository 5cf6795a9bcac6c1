"""
L1 Domain — Release archive inspection (pure).

Pulls the single expected binary out of verified archive bytes.
Works entirely in memory. No filesystem writes.
"""

from __future__ import annotations

import io
import logging
import tarfile
import zipfile

from binstall.core.services.installer.errors import MalformedArchive

logger = logging.getLogger(__name__)

# Unix host id in ZipInfo.create_system
_ZIP_UNIX = 3


def _top_level_name(name: str) -> str | None:
    """Return ``name`` if it sits at the archive root, else None."""
    while name.startswith("./"):
        name = name[2:]
    name = name.rstrip("/")
    if not name or name in (".", "..") or "/" in name:
        return None
    return name


def _tar_candidates(data: bytes) -> dict[str, bytes]:
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tf:
            found: dict[str, bytes] = {}
            for member in tf.getmembers():
                if not member.isreg():
                    continue
                name = _top_level_name(member.name)
                if name is None or not member.mode & 0o111:
                    continue
                fh = tf.extractfile(member)
                if fh is None:
                    continue
                if name in found:
                    raise MalformedArchive(f"Archive lists '{name}' more than once")
                found[name] = fh.read()
            return found
    except (tarfile.TarError, EOFError, OSError) as e:
        raise MalformedArchive(f"Unreadable tar archive: {e}") from e


def _zip_candidates(data: bytes) -> dict[str, bytes]:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            found: dict[str, bytes] = {}
            for info in zf.infolist():
                if info.is_dir():
                    continue
                name = _top_level_name(info.filename)
                if name is None:
                    continue
                mode = info.external_attr >> 16
                # Non-unix zips carry no permission bits
                if info.create_system == _ZIP_UNIX and not mode & 0o111:
                    continue
                if name in found:
                    raise MalformedArchive(f"Archive lists '{name}' more than once")
                found[name] = zf.read(info)
            return found
    except (zipfile.BadZipFile, OSError) as e:
        raise MalformedArchive(f"Unreadable zip archive: {e}") from e


def archive_format(data: bytes) -> str:
    """Detect the archive format from its bytes: ``zip`` or ``tar``."""
    if zipfile.is_zipfile(io.BytesIO(data)):
        return "zip"
    return "tar"


def extract_binary(data: bytes, binary_name: str) -> bytes:
    """Return the contents of the one executable entry named ``binary_name``.

    The archive must hold exactly one top-level executable regular
    file. Zero or several is an ambiguous or malformed release; this
    never guesses which file to install.

    Raises:
        MalformedArchive: Unreadable archive, wrong entry count, or the
            single executable has an unexpected name.
    """
    fmt = archive_format(data)
    candidates = _zip_candidates(data) if fmt == "zip" else _tar_candidates(data)

    if not candidates:
        raise MalformedArchive(
            f"No top-level executable in {fmt} archive (expected '{binary_name}')"
        )
    if len(candidates) > 1:
        names = ", ".join(sorted(candidates))
        raise MalformedArchive(
            f"Ambiguous {fmt} archive: {len(candidates)} top-level executables ({names})"
        )

    (name, payload), = candidates.items()
    if name != binary_name:
        raise MalformedArchive(
            f"Archive executable is '{name}', expected '{binary_name}'"
        )

    logger.debug("Extracted %s (%d bytes) from %s archive", name, len(payload), fmt)
    return payload
