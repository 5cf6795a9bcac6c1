"""
L1 Domain — Artifact lookup (pure).

Maps ``(os, arch, version)`` to exactly one declared release
artifact, or fails. No I/O, no subprocess.
"""

from __future__ import annotations

import re

from binstall.core.models.release import ReleaseArtifact, ReleaseTable
from binstall.core.services.installer.errors import ArtifactNotFound

_SEMVER_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-.]?(.*))?$")


def version_key(version: str) -> tuple:
    """Sort key for semantic version strings.

    ``1.2.0-rc1`` sorts before ``1.2.0``. Build metadata (``+build.5``)
    is ignored. Unparseable versions sort before everything else.
    """
    m = _SEMVER_RE.match(version.strip().split("+", 1)[0])
    if not m:
        return (-1, -1, -1, 0, version)
    major, minor, patch, pre = m.groups()
    release = (int(major), int(minor or 0), int(patch or 0))
    # A release without a pre-release tag outranks any tagged one
    return (*release, 0 if pre else 1, pre or "")


def latest_version(table: ReleaseTable, os_name: str, arch: str) -> str | None:
    """Newest version that declares an artifact for exactly (os, arch)."""
    candidates = [a.version for a in table.artifacts if a.os == os_name and a.arch == arch]
    if not candidates:
        return None
    return max(candidates, key=version_key)


def locate(
    table: ReleaseTable,
    os_name: str,
    arch: str,
    version: str | None = None,
) -> ReleaseArtifact:
    """Exact lookup of the artifact for ``(os, arch, version)``.

    Architecture never falls back: asking for arm64 when only amd64
    is declared fails rather than substituting an emulated binary.

    Args:
        table: Loaded release table.
        os_name: ``macos`` or ``linux``.
        arch: ``arm64`` or ``amd64``.
        version: Exact version, or None for the newest one declared
            for this platform.

    Raises:
        ArtifactNotFound: No matching row, or the row's digest is a
            placeholder that was never filled in.
    """
    if version is None:
        version = latest_version(table, os_name, arch)
        if version is None:
            raise ArtifactNotFound(
                f"No release of {table.formula.name} for {os_name}/{arch}"
            )
    else:
        version = version.removeprefix("v")

    artifact = table.get(version, os_name, arch)
    if artifact is None:
        declared = sorted(
            f"{a.os}/{a.arch}" for a in table.artifacts if a.version == version
        )
        hint = f" (declared: {', '.join(declared)})" if declared else ""
        raise ArtifactNotFound(
            f"No artifact for {table.formula.name} {version} on {os_name}/{arch}{hint}"
        )

    if not artifact.has_digest:
        raise ArtifactNotFound(
            f"Artifact {table.formula.name} {version} {os_name}/{arch} has no "
            f"published sha256 (found placeholder {artifact.digest!r})"
        )

    return artifact
