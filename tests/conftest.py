"""
Shared test fixtures and configuration.

Release archives are built in-test and served from ``file://`` URLs,
so the whole pipeline runs for real without a network.
"""

from __future__ import annotations

import hashlib
import io
import tarfile
import textwrap
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import pytest

from binstall.core.config.loader import load_table
from binstall.core.models.release import ReleaseTable

MARKER = "Git Assistant"

GA_SCRIPT = (
    b"#!/bin/sh\n"
    b'echo "Git Assistant - Smart Git workflow optimizer for large repositories"\n'
    b"exit 0\n"
)

Entry = tuple[str, bytes, int]


def build_tarball(entries: list[Entry]) -> bytes:
    """gzip'd tar holding ``(name, content, mode)`` regular files."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name, content, mode in entries:
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = mode
            tf.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def build_zip(entries: list[Entry]) -> bytes:
    """zip holding ``(name, content, mode)`` entries with unix permissions."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content, mode in entries:
            info = zipfile.ZipInfo(name)
            info.create_system = 3
            info.external_attr = (0o100000 | mode) << 16
            zf.writestr(info, content)
    return buf.getvalue()


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@dataclass
class Release:
    """A published release laid out on disk for one test."""

    table_path: Path
    archive_path: Path
    digest: str
    install_dir: Path
    state_dir: Path

    @property
    def table(self) -> ReleaseTable:
        return load_table(self.table_path)

    @property
    def url(self) -> str:
        return self.archive_path.as_uri()


@pytest.fixture
def write_release(tmp_path: Path) -> Callable[..., Release]:
    """Factory: write an archive + release table declaring it.

    Args (to the returned callable):
        archive: Archive bytes to publish (default: tarball holding ``ga``).
        digest: Declared sha256 (default: the archive's real digest).
        os_name / arch: Platform row to declare (default macos/arm64).
        version: Declared version.
        marker: Probe marker string.
    """

    def _write(
        archive: bytes | None = None,
        *,
        digest: str | None = None,
        os_name: str = "macos",
        arch: str = "arm64",
        version: str = "0.1.0",
        marker: str = MARKER,
    ) -> Release:
        if archive is None:
            archive = build_tarball([("ga", GA_SCRIPT, 0o755)])

        releases = tmp_path / "releases"
        releases.mkdir(exist_ok=True)
        archive_path = releases / f"ga-{os_name}-{arch}.tar.gz"
        archive_path.write_bytes(archive)

        declared = digest if digest is not None else sha256_hex(archive)
        table_path = tmp_path / "table.yml"
        table_path.write_text(textwrap.dedent(f"""\
            formula:
              name: ga
              desc: "Git Assistant"
              binary: ga
              probe:
                args: ["--help"]
                marker: "{marker}"
              caveats: "Run ga --help"
            artifacts:
              - version: "{version}"
                os: {os_name}
                arch: {arch}
                url: "{archive_path.as_uri()}"
                sha256: "{declared}"
        """))

        return Release(
            table_path=table_path,
            archive_path=archive_path,
            digest=declared,
            install_dir=tmp_path / "bin",
            state_dir=tmp_path / "state",
        )

    return _write


@pytest.fixture
def release(write_release) -> Release:
    """A good macos/arm64 release of ``ga`` 0.1.0."""
    return write_release()


@pytest.fixture
def binstall_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point state and install dirs into the temp dir and silence console logs."""
    monkeypatch.setenv("BINSTALL_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("BINSTALL_INSTALL_DIR", str(tmp_path / "bin"))
    monkeypatch.setenv("BINSTALL_LOG_LEVEL", "CRITICAL")
    monkeypatch.delenv("BINSTALL_TABLE", raising=False)
    monkeypatch.delenv("BINSTALL_TIMEOUT", raising=False)
    monkeypatch.delenv("BINSTALL_LOG_FILE", raising=False)
    return tmp_path
