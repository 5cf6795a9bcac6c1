"""
Release models — the declared artifacts a formula can install.

The release table is the only persisted input the install pipeline
reads. It is declared in YAML (see ``binstall/core/data/ga.yml``),
validated here, and flattened into one immutable row per
``(version, os, arch)``.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

OSFamily = Literal["macos", "linux"]
Architecture = Literal["arm64", "amd64"]

# Go-style GOOS names used in release asset filenames
PLATFORM_TAGS: dict[str, str] = {
    "macos": "darwin",
    "linux": "linux",
}

_SHA256_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def is_sha256_hex(value: str) -> bool:
    """True if ``value`` is a 64-character hex digest."""
    return bool(_SHA256_RE.match(value or ""))


class ProbeSpec(BaseModel):
    """How to smoke-test the installed binary."""

    args: list[str] = Field(default_factory=lambda: ["--help"])
    marker: str = ""


class Formula(BaseModel):
    """Descriptive metadata for the installable tool."""

    name: str
    desc: str = ""
    homepage: str = ""
    license: str = ""
    binary: str = ""                # defaults to ``name``
    url_template: str = ""          # {version} {os} {platform} {arch}
    probe: ProbeSpec = Field(default_factory=ProbeSpec)
    caveats: str = ""

    @property
    def binary_name(self) -> str:
        return self.binary or self.name


class ReleaseArtifact(BaseModel):
    """One downloadable archive for a specific (version, os, arch).

    Immutable once declared. ``digest`` is the SHA-256 of the archive
    bytes; a placeholder (anything that is not 64 hex characters) means
    the release process has not published it yet.
    """

    model_config = ConfigDict(frozen=True)

    os: OSFamily
    arch: Architecture
    url: str
    digest: str
    version: str

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.version, self.os, self.arch)

    @property
    def has_digest(self) -> bool:
        """Whether the declared digest is a real SHA-256 value."""
        return is_sha256_hex(self.digest)


class ReleaseTable(BaseModel):
    """Flattened release table: formula metadata + one row per artifact."""

    formula: Formula
    artifacts: list[ReleaseArtifact] = Field(default_factory=list)

    _index: dict[tuple[str, str, str], ReleaseArtifact] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _build_index(self) -> ReleaseTable:
        index: dict[tuple[str, str, str], ReleaseArtifact] = {}
        for art in self.artifacts:
            if art.key in index:
                version, os_name, arch = art.key
                raise ValueError(
                    f"Duplicate artifact for version {version} ({os_name}/{arch})"
                )
            index[art.key] = art
        self._index = index
        return self

    def get(self, version: str, os_name: str, arch: str) -> ReleaseArtifact | None:
        """Exact lookup by (version, os, arch)."""
        return self._index.get((version, os_name, arch))

    def versions(self) -> list[str]:
        """Distinct declared versions, in declaration order."""
        seen: list[str] = []
        for art in self.artifacts:
            if art.version not in seen:
                seen.append(art.version)
        return seen


# ── YAML declaration schema ─────────────────────────────────────


class ArtifactDecl(BaseModel):
    """An artifact row as written in the YAML table."""

    os: OSFamily
    arch: Architecture
    sha256: str
    url: str = ""
    version: str = ""               # only used in the flat ``artifacts:`` form

    @field_validator("version", mode="before")
    @classmethod
    def _version_to_str(cls, v: object) -> object:
        return str(v) if isinstance(v, (int, float)) else v


class ReleaseDecl(BaseModel):
    """A release block: one version and its per-platform artifacts."""

    version: str
    artifacts: list[ArtifactDecl] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _version_to_str(cls, v: object) -> object:
        return str(v) if isinstance(v, (int, float)) else v


class TableDecl(BaseModel):
    """Root of the YAML release table.

    Rows may be declared grouped under ``releases`` or flat under
    ``artifacts`` (each row carrying its own ``version``), or both.
    """

    formula: Formula
    releases: list[ReleaseDecl] = Field(default_factory=list)
    artifacts: list[ArtifactDecl] = Field(default_factory=list)

    def to_table(self) -> ReleaseTable:
        """Expand declarations into a flat :class:`ReleaseTable`."""
        rows: list[ReleaseArtifact] = []
        for release in self.releases:
            for decl in release.artifacts:
                rows.append(self._row(decl, release.version))
        for decl in self.artifacts:
            if not decl.version:
                raise ValueError(f"Artifact {decl.os}/{decl.arch} has no version")
            rows.append(self._row(decl, decl.version))
        return ReleaseTable(formula=self.formula, artifacts=rows)

    def _row(self, decl: ArtifactDecl, version: str) -> ReleaseArtifact:
        url = decl.url or self._expand_template(version, decl.os, decl.arch)
        return ReleaseArtifact(
            os=decl.os,
            arch=decl.arch,
            url=url,
            digest=decl.sha256.strip(),
            version=version,
        )

    def _expand_template(self, version: str, os_name: str, arch: str) -> str:
        template = self.formula.url_template
        if not template:
            raise ValueError(
                f"Artifact {version} {os_name}/{arch} has no url and "
                "the formula declares no url_template"
            )
        try:
            return template.format(
                version=version,
                os=os_name,
                platform=PLATFORM_TAGS[os_name],
                arch=arch,
            )
        except (KeyError, IndexError) as e:
            raise ValueError(f"Bad placeholder in url_template: {e}") from e
