"""
Tests for artifact lookup — exact match, no fallbacks, newest version.
"""

import pytest

from binstall.core.models import Formula, ReleaseArtifact, ReleaseTable
from binstall.core.services.installer.detection.platform import resolve
from binstall.core.services.installer.domain.locator import latest_version, locate, version_key
from binstall.core.services.installer.errors import ArtifactNotFound, UnsupportedPlatform

DIGEST = "c" * 64


def _table(*rows) -> ReleaseTable:
    return ReleaseTable(
        formula=Formula(name="ga"),
        artifacts=[
            ReleaseArtifact(
                version=v, os=o, arch=a, digest=d,
                url=f"https://example.com/v{v}/ga-{o}-{a}.tar.gz",
            )
            for v, o, a, d in rows
        ],
    )


@pytest.fixture
def full_table() -> ReleaseTable:
    rows = [
        (v, o, a, DIGEST)
        for v in ("0.1.0", "0.2.0", "0.10.0")
        for o in ("macos", "linux")
        for a in ("arm64", "amd64")
    ]
    return _table(*rows)


class TestLocate:
    def test_exact_match(self, full_table):
        art = locate(full_table, "linux", "arm64", "0.2.0")
        assert (art.version, art.os, art.arch) == ("0.2.0", "linux", "arm64")

    def test_v_prefix_accepted(self, full_table):
        assert locate(full_table, "macos", "amd64", "v0.1.0").version == "0.1.0"

    def test_newest_when_no_version(self, full_table):
        assert locate(full_table, "macos", "arm64").version == "0.10.0"

    def test_no_arch_fallback(self):
        table = _table(("0.1.0", "macos", "amd64", DIGEST))
        with pytest.raises(ArtifactNotFound, match="macos/arm64"):
            locate(table, "macos", "arm64", "0.1.0")

    def test_no_arch_fallback_for_latest(self):
        table = _table(("0.1.0", "macos", "amd64", DIGEST))
        with pytest.raises(ArtifactNotFound):
            locate(table, "macos", "arm64")

    def test_no_os_fallback(self):
        table = _table(("0.1.0", "linux", "arm64", DIGEST))
        with pytest.raises(ArtifactNotFound):
            locate(table, "macos", "arm64", "0.1.0")

    def test_unknown_version(self, full_table):
        with pytest.raises(ArtifactNotFound, match="9.9.9"):
            locate(full_table, "linux", "amd64", "9.9.9")

    def test_error_lists_declared_platforms(self):
        table = _table(("0.1.0", "linux", "amd64", DIGEST))
        with pytest.raises(ArtifactNotFound, match=r"declared: linux/amd64"):
            locate(table, "linux", "arm64", "0.1.0")

    def test_placeholder_digest_not_found(self):
        table = _table(("0.1.0", "macos", "arm64", "PENDING_ARM64_SHA256"))
        with pytest.raises(ArtifactNotFound, match="PENDING_ARM64_SHA256") as exc:
            locate(table, "macos", "arm64", "0.1.0")
        assert exc.value.stage == "locate"

    def test_latest_skips_versions_missing_the_platform(self):
        table = _table(
            ("0.1.0", "linux", "arm64", DIGEST),
            ("0.2.0", "linux", "amd64", DIGEST),
        )
        assert locate(table, "linux", "arm64").version == "0.1.0"


class TestResolveThenLocate:
    @pytest.mark.parametrize(
        ("system", "machine"),
        [("Darwin", "arm64"), ("Darwin", "x86_64"), ("Linux", "aarch64"), ("Linux", "x86_64")],
    )
    def test_exactly_one_candidate(self, full_table, system, machine):
        os_name, arch = resolve(system, machine)
        art = locate(full_table, os_name, arch, "0.1.0")
        matches = [
            a for a in full_table.artifacts
            if (a.version, a.os, a.arch) == ("0.1.0", os_name, arch)
        ]
        assert matches == [art]

    def test_windows_never_reaches_lookup(self, full_table):
        with pytest.raises(UnsupportedPlatform):
            locate(full_table, *resolve("Windows", "AMD64"))


class TestVersionOrdering:
    def test_numeric_not_lexical(self):
        assert version_key("0.10.0") > version_key("0.9.0")

    def test_prerelease_before_release(self):
        assert version_key("1.0.0-rc1") < version_key("1.0.0")

    def test_build_metadata_ignored(self):
        assert version_key("1.0.0+build.5") == version_key("1.0.0")
        assert version_key("1.0.0+build.5") > version_key("1.0.0-rc1")
        assert version_key("1.0.0-rc1+build.5") == version_key("1.0.0-rc1")

    def test_unparseable_sorts_first(self):
        assert version_key("nightly") < version_key("0.0.1")

    def test_latest_version_none_when_empty(self):
        assert latest_version(_table(), "linux", "amd64") is None
