"""
Tests for configuration — release table loading and runtime settings.
"""

import textwrap
from pathlib import Path

import pytest

from binstall.core.config.loader import ConfigError, load_table
from binstall.core.config.settings import Settings, load_settings
from binstall.core.data import DEFAULT_TABLE

DIGEST = "b" * 64


@pytest.fixture
def grouped_table_yml(tmp_path: Path) -> Path:
    """A table using the grouped ``releases:`` form and a url_template."""
    content = textwrap.dedent(f"""\
        formula:
          name: ga
          desc: "Git Assistant"
          url_template: "https://dl.example.com/v{{version}}/ga-{{platform}}-{{arch}}.tar.gz"
          probe:
            marker: "Git Assistant"
        releases:
          - version: "0.1.0"
            artifacts:
              - {{os: macos, arch: arm64, sha256: "{DIGEST}"}}
              - {{os: linux, arch: amd64, sha256: "{DIGEST}"}}
          - version: "0.2.0"
            artifacts:
              - {{os: macos, arch: arm64, sha256: "{DIGEST}"}}
    """)
    path = tmp_path / "table.yml"
    path.write_text(content)
    return path


class TestLoadTable:
    """Tests for load_table()."""

    def test_load_grouped_table(self, grouped_table_yml: Path):
        table = load_table(grouped_table_yml)
        assert table.formula.name == "ga"
        assert len(table.artifacts) == 3
        assert table.versions() == ["0.1.0", "0.2.0"]
        art = table.get("0.1.0", "linux", "amd64")
        assert art is not None
        assert art.url == "https://dl.example.com/v0.1.0/ga-linux-amd64.tar.gz"

    def test_bundled_table_loads(self):
        table = load_table(None)
        assert table.formula.name == "ga"
        assert table.formula.probe.marker == "Git Assistant"
        assert len(table.artifacts) == 4
        assert {(a.os, a.arch) for a in table.artifacts} == {
            ("macos", "arm64"), ("macos", "amd64"), ("linux", "arm64"), ("linux", "amd64"),
        }

    def test_bundled_table_digests_are_pending(self):
        table = load_table(DEFAULT_TABLE)
        assert all(not a.has_digest for a in table.artifacts)

    def test_bundled_urls_follow_release_layout(self):
        table = load_table()
        art = table.get("0.1.0", "macos", "arm64")
        assert art.url == (
            "https://github.com/yoonhwan-neowiz/WorkingCli/releases/download/"
            "v0.1.0/ga-darwin-arm64.tar.gz"
        )

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_table(tmp_path / "nonexistent.yml")

    def test_invalid_yaml_raises(self, tmp_path: Path):
        path = tmp_path / "table.yml"
        path.write_text(":: invalid: yaml: [")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_table(path)

    def test_non_mapping_raises(self, tmp_path: Path):
        path = tmp_path / "table.yml"
        path.write_text("- just\n- a\n- list\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_table(path)

    def test_missing_formula_raises(self, tmp_path: Path):
        path = tmp_path / "table.yml"
        path.write_text("releases: []\n")
        with pytest.raises(ConfigError, match="Invalid release table"):
            load_table(path)

    def test_duplicate_rows_raise(self, tmp_path: Path):
        path = tmp_path / "table.yml"
        path.write_text(textwrap.dedent(f"""\
            formula: {{name: ga}}
            artifacts:
              - {{version: "1.0.0", os: linux, arch: amd64, url: "https://a", sha256: "{DIGEST}"}}
              - {{version: "1.0.0", os: linux, arch: amd64, url: "https://b", sha256: "{DIGEST}"}}
        """))
        with pytest.raises(ConfigError, match="Duplicate artifact"):
            load_table(path)

    def test_unsupported_platform_row_raises(self, tmp_path: Path):
        path = tmp_path / "table.yml"
        path.write_text(textwrap.dedent(f"""\
            formula: {{name: ga}}
            artifacts:
              - {{version: "1.0.0", os: windows, arch: amd64, url: "https://a", sha256: "{DIGEST}"}}
        """))
        with pytest.raises(ConfigError, match="Invalid release table"):
            load_table(path)

    def test_bad_template_placeholder_raises(self, tmp_path: Path):
        path = tmp_path / "table.yml"
        path.write_text(textwrap.dedent(f"""\
            formula:
              name: ga
              url_template: "https://dl/{{tag}}/ga.tar.gz"
            releases:
              - version: "1.0.0"
                artifacts:
                  - {{os: linux, arch: amd64, sha256: "{DIGEST}"}}
        """))
        with pytest.raises(ConfigError, match="placeholder"):
            load_table(path)


class TestSettings:
    """Tests for load_settings()."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch: pytest.MonkeyPatch):
        for var in ("BINSTALL_TABLE", "BINSTALL_INSTALL_DIR", "BINSTALL_TIMEOUT",
                    "BINSTALL_PROBE_TIMEOUT", "BINSTALL_LOCK_TIMEOUT", "BINSTALL_STATE_DIR"):
            monkeypatch.delenv(var, raising=False)

    def test_defaults(self):
        s = load_settings()
        assert s.table_path == DEFAULT_TABLE
        assert s.timeout == 60.0
        assert s.state_dir.name == "binstall"

    def test_env_overrides_default(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("BINSTALL_INSTALL_DIR", str(tmp_path / "bin"))
        monkeypatch.setenv("BINSTALL_TIMEOUT", "15")
        s = load_settings()
        assert s.install_dir == tmp_path / "bin"
        assert s.timeout == 15.0

    def test_flag_overrides_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("BINSTALL_TIMEOUT", "15")
        s = load_settings(timeout=5, install_dir=tmp_path)
        assert s.timeout == 5.0
        assert s.install_dir == tmp_path

    def test_none_override_ignored(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BINSTALL_TIMEOUT", "15")
        assert load_settings(timeout=None).timeout == 15.0

    def test_invalid_timeout(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BINSTALL_TIMEOUT", "soon")
        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings()

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigError):
            load_settings(timeout=0)

    def test_unknown_override(self):
        with pytest.raises(ConfigError, match="Unknown setting"):
            load_settings(colour="blue")

    def test_ledger_and_lock_paths(self, tmp_path: Path):
        s = Settings(state_dir=tmp_path)
        assert s.ledger_path == tmp_path / "installs.ndjson"
        assert s.lock_dir == tmp_path / "locks"
