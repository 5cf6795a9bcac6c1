"""
Runtime settings — where to install, how long to wait, where state lives.

Resolved in precedence order:
    CLI flag  >  BINSTALL_* env var  >  default

    BINSTALL_TABLE          release table YAML (default: bundled ga.yml)
    BINSTALL_INSTALL_DIR    /usr/local/bin if writable, else ~/.local/bin
    BINSTALL_TIMEOUT        seconds for fetch + install (default 60)
    BINSTALL_PROBE_TIMEOUT  seconds for the post-install probe (default 10)
    BINSTALL_LOCK_TIMEOUT   seconds to wait for the install-dir lock (default 30)
    BINSTALL_STATE_DIR      ledger + locks (default ~/.local/state/binstall)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from binstall.core.config.loader import ConfigError
from binstall.core.data import DEFAULT_TABLE

logger = logging.getLogger(__name__)

_SYSTEM_BIN = Path("/usr/local/bin")

_ENV_VARS: dict[str, str] = {
    "table_path": "BINSTALL_TABLE",
    "install_dir": "BINSTALL_INSTALL_DIR",
    "timeout": "BINSTALL_TIMEOUT",
    "probe_timeout": "BINSTALL_PROBE_TIMEOUT",
    "lock_timeout": "BINSTALL_LOCK_TIMEOUT",
    "state_dir": "BINSTALL_STATE_DIR",
}


def default_install_dir() -> Path:
    """``/usr/local/bin`` when writable, otherwise ``~/.local/bin``."""
    if os.access(_SYSTEM_BIN, os.W_OK):
        return _SYSTEM_BIN
    fallback = Path.home() / ".local" / "bin"
    logger.info("Using %s (%s not writable)", fallback, _SYSTEM_BIN)
    return fallback


def default_state_dir() -> Path:
    base = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(base) / "binstall"


class Settings(BaseModel):
    """Resolved settings for one invocation."""

    table_path: Path = DEFAULT_TABLE
    install_dir: Path = Field(default_factory=default_install_dir)
    timeout: float = Field(default=60.0, gt=0)
    probe_timeout: float = Field(default=10.0, gt=0)
    lock_timeout: float = Field(default=30.0, ge=0)
    state_dir: Path = Field(default_factory=default_state_dir)

    @property
    def ledger_path(self) -> Path:
        return self.state_dir / "installs.ndjson"

    @property
    def lock_dir(self) -> Path:
        return self.state_dir / "locks"


def load_settings(**overrides: Any) -> Settings:
    """Build settings from env vars, then apply non-None ``overrides``.

    Raises:
        ConfigError: If a value does not validate (e.g. a non-numeric
            BINSTALL_TIMEOUT).
    """
    values: dict[str, Any] = {}
    for field_name, env_var in _ENV_VARS.items():
        raw = os.environ.get(env_var)
        if raw:
            values[field_name] = raw

    for key, value in overrides.items():
        if key not in Settings.model_fields:
            raise ConfigError(f"Unknown setting: {key}")
        if value is not None:
            values[key] = value

    try:
        settings = Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    settings.install_dir = settings.install_dir.expanduser()
    settings.state_dir = settings.state_dir.expanduser()
    settings.table_path = settings.table_path.expanduser()
    return settings
