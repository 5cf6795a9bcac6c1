"""
Logging configuration — central setup for the CLI.

Called once at startup by ``binstall.main``. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  BINSTALL_LOG_LEVEL  >  WARNING

Optional file output via BINSTALL_LOG_FILE / BINSTALL_LOG_FILE_LEVEL.
The file always gets full detail, which is where digests, URLs and
probe output end up when an install needs to be audited later.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

# ── Format strings ──────────────────────────────────────────────

# WARNING: the message is all an operator needs
_FMT_MINIMAL = "%(message)s"

# INFO: which stage said what
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG and file output: file:line too
_FMT_DETAIL = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DETAIL = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = ("urllib3", "portalocker")


def resolve_level(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, falling back to the env."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("BINSTALL_LOG_LEVEL", "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional log file path; parent dirs are created.
        log_file_level: Level for the file. Defaults to ``level``.
    """
    console_level = _parse_level(level)

    if console_level <= logging.DEBUG:
        console_fmt = logging.Formatter(_FMT_DETAIL, datefmt=_DATEFMT_DETAIL)
    elif console_level <= logging.INFO:
        console_fmt = logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_VERBOSE)
    else:
        console_fmt = logging.Formatter(_FMT_MINIMAL)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(console_fmt)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        Path(log_file).expanduser().parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(Path(log_file).expanduser(), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DETAIL, datefmt=_DATEFMT_DETAIL))
        root.addHandler(fh)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)

    if console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
