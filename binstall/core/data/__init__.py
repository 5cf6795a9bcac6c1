"""
Bundled data files.

``ga.yml`` is the default release table for the Git Assistant CLI.
"""

from __future__ import annotations

from pathlib import Path

DATA_DIR = Path(__file__).parent

DEFAULT_TABLE = DATA_DIR / "ga.yml"
