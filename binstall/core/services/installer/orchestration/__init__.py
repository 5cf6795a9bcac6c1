"""
L5 Orchestration — Top-level install coordinator.
"""

from binstall.core.services.installer.orchestration.pipeline import (  # noqa: F401
    install_formula,
)
