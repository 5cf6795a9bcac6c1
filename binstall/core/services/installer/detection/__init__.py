"""
L3 Detection — read-only host probes.
"""

from binstall.core.services.installer.detection.platform import (  # noqa: F401
    resolve,
)
