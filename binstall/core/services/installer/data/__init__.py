"""
L0 Data — ``__init__.py`` re-exports all data constants.
"""

from binstall.core.services.installer.data.constants import (  # noqa: F401
    BINARY_MODE,
    CHUNK_SIZE,
    DEFAULT_PROBE_TIMEOUT,
    DEFAULT_TIMEOUT,
    USER_AGENT_PREFIX,
    _ARCH_MAP,
    _OS_MAP,
)
