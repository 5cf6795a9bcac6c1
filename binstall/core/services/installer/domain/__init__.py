"""
L1 Domain — pure logic (no I/O, no subprocess).
"""

from binstall.core.services.installer.domain.archive import (  # noqa: F401
    archive_format,
    extract_binary,
)
from binstall.core.services.installer.domain.locator import (  # noqa: F401
    latest_version,
    locate,
    version_key,
)
