"""
L4 Execution — network, filesystem and subprocess side effects.
"""

from binstall.core.services.installer.execution.fetch import (  # noqa: F401
    digests_match,
    fetch_and_verify,
    sha256_bytes,
    verify_file,
)
from binstall.core.services.installer.execution.placement import (  # noqa: F401
    install,
    place_binary,
)
from binstall.core.services.installer.execution.probe import (  # noqa: F401
    probe_binary,
)
