"""
Installer service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate layer (data → domain → detection → execution →
orchestration)::

    from binstall.core.services.installer import install_formula
"""

# ── Errors ──
from binstall.core.services.installer.errors import (  # noqa: F401
    ArtifactNotFound,
    FilesystemError,
    InstallCancelled,
    InstallError,
    MalformedArchive,
    NetworkFailure,
    ProbeFailure,
    TimeoutFailure,
    UnsupportedPlatform,
    VerificationFailure,
)

# ── L1: Domain ──
from binstall.core.services.installer.domain.archive import extract_binary  # noqa: F401
from binstall.core.services.installer.domain.locator import (  # noqa: F401
    latest_version,
    locate,
)

# ── L3: Detection ──
from binstall.core.services.installer.detection.platform import resolve  # noqa: F401

# ── L4: Execution ──
from binstall.core.services.installer.execution.fetch import (  # noqa: F401
    fetch_and_verify,
    verify_file,
)
from binstall.core.services.installer.execution.placement import install  # noqa: F401
from binstall.core.services.installer.execution.probe import probe_binary  # noqa: F401

# ── L5: Orchestration ──
from binstall.core.services.installer.orchestration.pipeline import (  # noqa: F401
    install_formula,
)
