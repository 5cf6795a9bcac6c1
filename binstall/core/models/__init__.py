"""
Domain models — Pydantic types for binstall.

All models are re-exported here for convenient access:

    from binstall.core.models import ReleaseArtifact, ReleaseTable, InstallOutcome
"""

from binstall.core.models.install import (
    InstallOutcome,
    InstallTarget,
    PipelineState,
    VerificationResult,
)
from binstall.core.models.release import (
    Architecture,
    ArtifactDecl,
    Formula,
    OSFamily,
    ProbeSpec,
    ReleaseArtifact,
    ReleaseDecl,
    ReleaseTable,
    TableDecl,
)

__all__ = [
    # install.py
    "InstallOutcome",
    "InstallTarget",
    "PipelineState",
    "VerificationResult",
    # release.py
    "Architecture",
    "ArtifactDecl",
    "Formula",
    "OSFamily",
    "ProbeSpec",
    "ReleaseArtifact",
    "ReleaseDecl",
    "ReleaseTable",
    "TableDecl",
]
