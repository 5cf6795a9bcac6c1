"""
Install error taxonomy.

Every pipeline stage raises its own subclass of :class:`InstallError`
so callers can tell "platform not supported" from "download tampered
with" from "disk full". Only :class:`ProbeFailure` is non-fatal.
"""

from __future__ import annotations


class InstallError(Exception):
    """Base class for all pipeline failures.

    Attributes:
        stage: Pipeline stage that failed (resolve, locate, fetch,
            verify, install, probe).
    """

    stage: str = ""

    def __init__(self, message: str, *, stage: str | None = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class UnsupportedPlatform(InstallError):
    """Host OS or CPU architecture has no release artifacts."""

    stage = "resolve"


class ArtifactNotFound(InstallError):
    """No table row for (version, os, arch), or its digest is a placeholder."""

    stage = "locate"


class NetworkFailure(InstallError):
    """Download failed. Retrying is the caller's decision."""

    stage = "fetch"


class TimeoutFailure(InstallError):
    """The caller-supplied time budget ran out."""

    stage = "fetch"


class InstallCancelled(InstallError):
    """The caller cancelled before the point of no return."""

    stage = "fetch"


class VerificationFailure(InstallError):
    """Downloaded bytes do not hash to the declared digest. Never retried."""

    stage = "verify"

    def __init__(self, message: str, *, expected: str = "", actual: str = "",
                 stage: str | None = None):
        super().__init__(message, stage=stage)
        self.expected = expected
        self.actual = actual


class MalformedArchive(InstallError):
    """Archive is unreadable or does not hold exactly one expected binary."""

    stage = "install"


class FilesystemError(InstallError):
    """Permission, space or rename failure while placing the binary."""

    stage = "install"


class ProbeFailure(InstallError):
    """Binary installed, but running it did not confirm it works."""

    stage = "probe"
