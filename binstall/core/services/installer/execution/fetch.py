"""
L4 Execution — Download and checksum verification.

Downloads an artifact into a private temporary directory, hashes the
full archive, and only hands the bytes on when the SHA-256 matches the
declared digest. Nothing is ever written near the install path here.

One attempt per call. Network failures, timeouts, local disk errors
and digest mismatches come back as distinct typed errors so the caller
can decide which ones are worth retrying (a mismatch never is).
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import tempfile
import threading
import time
import urllib.error
import urllib.request
from pathlib import Path, PurePosixPath
from typing import BinaryIO
from urllib.parse import urlparse

from binstall import __version__
from binstall.core.models.install import VerificationResult
from binstall.core.models.release import ReleaseArtifact
from binstall.core.services.installer.data.constants import (
    CHUNK_SIZE,
    DEFAULT_TIMEOUT,
    USER_AGENT_PREFIX,
)
from binstall.core.services.installer.errors import (
    ArtifactNotFound,
    FilesystemError,
    InstallCancelled,
    InstallError,
    NetworkFailure,
    TimeoutFailure,
    VerificationFailure,
)

logger = logging.getLogger(__name__)


def sha256_bytes(data: bytes) -> str:
    """Hex SHA-256 of an in-memory buffer."""
    return hashlib.sha256(data).hexdigest()


def digests_match(actual: str, expected: str) -> bool:
    """Case-insensitive, constant-time comparison of two hex digests."""
    expected = expected.strip().removeprefix("sha256:").lower()
    return hmac.compare_digest(actual.lower().encode(), expected.encode())


def _archive_name(url: str) -> str:
    name = PurePosixPath(urlparse(url).path).name
    return name or "artifact.download"


def _write_chunk(f: BinaryIO, chunk: bytes, dest: Path) -> None:
    try:
        f.write(chunk)
    except OSError as e:
        raise FilesystemError(f"Cannot write download to {dest}: {e}", stage="fetch") from e


def _download(
    url: str,
    dest: Path,
    *,
    deadline: float,
    cancel: threading.Event | None = None,
) -> int:
    """Stream ``url`` into ``dest``. Returns the number of bytes written.

    Socket and HTTP errors are :class:`NetworkFailure`; errors writing
    ``dest`` are :class:`FilesystemError`.
    """
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise TimeoutFailure(f"No time left to download {url}")

    try:
        f = open(dest, "wb")
    except OSError as e:
        raise FilesystemError(f"Cannot create {dest}: {e}", stage="fetch") from e

    req = urllib.request.Request(
        url, headers={"User-Agent": f"{USER_AGENT_PREFIX}/{__version__}"},
    )
    downloaded = 0
    with f:
        try:
            with urllib.request.urlopen(req, timeout=remaining) as resp:
                while True:
                    if cancel is not None and cancel.is_set():
                        raise InstallCancelled(f"Download of {url} cancelled")
                    if time.monotonic() > deadline:
                        raise TimeoutFailure(
                            f"Download of {url} exceeded the time budget "
                            f"after {downloaded} bytes"
                        )
                    chunk = resp.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    _write_chunk(f, chunk, dest)
                    downloaded += len(chunk)
        except TimeoutError as e:
            raise TimeoutFailure(f"Download of {url} timed out: {e}") from e
        except urllib.error.HTTPError as e:
            raise NetworkFailure(f"Download of {url} failed: HTTP {e.code} {e.reason}") from e
        except urllib.error.URLError as e:
            if isinstance(e.reason, TimeoutError):
                raise TimeoutFailure(f"Download of {url} timed out: {e.reason}") from e
            raise NetworkFailure(f"Download of {url} failed: {e.reason}") from e
        except OSError as e:
            raise NetworkFailure(f"Download of {url} failed: {e}") from e

    logger.info("Downloaded %d bytes from %s", downloaded, url)
    return downloaded


def fetch_and_verify(
    artifact: ReleaseArtifact,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    cancel: threading.Event | None = None,
) -> VerificationResult:
    """Download ``artifact`` and check it against its declared digest.

    The archive lands in a fresh temporary directory that is removed
    on every exit path, so a rejected or cancelled download leaves
    nothing on disk. The archive is read back once; the returned bytes
    are the buffer that was hashed.

    Args:
        artifact: The located release artifact.
        timeout: Seconds for the whole download.
        cancel: Set by the caller to abandon the download before the
            bytes are verified.

    Returns:
        ``VerificationResult.verified(data, digest)`` or
        ``VerificationResult.failed(error)`` where ``error`` is one of
        :class:`NetworkFailure`, :class:`TimeoutFailure`,
        :class:`InstallCancelled`, :class:`VerificationFailure`,
        :class:`FilesystemError` (temporary area unusable) or
        :class:`ArtifactNotFound` (placeholder digest).
    """
    if not artifact.has_digest:
        return VerificationResult.failed(ArtifactNotFound(
            f"Refusing to fetch {artifact.url}: no published sha256 "
            f"(found {artifact.digest!r})"
        ))

    deadline = time.monotonic() + timeout

    try:
        with tempfile.TemporaryDirectory(prefix="binstall-") as tmp:
            dest = Path(tmp) / _archive_name(artifact.url)
            _download(artifact.url, dest, deadline=deadline, cancel=cancel)

            if cancel is not None and cancel.is_set():
                raise InstallCancelled("Cancelled before verification; download discarded")

            data = dest.read_bytes()
    except InstallError as e:
        return VerificationResult.failed(e)
    except OSError as e:
        logger.error("Temporary download area unusable: %s", e)
        return VerificationResult.failed(FilesystemError(
            f"Cannot stage download of {artifact.url}: {e}", stage="fetch",
        ))

    actual = sha256_bytes(data)
    if not digests_match(actual, artifact.digest):
        logger.warning(
            "SHA256 mismatch for %s: expected %s, got %s",
            artifact.url, artifact.digest.lower(), actual,
        )
        return VerificationResult.failed(VerificationFailure(
            f"SHA256 mismatch for {artifact.url}\n"
            f"Expected: {artifact.digest.lower()}\n"
            f"Got:      {actual}\n"
            f"The artifact may be corrupted or tampered with.",
            expected=artifact.digest.lower(),
            actual=actual,
        ))

    logger.info("Verified %s (sha256 %s)", artifact.url, actual)
    return VerificationResult.verified(data, actual)


def verify_file(path: Path, artifact: ReleaseArtifact) -> VerificationResult:
    """Check a local archive against the digest declared for ``artifact``."""
    if not artifact.has_digest:
        return VerificationResult.failed(ArtifactNotFound(
            f"No published sha256 for {artifact.version} {artifact.os}/{artifact.arch}"
        ))

    try:
        data = path.read_bytes()
    except OSError as e:
        return VerificationResult.failed(
            FilesystemError(f"Cannot read {path}: {e}", stage="verify")
        )

    actual = sha256_bytes(data)
    if not digests_match(actual, artifact.digest):
        return VerificationResult.failed(VerificationFailure(
            f"SHA256 mismatch for {path}: expected {artifact.digest.lower()}, got {actual}",
            expected=artifact.digest.lower(),
            actual=actual,
        ))
    return VerificationResult.verified(data, actual)
