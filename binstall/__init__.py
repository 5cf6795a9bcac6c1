"""
binstall — verified install of a single prebuilt CLI binary.

Resolves the host platform, locates the matching release artifact in a
versioned table, verifies its SHA-256 digest, installs the binary
atomically and probes it.
"""

__version__ = "0.1.0"
