"""Runtime archive integrity: SHA-256 against a mirror's SHASUMS256.txt."""

from __future__ import annotations

import hashlib
from pathlib import Path

from node_buildpack.errors import BuildError

_HEX = frozenset("0123456789abcdef")


def sha256(path: Path) -> str:
    """Return the hex SHA-256 of *path*."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def parse_shasums(text: str, filename: str) -> str | None:
    """Return the digest listed for *filename* in a SHASUMS256.txt body."""
    for line in text.splitlines():
        parts = line.split()
        if len(parts) == 2 and parts[1].lstrip("*") == filename:
            digest = parts[0].lower()
            if len(digest) == 64 and set(digest) <= _HEX:
                return digest
    return None


def verify_archive(path: Path, shasums: str, filename: str) -> bool:
    """Check *path* against the *filename* entry of a SHASUMS256.txt body.

    Returns False when the list has no entry for *filename*. Raises
    BuildError when the entry exists and the digest differs.
    """
    expected = parse_shasums(shasums, filename)
    if expected is None:
        return False
    got = sha256(path)
    if got != expected:
        raise BuildError(f"Checksum mismatch for {filename}: got {got}, expected {expected}")
    return True
