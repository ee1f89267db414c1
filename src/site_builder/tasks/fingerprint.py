"""Content fingerprints used to detect source file changes."""

from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK_SIZE = 64 * 1024


def file_fingerprint(path: Path) -> str:
    """Return the hex MD5 digest of the file bytes.

    Raises ``OSError`` if the file is missing or unreadable.
    """

    digest = hashlib.md5()  # noqa: S324
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
