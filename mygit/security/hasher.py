"""Content hashing utilities using stdlib hashlib (SHA-1)."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

# Lowercase hex SHA-1 digest, the name of every stored object
OBJECT_ID_RE = re.compile(r"[0-9a-f]{40}")


class Hasher:
    """SHA-1 hashing for byte strings and files."""

    @staticmethod
    def hash_bytes(data: bytes) -> str:
        """Return the SHA-1 hex digest of *data*."""
        return hashlib.sha1(data).hexdigest()

    @staticmethod
    def hash_file(path: str | Path) -> str:
        """Return the SHA-1 hex digest of the file at *path*."""
        h = hashlib.sha1()
        with Path(path).open("rb") as f:
            while True:
                chunk = f.read(65536)
                if not chunk:
                    break
                h.update(chunk)
        return h.hexdigest()

    @staticmethod
    def is_object_id(value: str) -> bool:
        """Return *True* if *value* looks like an object hash."""
        return OBJECT_ID_RE.fullmatch(value) is not None
