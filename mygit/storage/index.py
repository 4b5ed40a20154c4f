"""Index — the flat staging area consumed by commit.

The file is append-only: each ``add`` writes one ``<hash> <filename>``
line and readers let later lines override earlier ones for the same
filename.  A missing file is an empty staging area.  File names that are
not valid UTF-8 are kept byte for byte.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mygit.errors import StorageIOError, UserError

logger = logging.getLogger(__name__)


class Index:
    """Staging area stored at ``.mygit/index``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def stage(self, filename: str, object_id: str) -> None:
        """Append an entry staging *object_id* under *filename*."""
        try:
            with self.path.open("a", encoding="utf-8", errors="surrogateescape") as f:
                f.write(f"{object_id} {filename}\n")
        except UnicodeEncodeError as exc:
            raise UserError(f"Cannot stage file name {filename!r}: {exc}") from exc
        except OSError as exc:
            raise StorageIOError(f"Error writing to index file: {exc}") from exc

    def read_staged(self) -> dict[str, str]:
        """Return the staged ``filename -> hash`` mapping, last entry wins."""
        staged: dict[str, str] = {}
        try:
            with self.path.open(encoding="utf-8", errors="surrogateescape") as f:
                for line in f:
                    object_id, sep, filename = line.rstrip("\n").partition(" ")
                    if sep:
                        staged[filename] = object_id
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StorageIOError(f"Error reading index file: {exc}") from exc
        return staged

    def clear(self) -> None:
        """Delete the index file."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Error clearing index: {exc}") from exc
        logger.debug("Cleared index %s", self.path)
