"""ObjectStore — write-once, content-addressed blobs and commits.

Objects live flat under ``.mygit/objects/<hash>`` where ``<hash>`` is the
SHA-1 of the stored bytes.  Blobs are raw file content; commits are their
canonical JSON form.  Both share one namespace.  Writing an object that
already exists is a no-op, and nothing is ever deleted.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from mygit.errors import CorruptError, NotFoundError, StorageIOError
from mygit.models.commit import Commit
from mygit.security.hasher import Hasher

logger = logging.getLogger(__name__)


class ObjectStore:
    """Read and write objects in a repository's ``objects`` directory.

    Parameters
    ----------
    objects_dir:
        The ``.mygit/objects`` directory.
    """

    def __init__(self, objects_dir: str | Path) -> None:
        self.path = Path(objects_dir)

    def object_path(self, object_id: str) -> Path:
        """Return the on-disk path for *object_id* (may not exist)."""
        return self.path / object_id

    def exists(self, object_id: str) -> bool:
        """Return *True* if *object_id* is present in the store."""
        return Hasher.is_object_id(object_id) and self.object_path(object_id).is_file()

    # -- Writes ---------------------------------------------------------------

    def put_bytes(self, data: bytes) -> str:
        """Store *data* and return its hash.

        The object file is written only if it does not exist yet.
        """
        object_id = Hasher.hash_bytes(data)
        dest = self.object_path(object_id)
        if dest.exists():
            logger.debug("Object %s already in store, skipped", object_id[:10])
            return object_id
        try:
            dest.write_bytes(data)
        except OSError as exc:
            raise StorageIOError(f"Error writing object {object_id}: {exc}") from exc
        logger.debug("Stored object %s (%d bytes)", object_id[:10], len(data))
        return object_id

    def put_blob(self, path: str | Path) -> str:
        """Store the content of the file at *path* as a blob and return its hash."""
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise StorageIOError(f"Error reading {path}: {exc}") from exc
        return self.put_bytes(data)

    def put_commit(self, commit: Commit) -> str:
        """Store *commit* in canonical form and return its hash."""
        return self.put_bytes(commit.to_canonical_json())

    # -- Reads ----------------------------------------------------------------

    def read_object(self, object_id: str) -> bytes:
        """Return the raw bytes of *object_id*.

        Raises
        ------
        NotFoundError
            If the hash is malformed or no such object exists.
        StorageIOError
            If the object file exists but cannot be read.
        """
        if not Hasher.is_object_id(object_id):
            raise NotFoundError(f"Invalid object hash: {object_id!r}")
        path = self.object_path(object_id)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(f"Object not found: {object_id}") from exc
        except OSError as exc:
            raise StorageIOError(f"Failed to read object {object_id}: {exc}") from exc

    def get_commit(self, object_id: str) -> Commit:
        """Load and parse the commit stored under *object_id*.

        Raises :class:`CorruptError` if the object is not a commit document.
        """
        data = self.read_object(object_id)
        try:
            return Commit.from_json(data)
        except ValidationError as exc:
            raise CorruptError(f"Corrupted commit object {object_id}: {exc}") from exc
