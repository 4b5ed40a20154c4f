"""RefStore — HEAD and branch heads.

HEAD is always symbolic (``ref: refs/heads/<branch>``); detached heads are
not modelled.  Each branch is a file under ``refs/heads`` whose content is
a commit hash.  A branch that has no file yet reads as ``""``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mygit.config import HEAD_FILE, HEADS_DIR
from mygit.errors import CorruptError, NotFoundError, StorageIOError, UserError

logger = logging.getLogger(__name__)

_SYMREF_PREFIX = "ref: "
_HEADS_PREFIX = "refs/heads/"


def validate_branch_name(name: str) -> str:
    """Return *name* if it is usable as a branch file name.

    Raises :class:`UserError` otherwise.
    """
    if not name or name.strip() != name:
        raise UserError(f"Invalid branch name: {name!r}")
    if "/" in name or "\\" in name or name.startswith("."):
        raise UserError(f"Invalid branch name: {name!r}")
    return name


class RefStore:
    """Read and write the references of one repository.

    Parameters
    ----------
    repo_dir:
        The ``.mygit`` directory.
    """

    def __init__(self, repo_dir: str | Path) -> None:
        self.repo_dir = Path(repo_dir)
        self.head_path = self.repo_dir / HEAD_FILE
        self.heads_dir = self.repo_dir / HEADS_DIR

    # -- HEAD -----------------------------------------------------------------

    def read_head(self) -> str:
        """Return the name of the branch HEAD points at."""
        try:
            content = self.head_path.read_text(
                encoding="utf-8", errors="surrogateescape",
            ).strip()
        except FileNotFoundError as exc:
            raise NotFoundError("HEAD not found; is this a mygit repository?") from exc
        except OSError as exc:
            raise StorageIOError(f"Error reading HEAD: {exc}") from exc

        if not content.startswith(_SYMREF_PREFIX):
            raise CorruptError("Invalid HEAD")
        target = content[len(_SYMREF_PREFIX):].strip()
        if not target.startswith(_HEADS_PREFIX) or len(target) == len(_HEADS_PREFIX):
            raise CorruptError(f"Invalid HEAD target: {target!r}")
        return target[len(_HEADS_PREFIX):]

    def set_head(self, branch: str) -> None:
        """Point HEAD at *branch*."""
        validate_branch_name(branch)
        try:
            self.head_path.write_text(
                f"{_SYMREF_PREFIX}{_HEADS_PREFIX}{branch}",
                encoding="utf-8",
                errors="surrogateescape",
            )
        except OSError as exc:
            raise StorageIOError(f"Error switching branch: {exc}") from exc
        logger.debug("HEAD -> %s", branch)

    # -- Branches -------------------------------------------------------------

    def branch_path(self, name: str) -> Path:
        return self.heads_dir / validate_branch_name(name)

    def branch_exists(self, name: str) -> bool:
        return self.branch_path(name).is_file()

    def read_branch(self, name: str) -> str:
        """Return the commit hash at the head of *name*, or ``""`` if none."""
        try:
            return self.branch_path(name).read_text(
                encoding="utf-8", errors="surrogateescape",
            ).strip()
        except FileNotFoundError:
            return ""
        except OSError as exc:
            raise StorageIOError(f"Error reading branch {name}: {exc}") from exc

    def write_branch(self, name: str, object_id: str) -> None:
        """Overwrite the head of *name* with *object_id*."""
        path = self.branch_path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(object_id, encoding="utf-8")
        except OSError as exc:
            raise StorageIOError(f"Error writing branch pointer {name}: {exc}") from exc
        logger.debug("refs/heads/%s -> %s", name, object_id[:10])

    def list_branches(self) -> list[str]:
        """Return the names of all branches, sorted."""
        try:
            return sorted(p.name for p in self.heads_dir.iterdir() if p.is_file())
        except FileNotFoundError as exc:
            raise NotFoundError("Error reading branches: refs/heads does not exist") from exc
        except OSError as exc:
            raise StorageIOError(f"Error reading branches: {exc}") from exc
