"""Repository — locate, initialise, and inspect a mygit working directory.

The repository is the working directory plus its ``.mygit`` folder.  This
module owns the wiring between the stores and the access mediator and
implements the operations that only touch the working tree (``init``,
``add``, ``status``).  Commit, branch, and history operations live in
sibling modules and take a :class:`Repository` as their first argument.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from mygit.config import (
    DEFAULT_BRANCH,
    HEADS_DIR,
    INDEX_FILE,
    OBJECTS_DIR,
    REPO_DIR,
    Settings,
    load_settings,
)
from mygit.errors import MyGitError, NotFoundError, StorageIOError, UserError
from mygit.security.hasher import Hasher
from mygit.security.permissions import AccessMediator
from mygit.security.rbac import requires_command
from mygit.storage.index import Index
from mygit.storage.objects import ObjectStore
from mygit.storage.refs import RefStore

logger = logging.getLogger(__name__)


def find_repo_root(start: str | Path | None = None) -> Path | None:
    """Return the nearest directory at or above *start* holding ``.mygit``."""
    current = Path(start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / REPO_DIR).is_dir():
            return candidate
    return None


class FileState(str, Enum):
    """Status classification of a working-tree file."""

    MODIFIED_STAGED = "Modified (staged)"
    MODIFIED_NOT_STAGED = "Modified (not staged)"
    UNTRACKED = "Untracked"
    DELETED_STAGED = "Deleted (staged)"


@dataclass(frozen=True)
class StatusEntry:
    """One line of ``status`` output."""

    state: FileState
    filename: str

    def __str__(self) -> str:
        return f"{self.state.value}: {self.filename}"


class Repository:
    """A mygit repository rooted at a working directory.

    Parameters
    ----------
    root:
        The working directory.  ``.mygit`` lives directly inside it.
    settings:
        Runtime settings.  Loaded from ``.mygit/config.json`` and the
        environment when omitted.
    """

    def __init__(self, root: str | Path, settings: Settings | None = None) -> None:
        self.root = Path(root).resolve()
        self.repo_dir = self.root / REPO_DIR
        self.settings = settings or load_settings(self.repo_dir)
        self.objects = ObjectStore(self.repo_dir / OBJECTS_DIR)
        self.refs = RefStore(self.repo_dir)
        self.index = Index(self.repo_dir / INDEX_FILE)
        self.mediator = AccessMediator(self.repo_dir, self.settings)

    @classmethod
    def discover(cls, start: str | Path | None = None, settings: Settings | None = None) -> Repository:
        """Open the repository enclosing *start* (default: CWD).

        Falls back to *start* itself when no ``.mygit`` is found above it,
        which is where ``init`` creates a new one.
        """
        root = find_repo_root(start) or Path(start or Path.cwd())
        return cls(root, settings=settings)

    def __repr__(self) -> str:
        return f"Repository({str(self.root)!r})"

    def is_repo(self) -> bool:
        """Return *True* if ``.mygit`` exists under the root."""
        return self.repo_dir.is_dir()

    def current_branch(self) -> str:
        """Return the name of the branch HEAD points at."""
        return self.refs.read_head()

    def head_commit(self) -> str:
        """Return the commit hash of the current branch, ``""`` before the first commit."""
        return self.refs.read_branch(self.current_branch())

    # -- Initialisation -------------------------------------------------------

    @requires_command("init")
    def init(self, username: str) -> Path:
        """Create ``.mygit`` with ``objects``, ``refs/heads`` and HEAD.

        Existing files are left untouched, so running it twice is harmless.
        No branch file is written; the first commit creates it.

        Returns the repository directory.
        """
        try:
            (self.repo_dir / HEADS_DIR).mkdir(parents=True, exist_ok=True)
            self.objects.path.mkdir(parents=True, exist_ok=True)
            if not self.refs.head_path.exists():
                self.refs.head_path.write_text(
                    f"ref: refs/heads/{DEFAULT_BRANCH}\n", encoding="utf-8",
                )
        except OSError as exc:
            raise StorageIOError(f"Error initialising repository: {exc}") from exc

        logger.info("Initialised mygit repo at %s (by %s)", self.repo_dir, username)
        return self.repo_dir

    # -- Staging --------------------------------------------------------------

    def _tracked_name(self, filename: str | Path) -> tuple[str, Path]:
        """Resolve *filename* (relative to the CWD) to its top-level name and absolute path."""
        path = Path(os.path.abspath(filename))
        if not path.is_file():
            raise NotFoundError(f"File does not exist: {filename}")
        if path.parent != self.root:
            raise UserError(
                f"Only files directly inside {self.root} can be added: {filename}"
            )
        return path.name, path

    @requires_command("add")
    def add(self, username: str, filename: str | Path) -> str:
        """Store *filename* as a blob and stage it.

        Returns the blob hash.
        """
        name, path = self._tracked_name(filename)
        object_id = self.objects.put_blob(path)
        self.index.stage(name, object_id)
        logger.info("Staged %s (%s)", name, object_id[:10])
        return object_id

    # -- Status ---------------------------------------------------------------

    def _working_files(self) -> dict[str, str]:
        """Hash every readable top-level regular file of the working tree."""
        hashes: dict[str, str] = {}
        try:
            entries = sorted(self.root.iterdir())
        except OSError as exc:
            raise StorageIOError(f"Error reading working dir: {exc}") from exc
        for entry in entries:
            if entry.name == REPO_DIR or not entry.is_file():
                continue
            try:
                hashes[entry.name] = Hasher.hash_file(entry)
            except OSError:
                logger.debug("Skipping unreadable file %s", entry, exc_info=True)
        return hashes

    def _tip_tree(self) -> dict[str, str]:
        """Tree of the current branch tip, empty if there is none."""
        head = self.head_commit()
        if not head:
            return {}
        try:
            return dict(self.objects.get_commit(head).tree)
        except MyGitError as exc:
            logger.warning("Could not load tip commit %s: %s", head[:10], exc)
            return {}

    @requires_command("status")
    def status(self, username: str) -> list[StatusEntry]:
        """Classify working-tree files against the index and the branch tip.

        Files whose content matches their staged (or, when unstaged,
        committed) hash are omitted.
        """
        staged = self.index.read_staged()
        committed = self._tip_tree()
        entries: list[StatusEntry] = []

        for name, digest in self._working_files().items():
            if name in staged:
                if digest != staged[name]:
                    entries.append(StatusEntry(FileState.MODIFIED_STAGED, name))
            elif name in committed:
                if digest != committed[name]:
                    entries.append(StatusEntry(FileState.MODIFIED_NOT_STAGED, name))
            else:
                entries.append(StatusEntry(FileState.UNTRACKED, name))

        for name in sorted(staged):
            if not (self.root / name).exists():
                entries.append(StatusEntry(FileState.DELETED_STAGED, name))

        return entries
