"""mygit: a minimal local version-control engine with role-based access."""

__version__ = "1.0.0"

from mygit.config import Settings, load_settings
from mygit.errors import (
    AccessDeniedError,
    CorruptError,
    MyGitError,
    NotFoundError,
    StorageIOError,
    UserError,
)
from mygit.models.commit import Commit
from mygit.security.permissions import AccessMediator, PolicyStore, Role
from mygit.storage import Index, ObjectStore, RefStore
from mygit.vcs import (
    FileState,
    LogEntry,
    Repository,
    StatusEntry,
    commit_changes,
    create_branch,
    iter_history,
    list_branches,
    switch_branch,
)

__all__ = [
    "__version__",
    # Storage
    "Commit",
    "Index",
    "ObjectStore",
    "RefStore",
    # Access control
    "AccessMediator",
    "PolicyStore",
    "Role",
    # Engine
    "FileState",
    "LogEntry",
    "Repository",
    "StatusEntry",
    "commit_changes",
    "create_branch",
    "iter_history",
    "list_branches",
    "switch_branch",
    # Configuration and errors
    "AccessDeniedError",
    "CorruptError",
    "MyGitError",
    "NotFoundError",
    "Settings",
    "StorageIOError",
    "UserError",
    "load_settings",
]
