"""Version control engine: commits, branches, and history on top of storage."""

from mygit.vcs.branching import create_branch, list_branches, switch_branch
from mygit.vcs.commits import commit_changes
from mygit.vcs.history import LogEntry, iter_history
from mygit.vcs.repo import FileState, Repository, StatusEntry, find_repo_root

__all__ = [
    "FileState",
    "LogEntry",
    "Repository",
    "StatusEntry",
    "commit_changes",
    "create_branch",
    "find_repo_root",
    "iter_history",
    "list_branches",
    "switch_branch",
]
