"""History — walk a branch's parent chain, newest first."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from mygit.models.commit import Commit
from mygit.security.rbac import requires_command
from mygit.vcs.repo import Repository

logger = logging.getLogger(__name__)


@dataclass
class LogEntry:
    """A single commit in the history."""

    sha: str
    author: str
    date: str
    message: str
    parent: str = ""

    @classmethod
    def from_commit(cls, sha: str, commit: Commit) -> LogEntry:
        return cls(
            sha=sha,
            author=commit.author,
            date=commit.timestamp,
            message=commit.message,
            parent=commit.parent,
        )


def _walk(repo: Repository, head: str) -> Iterator[LogEntry]:
    current = head
    seen: set[str] = set()
    while current:
        if current in seen:
            logger.warning("Parent cycle at %s, stopping", current[:10])
            return
        seen.add(current)
        commit = repo.objects.get_commit(current)
        yield LogEntry.from_commit(current, commit)
        current = commit.parent


@requires_command("log")
def iter_history(
    repo: Repository,
    username: str,
    branch: str | None = None,
) -> Iterator[LogEntry]:
    """Return an iterator over the commits of *branch*, head first.

    Parameters
    ----------
    branch:
        Branch to walk.  Defaults to the branch HEAD points at.

    The access check and branch lookup happen immediately; commits are
    loaded lazily.  A missing or corrupt commit raises while iterating,
    after every entry before it has been yielded.  A branch without
    commits yields nothing.
    """
    if branch is None:
        branch = repo.current_branch()
    head = repo.refs.read_branch(branch)
    logger.debug("Walking history of '%s' from %s", branch, head[:10] or "<empty>")
    return _walk(repo, head)
