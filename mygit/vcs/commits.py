"""Commit — turn the staging area into a commit on the current branch.

Step order is fixed: the commit object is written before the branch head
moves, and the index is removed only after the head has moved.  If any
step fails the later ones are not attempted, so a failed commit never
advances the branch or loses staged entries.
"""

from __future__ import annotations

import logging

from mygit.errors import UserError
from mygit.models.commit import Commit, rfc3339_now
from mygit.security.policies import AccessMode
from mygit.security.rbac import requires_command
from mygit.vcs.repo import Repository

logger = logging.getLogger(__name__)


@requires_command("commit")
def commit_changes(
    repo: Repository,
    username: str,
    author: str,
    message: str,
) -> str:
    """Commit the staged files to the current branch.

    Parameters
    ----------
    repo:
        The repository.
    username:
        The acting user; needs ``edit`` access on the current branch.
    author:
        Author recorded in the commit.
    message:
        Commit message.

    Returns
    -------
    str
        The new commit hash.
    """
    tree = repo.index.read_staged()
    if not tree:
        raise UserError("Nothing to commit. Staging area is empty.")

    branch = repo.current_branch()
    repo.mediator.require_branch_access(username, branch, AccessMode.EDIT)

    commit = Commit(
        message=message,
        timestamp=rfc3339_now(),
        author=author,
        tree=tree,
        parent=repo.refs.read_branch(branch),
    )
    object_id = repo.objects.put_commit(commit)
    repo.refs.write_branch(branch, object_id)
    repo.index.clear()

    logger.info("Committed to '%s' with hash %s", branch, object_id)
    return object_id
