"""Branching — list, create, and switch branches.

Branches are plain files under ``refs/heads``.  Creating one copies the
current branch head; switching rewrites HEAD only and never touches the
working tree.
"""

from __future__ import annotations

import logging

from mygit.errors import NotFoundError, UserError
from mygit.security.policies import AccessMode
from mygit.security.rbac import requires_command
from mygit.vcs.repo import Repository

logger = logging.getLogger(__name__)


@requires_command("branch")
def list_branches(repo: Repository, username: str) -> list[str]:
    """Return the list of branch names."""
    return repo.refs.list_branches()


@requires_command("create-branch")
def create_branch(repo: Repository, username: str, name: str) -> str:
    """Create branch *name* at the head of the current branch.

    The current branch must already have a commit, and *name* must not
    exist yet.  HEAD is not moved.

    Returns the commit hash the new branch points at.
    """
    repo.mediator.require_branch_creation(username)

    current = repo.current_branch()
    head = repo.refs.read_branch(current)
    if not head:
        raise NotFoundError(
            f"Error reading current branch commit: '{current}' has no commits yet"
        )
    if repo.refs.branch_exists(name):
        raise UserError(f"Branch already exists: {name}")

    repo.refs.write_branch(name, head)
    logger.info("Created branch '%s' at %s", name, head[:10])
    return head


@requires_command("checkout")
def switch_branch(repo: Repository, username: str, name: str) -> str:
    """Point HEAD at an existing branch.

    Returns the branch name.
    """
    repo.mediator.require_branch_access(username, name, AccessMode.VIEW)

    if not repo.refs.branch_exists(name):
        raise NotFoundError(f"Branch does not exist: {name}")

    repo.refs.set_head(name)
    logger.info("Switched to branch '%s'", name)
    return name
