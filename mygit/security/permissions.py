"""Role-based access control for mygit repositories.

Two documents under ``.mygit`` drive every decision:

- ``roles.json`` maps each username to a :class:`Role`; the role decides
  which commands the user may run.
- ``branch_permissions.json`` holds per-user branch rights (see
  :mod:`mygit.security.policies`).

Both files are read from disk on every query, so edits take effect on the
next command.  A missing or unreadable roles file denies every command.
A missing or unreadable branch policy falls back to
``Settings.branch_policy_fail_open`` (allow by default).
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from mygit.config import BRANCH_PERMISSIONS_FILE, ROLES_FILE, Settings
from mygit.errors import AccessDeniedError, StorageIOError
from mygit.security.policies import AccessMode, BranchPolicy, GlobalPolicy, UserBranchPolicy

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """User roles, each with a fixed command allow-list."""

    ADMIN = "admin"
    DEVELOPER = "developer"
    VIEWER = "viewer"


# Permission matrix: role -> commands allowed
ROLE_COMMANDS: dict[Role, frozenset[str]] = {
    Role.ADMIN: frozenset({
        "init", "add", "commit", "status", "log", "branch",
        "create-branch", "checkout", "push", "pull",
    }),
    Role.DEVELOPER: frozenset({"add", "commit", "status", "log", "branch"}),
    Role.VIEWER: frozenset({"status", "log"}),
}


class AccessMediator:
    """Answer access questions for one repository.

    Parameters
    ----------
    repo_dir:
        The ``.mygit`` directory holding the policy documents.
    settings:
        Runtime settings; only ``branch_policy_fail_open`` is consulted.
    """

    def __init__(self, repo_dir: str | Path, settings: Settings | None = None) -> None:
        self.repo_dir = Path(repo_dir)
        self.settings = settings or Settings()
        self._roles_path = self.repo_dir / ROLES_FILE
        self._branch_policy_path = self.repo_dir / BRANCH_PERMISSIONS_FILE

    # -- Loading ----------------------------------------------------------------

    def _load_roles(self) -> dict[str, str] | None:
        """Return the role map, or *None* when it cannot be used."""
        try:
            data = json.loads(self._roles_path.read_text(encoding="utf-8"))
        except OSError as exc:
            logger.warning("Error reading %s: %s", ROLES_FILE, exc)
            return None
        except ValueError as exc:
            logger.warning("Error parsing %s: %s", ROLES_FILE, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Error parsing %s: expected a JSON object", ROLES_FILE)
            return None
        return data

    def _load_branch_policy(self) -> BranchPolicy | None:
        """Return the branch policy, or *None* when it cannot be used."""
        try:
            raw = self._branch_policy_path.read_bytes()
        except OSError:
            logger.debug("No readable %s", BRANCH_PERMISSIONS_FILE, exc_info=True)
            return None
        try:
            return BranchPolicy.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Error parsing %s: %s", BRANCH_PERMISSIONS_FILE, exc)
            return None

    # -- Queries ----------------------------------------------------------------

    def get_role(self, user: str) -> Role | None:
        """Return the role of *user*, or *None* if unknown."""
        roles = self._load_roles()
        if roles is None:
            return None
        try:
            return Role(roles.get(user))
        except ValueError:
            return None

    def has_permission(self, user: str, command: str) -> bool:
        """Return *True* if the role of *user* allows *command*."""
        role = self.get_role(user)
        if role is None:
            return False
        return command in ROLE_COMMANDS[role]

    def can_create_branch(self, user: str) -> bool:
        """Return *True* if *user* may create branches."""
        policy = self._load_branch_policy()
        if policy is None:
            return self.settings.branch_policy_fail_open
        return policy.for_user(user).global_.can_create_branch

    def can_access_branch(self, user: str, branch: str, mode: AccessMode | str) -> bool:
        """Return *True* if *user* has *mode* access (``view``/``edit``) on *branch*."""
        policy = self._load_branch_policy()
        if policy is None:
            return self.settings.branch_policy_fail_open
        return policy.for_user(user).allows(branch, mode)

    # -- Enforcement ------------------------------------------------------------

    def require_permission(self, user: str, command: str) -> None:
        """Raise :class:`AccessDeniedError` if *user* may not run *command*."""
        if not self.has_permission(user, command):
            raise AccessDeniedError(
                f"Access denied: User '{user}' is not allowed to run '{command}'"
            )

    def require_branch_creation(self, user: str) -> None:
        if not self.can_create_branch(user):
            raise AccessDeniedError(
                f"User '{user}' is not allowed to create new branches."
            )

    def require_branch_access(self, user: str, branch: str, mode: AccessMode | str) -> None:
        if not self.can_access_branch(user, branch, mode):
            raise AccessDeniedError(
                f"User '{user}' is not allowed to {AccessMode(mode).value} branch '{branch}'."
            )


class PolicyStore:
    """Edit the policy documents of a repository.

    Unlike :class:`AccessMediator` this class is strict: an unreadable
    document raises :class:`StorageIOError` instead of falling back to a
    default, so a bad file is never silently replaced.
    """

    def __init__(self, repo_dir: str | Path) -> None:
        self.repo_dir = Path(repo_dir)
        self._roles_path = self.repo_dir / ROLES_FILE
        self._branch_policy_path = self.repo_dir / BRANCH_PERMISSIONS_FILE

    def _read_roles(self) -> dict[str, str]:
        if not self._roles_path.is_file():
            return {}
        try:
            data = json.loads(self._roles_path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as exc:
            raise StorageIOError(f"Could not read {ROLES_FILE}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageIOError(f"Could not read {ROLES_FILE}: expected a JSON object")
        return data

    def _write_roles(self, roles: dict[str, str]) -> None:
        self.repo_dir.mkdir(parents=True, exist_ok=True)
        self._roles_path.write_text(json.dumps(roles, indent=2), encoding="utf-8")

    def _read_branch_policy(self) -> BranchPolicy:
        if not self._branch_policy_path.is_file():
            return BranchPolicy({})
        try:
            return BranchPolicy.model_validate_json(
                self._branch_policy_path.read_bytes()
            )
        except (ValidationError, OSError) as exc:
            raise StorageIOError(f"Could not read {BRANCH_PERMISSIONS_FILE}: {exc}") from exc

    def _write_branch_policy(self, policy: BranchPolicy) -> None:
        self.repo_dir.mkdir(parents=True, exist_ok=True)
        self._branch_policy_path.write_text(policy.to_json(), encoding="utf-8")

    # -- Roles ----------------------------------------------------------------

    def set_role(self, user: str, role: Role | str) -> None:
        """Assign a role to a user."""
        role = Role(role)
        roles = self._read_roles()
        roles[user] = role.value
        self._write_roles(roles)
        logger.info("Assigned role %s to %s", role.value, user)

    def get_role(self, user: str) -> Role | None:
        """Return the role stored for *user*, or *None*."""
        try:
            return Role(self._read_roles().get(user))
        except ValueError:
            return None

    def remove_user(self, user: str) -> bool:
        """Remove a user from the role map.  Returns *True* if present."""
        roles = self._read_roles()
        if user not in roles:
            return False
        del roles[user]
        self._write_roles(roles)
        return True

    def list_users(self) -> dict[str, str]:
        """Return all user-role mappings."""
        return dict(self._read_roles())

    # -- Branch policy --------------------------------------------------------

    def _update_user(self, user: str) -> tuple[BranchPolicy, UserBranchPolicy]:
        policy = self._read_branch_policy()
        entry = policy.root.get(user)
        if entry is None:
            entry = UserBranchPolicy()
            policy.root[user] = entry
        return policy, entry

    def set_can_create_branch(self, user: str, allowed: bool) -> None:
        """Grant or revoke branch creation for *user*."""
        policy, entry = self._update_user(user)
        entry.global_ = GlobalPolicy(can_create_branch=allowed)
        self._write_branch_policy(policy)

    def set_branch_access(self, user: str, branch: str, mode: AccessMode | str) -> None:
        """Give *user* ``view`` or ``edit`` access to *branch*."""
        mode = AccessMode(mode)
        policy, entry = self._update_user(user)
        entry.branch_access[branch] = mode.value
        self._write_branch_policy(policy)
        logger.info("Granted %s access on %s to %s", mode.value, branch, user)
