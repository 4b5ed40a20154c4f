"""Access control: roles, branch policies, and content hashing."""

from mygit.security.hasher import Hasher
from mygit.security.permissions import ROLE_COMMANDS, AccessMediator, PolicyStore, Role
from mygit.security.policies import AccessMode, BranchPolicy, UserBranchPolicy
from mygit.security.rbac import requires_command

__all__ = [
    "AccessMediator",
    "AccessMode",
    "BranchPolicy",
    "Hasher",
    "PolicyStore",
    "ROLE_COMMANDS",
    "Role",
    "UserBranchPolicy",
    "requires_command",
]
