"""Branch policy documents, the shape of ``branch_permissions.json``.

A JSON ``null`` anywhere in the document reads as an empty entry, so it
grants nothing.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, StrictBool, field_validator


class AccessMode(str, Enum):
    """Level of access to a single branch."""

    VIEW = "view"
    EDIT = "edit"


class GlobalPolicy(BaseModel):
    """Repository-wide rights for one user."""

    model_config = ConfigDict(populate_by_name=True)

    can_create_branch: StrictBool = Field(default=False, alias="canCreateBranch")

    @field_validator("can_create_branch", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        return False if value is None else value


class UserBranchPolicy(BaseModel):
    """Per-user entry: global rights plus per-branch access levels."""

    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalPolicy = Field(default_factory=GlobalPolicy, alias="global")
    branch_access: dict[str, str] = Field(default_factory=dict, alias="branchAccess")
    """Branch name -> ``"view"`` or ``"edit"``.  Other values grant nothing."""

    @field_validator("global_", mode="before")
    @classmethod
    def _null_global(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("branch_access", mode="before")
    @classmethod
    def _null_branch_access(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if v is not None}
        return value

    def allows(self, branch: str, mode: AccessMode | str) -> bool:
        """Return *True* if this entry grants *mode* on *branch*.

        ``edit`` implies ``view``.
        """
        mode = AccessMode(mode)
        level = self.branch_access.get(branch)
        if level == AccessMode.EDIT.value:
            return True
        return level == AccessMode.VIEW.value and mode is AccessMode.VIEW


class BranchPolicy(RootModel[dict[str, UserBranchPolicy]]):
    """The whole ``branch_permissions.json`` document, keyed by username."""

    @field_validator("root", mode="before")
    @classmethod
    def _null_entries(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {user: {} if entry is None else entry for user, entry in value.items()}
        return value

    def for_user(self, user: str) -> UserBranchPolicy:
        """Return the entry for *user*; unknown users get an empty entry."""
        return self.root.get(user) or UserBranchPolicy()

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
