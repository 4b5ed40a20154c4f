"""Exception hierarchy shared by the storage, security, and vcs layers.

Every failure a command can hit maps to exactly one of these kinds; the
CLI driver catches :class:`MyGitError` and prints ``str(exc)`` as a single
line.
"""

from __future__ import annotations


class MyGitError(Exception):
    """Base class for all mygit failures."""


class NotFoundError(MyGitError):
    """A file, object, or branch that was asked for does not exist."""


class CorruptError(MyGitError):
    """Stored data could not be parsed (bad JSON, invalid HEAD, ...)."""


class StorageIOError(MyGitError):
    """Reading or writing repository data failed at the OS level."""


class AccessDeniedError(MyGitError):
    """The access mediator refused the operation."""


class UserError(MyGitError):
    """The request itself cannot be satisfied (empty staging area, bad name)."""
