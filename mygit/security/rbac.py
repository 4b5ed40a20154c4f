"""Gate repository operations on the role command allow-list."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def requires_command(command: str) -> Callable[[F], F]:
    """Decorator that checks *command* against the caller's role first.

    The decorated function must take the repository (anything with a
    ``mediator`` attribute) and the acting username as its first two
    positional arguments.  The check runs before the function body, so a
    denied call has no side effects.

    Usage::

        @requires_command("commit")
        def commit_changes(repo, username, author, message):
            ...
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(repo: Any, username: str, *args: Any, **kwargs: Any) -> Any:
            repo.mediator.require_permission(username, command)
            logger.debug("User '%s' authorised for '%s'", username, command)
            return fn(repo, username, *args, **kwargs)

        wrapper.command = command  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorator
