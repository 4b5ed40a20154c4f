"""
Command-line driver for mygit.

Every command takes the acting username first:

    mygit init alice
    mygit add alice notes.txt
    mygit commit alice "Alice" "first snapshot"
    mygit create-branch alice feature
    mygit checkout alice feature

Failures print a single line.  The exit status stays 0 unless
``strict_exit`` is enabled (``MYGIT_STRICT_EXIT=true`` or
``.mygit/config.json``), in which case failed commands exit with 1.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import click

from mygit import __version__
from mygit.errors import MyGitError
from mygit.vcs import (
    Repository,
    commit_changes,
    create_branch,
    iter_history,
    list_branches,
    switch_branch,
)

logger = logging.getLogger(__name__)

LOG_DELIMITER = "=" * 36

# Extra arguments are ignored rather than rejected
_COMMAND_SETTINGS = {"ignore_unknown_options": True, "allow_extra_args": True}


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _usage(signature: str) -> None:
    click.echo(f"Usage: mygit {signature}")


def _fail(ctx: click.Context, repo: Repository, message: str) -> None:
    """Print *message* and stop; the exit status follows ``strict_exit``."""
    click.echo(click.format_filename(message))
    ctx.exit(1 if repo.settings.strict_exit else 0)


@contextmanager
def _reporting(repo: Repository) -> Iterator[None]:
    """Turn a :class:`MyGitError` into one line of output."""
    try:
        yield
    except MyGitError as exc:
        logger.debug("Command failed", exc_info=True)
        click.echo(click.format_filename(str(exc)))
        if repo.settings.strict_exit:
            raise click.exceptions.Exit(1) from exc


class _CommandGroup(click.Group):
    """Group that answers an unknown command with one line instead of a usage error."""

    def resolve_command(self, ctx: click.Context, args: list[str]):
        name = args[0]
        if self.get_command(ctx, name) is None:
            repo = Repository.discover(ctx.params.get("repo_path"))
            if len(args) < 2:
                _usage("<command> <username> [args...]")
                ctx.exit(0)
            username = args[1]
            if not repo.mediator.has_permission(username, name):
                _fail(
                    ctx, repo,
                    f"Access denied: User '{username}' is not allowed to run '{name}'",
                )
            _fail(ctx, repo, f"Unknown command: {name}")
        return super().resolve_command(ctx, args)


@click.group(cls=_CommandGroup, invoke_without_command=True)
@click.version_option(version=__version__)
@click.option(
    "--repo",
    "repo_path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Working directory of the repository (default: search upward from CWD)",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, repo_path: Optional[Path], verbose: bool):
    """MyGit: a minimal version-control engine with role-based access."""
    if ctx.invoked_subcommand is None:
        _usage("<command> <username> [args...]")
        return
    repo = Repository.discover(repo_path)
    _configure_logging("DEBUG" if verbose else repo.settings.log_level)
    ctx.obj = repo


@cli.command(context_settings=_COMMAND_SETTINGS)
@click.argument("username", required=False)
@click.pass_obj
def init(repo: Repository, username: Optional[str]):
    """Create the .mygit directory."""
    if not username:
        _usage("init <username>")
        return
    with _reporting(repo):
        repo.init(username)
        click.echo("Initialized empty MyGit repository.")


@cli.command(context_settings=_COMMAND_SETTINGS)
@click.argument("username", required=False)
@click.argument("filename", required=False)
@click.pass_obj
def add(repo: Repository, username: Optional[str], filename: Optional[str]):
    """Stage a file."""
    if not username or not filename:
        _usage("add <username> <file>")
        return
    with _reporting(repo):
        object_id = repo.add(username, filename)
        click.echo(f"Added {click.format_filename(filename)} to index (hash: {object_id})")


@cli.command(context_settings=_COMMAND_SETTINGS)
@click.argument("username", required=False)
@click.argument("author", required=False)
@click.argument("message", required=False)
@click.pass_obj
def commit(
    repo: Repository,
    username: Optional[str],
    author: Optional[str],
    message: Optional[str],
):
    """Commit the staged files to the current branch."""
    if not username or author is None or message is None:
        _usage("commit <username> <author> <message>")
        return
    with _reporting(repo):
        object_id = commit_changes(repo, username, author, message)
        click.echo(f"Committed to '{repo.current_branch()}' with hash {object_id}")


@cli.command(context_settings=_COMMAND_SETTINGS)
@click.argument("username", required=False)
@click.pass_obj
def status(repo: Repository, username: Optional[str]):
    """Show staged, modified, and untracked files."""
    if not username:
        _usage("status <username>")
        return
    with _reporting(repo):
        entries = repo.status(username)
        click.echo("=== MyGit Status ===")
        for entry in entries:
            click.echo(click.format_filename(str(entry)))
        if not entries:
            click.echo("Nothing to report, working tree clean.")


@cli.command(context_settings=_COMMAND_SETTINGS)
@click.argument("username", required=False)
@click.argument("branch", required=False)
@click.pass_obj
def log(repo: Repository, username: Optional[str], branch: Optional[str]):
    """Show the history of the current (or given) branch."""
    if not username:
        _usage("log <username> [branch]")
        return
    with _reporting(repo):
        shown = 0
        for entry in iter_history(repo, username, branch):
            click.echo(LOG_DELIMITER)
            click.echo(f"Commit: {entry.sha}")
            click.echo(f"Author: {entry.author}")
            click.echo(f"Date:   {entry.date}")
            click.echo(f"Message: {entry.message}")
            click.echo(LOG_DELIMITER)
            click.echo()
            shown += 1
        if not shown:
            click.echo("No commits found.")


@cli.command(context_settings=_COMMAND_SETTINGS)
@click.argument("username", required=False)
@click.pass_obj
def branch(repo: Repository, username: Optional[str]):
    """List branches."""
    if not username:
        _usage("branch <username>")
        return
    with _reporting(repo):
        names = list_branches(repo, username)
        try:
            current = repo.current_branch()
        except MyGitError:
            current = None
        click.echo("Available branches:")
        for name in names:
            marker = "*" if name == current else "-"
            click.echo(f"{marker} {click.format_filename(name)}")


@cli.command("create-branch", context_settings=_COMMAND_SETTINGS)
@click.argument("username", required=False)
@click.argument("name", required=False)
@click.pass_obj
def create_branch_cmd(repo: Repository, username: Optional[str], name: Optional[str]):
    """Create a branch at the current head."""
    if not username or not name:
        _usage("create-branch <username> <branch-name>")
        return
    with _reporting(repo):
        create_branch(repo, username, name)
        click.echo(f"Branch created: {name}")


@cli.command(context_settings=_COMMAND_SETTINGS)
@click.argument("username", required=False)
@click.argument("name", required=False)
@click.pass_obj
def checkout(repo: Repository, username: Optional[str], name: Optional[str]):
    """Switch HEAD to another branch."""
    if not username or not name:
        _usage("checkout <username> <branch-name>")
        return
    with _reporting(repo):
        switch_branch(repo, username, name)
        click.echo(f"Switched to branch: {name}")


def main() -> None:
    cli(prog_name="mygit")


if __name__ == "__main__":
    main()
