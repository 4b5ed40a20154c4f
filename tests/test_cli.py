"""Tests for the click command-line driver, end to end on a temp repo."""

from __future__ import annotations

import json
import re
from pathlib import Path

import pytest
from click.testing import CliRunner

from mygit.cli import LOG_DELIMITER, cli
from mygit.security.permissions import PolicyStore

HELLO_SHA = "f572d396fae9206628714fb2ce00f72e94f2258f"


@pytest.fixture(autouse=True)
def _in_clean_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    for key in ("MYGIT_LOG_LEVEL", "MYGIT_BRANCH_POLICY_FAIL_OPEN", "MYGIT_STRICT_EXIT"):
        monkeypatch.delenv(key, raising=False)


def _run(root: Path, *args: str):
    return CliRunner().invoke(cli, ["--repo", str(root), *args])


def _provision(root: Path, **roles: str) -> None:
    store = PolicyStore(root / ".mygit")
    for user, role in (roles or {"alice": "admin"}).items():
        store.set_role(user, role)


def _init_with_commit(root: Path) -> str:
    _provision(root)
    assert _run(root, "init", "alice").exit_code == 0
    (root / "a.txt").write_bytes(b"hello\n")
    _run(root, "add", "alice", "a.txt")
    _run(root, "commit", "alice", "Alice", "init")
    return (root / ".mygit" / "refs" / "heads" / "main").read_text()


class TestScenarios:
    def test_init_and_first_commit(self, tmp_path: Path):
        _provision(tmp_path)

        result = _run(tmp_path, "init", "alice")
        assert result.exit_code == 0
        assert "Initialized empty MyGit repository." in result.output

        (tmp_path / "a.txt").write_bytes(b"hello\n")
        result = _run(tmp_path, "add", "alice", "a.txt")
        assert f"Added a.txt to index (hash: {HELLO_SHA})" in result.output

        result = _run(tmp_path, "commit", "alice", "Alice", "init")
        head = (tmp_path / ".mygit" / "refs" / "heads" / "main").read_text()
        assert re.fullmatch(r"[0-9a-f]{40}", head)
        assert f"Committed to 'main' with hash {head}" in result.output
        assert (tmp_path / ".mygit" / "objects" / HELLO_SHA).read_bytes() == b"hello\n"
        assert not (tmp_path / ".mygit" / "index").exists()

        commit = json.loads((tmp_path / ".mygit" / "objects" / head).read_text())
        assert commit["tree"] == {"a.txt": HELLO_SHA}
        assert commit["parent"] == ""
        assert commit["author"] == "Alice"
        assert commit["message"] == "init"

    def test_status_modified_not_staged(self, tmp_path: Path):
        _init_with_commit(tmp_path)
        (tmp_path / "a.txt").write_text("something else\n")

        result = _run(tmp_path, "status", "alice")

        assert "Modified (not staged): a.txt" in result.output
        assert "Untracked" not in result.output

    def test_branch_and_checkout(self, tmp_path: Path):
        head = _init_with_commit(tmp_path)

        result = _run(tmp_path, "create-branch", "alice", "feature")
        assert "Branch created: feature" in result.output
        assert (tmp_path / ".mygit" / "refs" / "heads" / "feature").read_text() == head

        result = _run(tmp_path, "checkout", "alice", "feature")
        assert "Switched to branch: feature" in result.output
        assert (tmp_path / ".mygit" / "HEAD").read_text() == "ref: refs/heads/feature"

        result = _run(tmp_path, "branch", "alice")
        assert "Available branches:" in result.output
        assert "* feature" in result.output
        assert "- main" in result.output

    def test_viewer_commit_denied(self, tmp_path: Path):
        _provision(tmp_path, alice="admin", bob="viewer")
        _run(tmp_path, "init", "alice")
        (tmp_path / "a.txt").write_bytes(b"hello\n")
        _run(tmp_path, "add", "alice", "a.txt")
        objects = sorted((tmp_path / ".mygit" / "objects").iterdir())
        index = (tmp_path / ".mygit" / "index").read_text()

        result = _run(tmp_path, "commit", "bob", "Bob", "x")

        assert result.exit_code == 0
        assert "Access denied: User 'bob' is not allowed to run 'commit'" in result.output
        assert sorted((tmp_path / ".mygit" / "objects").iterdir()) == objects
        assert (tmp_path / ".mygit" / "index").read_text() == index
        assert not (tmp_path / ".mygit" / "refs" / "heads" / "main").exists()

    def test_log_three_commits(self, tmp_path: Path):
        first = _init_with_commit(tmp_path)
        for n in (2, 3):
            (tmp_path / "a.txt").write_text(f"v{n}")
            _run(tmp_path, "add", "alice", "a.txt")
            _run(tmp_path, "commit", "alice", "Alice", f"commit {n}")

        result = _run(tmp_path, "log", "alice")

        blocks = [b for b in result.output.split(LOG_DELIMITER) if b.strip()]
        assert len(blocks) == 3
        assert "Message: commit 3" in blocks[0]
        assert "Message: commit 2" in blocks[1]
        assert f"Commit: {first}" in blocks[2]
        assert "Author: Alice" in blocks[2]


class TestDriver:
    def test_missing_username_prints_usage(self, tmp_path: Path):
        result = _run(tmp_path, "status")
        assert result.exit_code == 0
        assert "Usage: mygit status <username>" in result.output

    def test_missing_argument_prints_usage(self, tmp_path: Path):
        result = _run(tmp_path, "add", "alice")
        assert result.exit_code == 0
        assert "Usage: mygit add <username> <file>" in result.output

    def test_commit_usage(self, tmp_path: Path):
        result = _run(tmp_path, "commit", "alice", "Alice")
        assert "Usage: mygit commit <username> <author> <message>" in result.output

    def test_add_missing_file_message(self, tmp_path: Path):
        _provision(tmp_path)
        _run(tmp_path, "init", "alice")
        result = _run(tmp_path, "add", "alice", "ghost.txt")
        assert result.exit_code == 0
        assert "File does not exist: ghost.txt" in result.output

    def test_nothing_to_commit(self, tmp_path: Path):
        _provision(tmp_path)
        _run(tmp_path, "init", "alice")
        result = _run(tmp_path, "commit", "alice", "Alice", "empty")
        assert "Nothing to commit. Staging area is empty." in result.output

    def test_log_without_commits(self, tmp_path: Path):
        _provision(tmp_path)
        _run(tmp_path, "init", "alice")
        result = _run(tmp_path, "log", "alice")
        assert "No commits found." in result.output

    def test_log_partial_output_before_error(self, tmp_path: Path):
        head = _init_with_commit(tmp_path)
        (tmp_path / "a.txt").write_text("v2")
        _run(tmp_path, "add", "alice", "a.txt")
        _run(tmp_path, "commit", "alice", "Alice", "second")
        (tmp_path / ".mygit" / "objects" / head).write_text("{corrupt")

        result = _run(tmp_path, "log", "alice")

        assert "Message: second" in result.output
        assert f"Corrupted commit object {head}" in result.output

    def test_checkout_missing_branch(self, tmp_path: Path):
        _init_with_commit(tmp_path)
        result = _run(tmp_path, "checkout", "alice", "nope")
        assert "Branch does not exist: nope" in result.output

    def test_strict_exit(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MYGIT_STRICT_EXIT", "true")
        result = _run(tmp_path, "status", "alice")
        assert result.exit_code == 1
        assert "Access denied" in result.output

    def test_strict_exit_success_is_zero(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MYGIT_STRICT_EXIT", "true")
        _init_with_commit(tmp_path)
        assert _run(tmp_path, "status", "alice").exit_code == 0

    def test_unknown_command(self, tmp_path: Path):
        _provision(tmp_path)
        result = _run(tmp_path, "push", "alice")
        assert result.exit_code == 0
        assert "Unknown command: push" in result.output

    def test_unknown_command_checked_against_roles_first(self, tmp_path: Path):
        _provision(tmp_path)
        result = _run(tmp_path, "frobnicate", "alice")
        assert result.exit_code == 0
        assert "Access denied: User 'alice' is not allowed to run 'frobnicate'" in result.output

    def test_unknown_command_strict_exit(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MYGIT_STRICT_EXIT", "true")
        _provision(tmp_path)
        result = _run(tmp_path, "push", "alice")
        assert result.exit_code == 1
        assert "Unknown command: push" in result.output

    @pytest.mark.parametrize("args", [[], ["push"]])
    def test_generic_usage(self, tmp_path: Path, args: list[str]):
        result = _run(tmp_path, *args)
        assert result.exit_code == 0
        assert "Usage: mygit <command> <username> [args...]" in result.output

    def test_extra_arguments_ignored(self, tmp_path: Path):
        _init_with_commit(tmp_path)
        result = _run(tmp_path, "status", "alice", "x", "--flag")
        assert result.exit_code == 0
        assert "=== MyGit Status ===" in result.output

    def test_non_utf8_message(self, tmp_path: Path):
        _init_with_commit(tmp_path)
        (tmp_path / "a.txt").write_text("v2")
        _run(tmp_path, "add", "alice", "a.txt")
        message = b"m\xff".decode("utf-8", "surrogateescape")

        result = _run(tmp_path, "commit", "alice", "Alice", message)

        assert result.exception is None
        head = (tmp_path / ".mygit" / "refs" / "heads" / "main").read_text()
        assert f"Committed to 'main' with hash {head}" in result.output
        stored = json.loads((tmp_path / ".mygit" / "objects" / head).read_text())
        assert stored["message"] == "m\ufffd"
