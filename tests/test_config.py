"""Tests for settings loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mygit.config import Settings, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for key in ("MYGIT_LOG_LEVEL", "MYGIT_BRANCH_POLICY_FAIL_OPEN", "MYGIT_STRICT_EXIT"):
        monkeypatch.delenv(key, raising=False)


class TestSettings:
    def test_defaults(self, tmp_path: Path):
        settings = load_settings(tmp_path)
        assert settings == Settings()
        assert settings.log_level == "WARNING"
        assert settings.branch_policy_fail_open is True
        assert settings.strict_exit is False

    def test_config_json(self, tmp_path: Path):
        (tmp_path / "config.json").write_text(json.dumps({
            "branch_policy_fail_open": False,
            "log_level": "info",
            "unrelated": 1,
        }))
        settings = load_settings(tmp_path)
        assert settings.branch_policy_fail_open is False
        assert settings.log_level == "INFO"

    def test_env_overrides_config_json(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        (tmp_path / "config.json").write_text(json.dumps({"strict_exit": False}))
        monkeypatch.setenv("MYGIT_STRICT_EXIT", "1")
        assert load_settings(tmp_path).strict_exit is True

    def test_unreadable_config_json_ignored(self, tmp_path: Path):
        (tmp_path / "config.json").write_text("{nope")
        assert load_settings(tmp_path) == Settings()

    def test_invalid_value_falls_back_to_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MYGIT_LOG_LEVEL", "LOUD")
        assert load_settings(tmp_path) == Settings()

    def test_no_repo_dir(self):
        assert load_settings(None) == Settings()
