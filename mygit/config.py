"""Global configuration: paths, constants, settings."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Repository directory, created by ``init`` in the working directory
REPO_DIR = ".mygit"

# Branch HEAD points at after ``init``
DEFAULT_BRANCH = "main"

HEAD_FILE = "HEAD"
INDEX_FILE = "index"
OBJECTS_DIR = "objects"
HEADS_DIR = Path("refs") / "heads"
ROLES_FILE = "roles.json"
BRANCH_PERMISSIONS_FILE = "branch_permissions.json"
CONFIG_FILE = "config.json"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Environment variable -> Settings field
_ENV_KEYS: dict[str, str] = {
    "MYGIT_LOG_LEVEL": "log_level",
    "MYGIT_BRANCH_POLICY_FAIL_OPEN": "branch_policy_fail_open",
    "MYGIT_STRICT_EXIT": "strict_exit",
}


class Settings(BaseModel):
    """Runtime settings for a repository."""

    log_level: str = "WARNING"
    branch_policy_fail_open: bool = True
    """Answer for branch checks when branch_permissions.json is missing or unreadable."""

    strict_exit: bool = False
    """Exit the CLI with status 1 when a command fails."""

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return value


def load_settings(repo_dir: str | Path | None = None) -> Settings:
    """Load merged settings: defaults -> ``<repo_dir>/config.json`` -> env vars.

    Invalid values from either source are logged and skipped rather than
    failing the command that asked for them.
    """
    values: dict[str, Any] = {}

    if repo_dir is not None:
        config_json = Path(repo_dir) / CONFIG_FILE
        if config_json.is_file():
            try:
                data = json.loads(config_json.read_text(encoding="utf-8"))
                if isinstance(data, dict):
                    values.update(
                        {k: v for k, v in data.items() if k in Settings.model_fields}
                    )
            except (ValueError, OSError):
                logger.debug("Could not read %s", config_json, exc_info=True)

    for env_key, field in _ENV_KEYS.items():
        env_val = os.environ.get(env_key)
        if env_val is not None:
            values[field] = env_val

    try:
        return Settings(**values)
    except ValidationError as exc:
        logger.warning("Ignoring invalid settings: %s", exc)
        return Settings()
