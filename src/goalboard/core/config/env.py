"""
.env file loading for the API token and GOALBOARD_* overrides.

Files are read in ascending precedence:
    $XDG_CONFIG_HOME/goalboard/.env  <  .env  <  .env.local

A later file wins over an earlier one, but no file overrides a variable that
was already set in the process environment when loading started.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)


def get_env_file_paths(project_dir: Path | None = None) -> list[Path]:
    """
    Default env files, lowest precedence first.

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)
    """
    base = project_dir if project_dir is not None else Path.cwd()
    return [
        get_xdg_config_home() / "goalboard" / ".env",
        base / ".env",
        base / ".env.local",
    ]


def read_env_file(path: Path) -> dict[str, str]:
    """Variables defined in one env file; bare keys without a value are skipped."""
    if not path.is_file():
        return {}
    return {
        key: value
        for key, value in dotenv_values(path).items()
        if key and value is not None
    }


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> list[str]:
    """
    Export variables from the user and project env files.

    Args:
        project_dir: Base directory for the default project env files
        user_env_paths: Explicit user env files (replace the XDG default)
        project_env_paths: Explicit project env files (replace .env/.env.local)

    Returns:
        Names of the variables that were exported
    """
    defaults = get_env_file_paths(project_dir)
    paths = [
        *(defaults[:1] if user_env_paths is None else user_env_paths),
        *(defaults[1:] if project_env_paths is None else project_env_paths),
    ]

    merged: dict[str, str] = {}
    for path in paths:
        merged.update(read_env_file(Path(path)))

    exported = [key for key in merged if key not in os.environ]
    for key in exported:
        os.environ[key] = merged[key]

    if exported:
        logger.debug("Exported from env files: %s", ", ".join(sorted(exported)))
    return exported
