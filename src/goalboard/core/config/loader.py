"""
Layered configuration loading.

Each layer is a (partial) JSON object deep-merged over the previous one:

    model defaults
    < $XDG_CONFIG_HOME/goalboard/config.json
    < ./.goalboard.json
    < GOALBOARD_* environment variables

The merged result is validated once, as a GoalboardConfig, and cached for
the process.
"""

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .models import GoalboardConfig

logger = logging.getLogger(__name__)

_cached: GoalboardConfig | None = None


def get_xdg_config_home() -> Path:
    """$XDG_CONFIG_HOME, or ~/.config when unset."""
    configured = os.environ.get("XDG_CONFIG_HOME")
    return Path(configured) if configured else Path.home() / ".config"


def get_user_config_path() -> Path:
    """Per-user config file: <XDG config home>/goalboard/config.json."""
    return get_xdg_config_home() / "goalboard" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Project config file: .goalboard.json in ``cwd`` (default: current directory).
    """
    return (cwd if cwd is not None else Path.cwd()) / ".goalboard.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``.

    Nested objects merge key by key; any other value in ``override``
    replaces the one in ``base``. Neither argument is modified.

    Example:
        >>> deep_merge({"api": {"base_url": "a", "timeout_seconds": 5}},
        ...            {"api": {"timeout_seconds": 30}})
        {'api': {'base_url': 'a', 'timeout_seconds': 30}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Read one config layer.

    Returns:
        The JSON object, or None when the file is missing, unreadable, not
        JSON, or not an object (a warning is logged for the last three)
    """
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring config at %s: expected a JSON object", path)
        return None
    return data


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise ValueError("must be > 0")
    return value


def _one_of(*choices: str) -> Callable[[str], str]:
    def parse(raw: str) -> str:
        value = raw.strip().lower()
        if value not in choices:
            raise ValueError(f"expected one of {', '.join(choices)}")
        return value

    return parse


# env var -> (section, key, parser); a parser raises ValueError to reject
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "GOALBOARD_API_URL": ("api", "base_url", str.strip),
    "GOALBOARD_API_TIMEOUT": ("api", "timeout_seconds", _positive_float),
    "GOALBOARD_DATE_ANCHOR": ("calendar", "anchor", _one_of("live", "session")),
    "GOALBOARD_ON_PERSIST_FAILURE": ("toggle", "on_persist_failure", _one_of("keep", "revert")),
}


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Overlay the GOALBOARD_* variables listed in ENV_OVERRIDES.

    Unset or empty variables are skipped; values the parser rejects are
    ignored with a warning. The input dict is not modified.
    """
    overrides: dict[str, dict[str, Any]] = {}
    for name, (section, key, parse) in ENV_OVERRIDES.items():
        raw = os.environ.get(name)
        if not raw:
            continue
        try:
            value = parse(raw)
        except ValueError as e:
            logger.warning("Ignoring %s=%r: %s", name, raw, e)
            continue
        overrides.setdefault(section, {})[key] = value
    return deep_merge(config_dict, overrides)


def get_default_config() -> dict[str, Any]:
    """Lowest layer: every setting at its model default."""
    return GoalboardConfig().model_dump()


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> GoalboardConfig:
    """
    Merge all layers and validate the result.

    Args:
        project_dir: Where to look for .goalboard.json (defaults to cwd)
        use_cache: Return the config from an earlier call if there is one

    Raises:
        pydantic.ValidationError: If the merged config is invalid
    """
    global _cached

    if use_cache and _cached is not None:
        return _cached

    merged = get_default_config()
    for path in (get_user_config_path(), get_project_config_path(project_dir)):
        layer = load_json_file(path)
        if layer:
            logger.debug("Merging config layer %s", path)
            merged = deep_merge(merged, layer)
    merged = apply_env_overrides(merged)

    _cached = GoalboardConfig.model_validate(merged)
    return _cached


def clear_cache() -> None:
    """Forget the cached config so the next load_config() rereads every layer."""
    global _cached
    _cached = None
