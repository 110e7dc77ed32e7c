"""
Configuration models and loading.

Pydantic models for goalboard configuration with multi-layer merging:
defaults < user < project < env vars.
"""

from .env import load_layered_env
from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import (
    ApiConfig,
    CalendarConfig,
    EndpointsConfig,
    GoalboardConfig,
    ToggleConfig,
)

__all__ = [
    # Models
    "ApiConfig",
    "CalendarConfig",
    "EndpointsConfig",
    "GoalboardConfig",
    "ToggleConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
]
