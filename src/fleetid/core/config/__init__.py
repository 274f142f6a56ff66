"""
Configuration models and loading.

This module provides the Pydantic model for fleetid configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .loader import (
    ConfigError,
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import FleetIdConfig

__all__ = [
    # Models
    "FleetIdConfig",
    # Loader functions
    "ConfigError",
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
]
