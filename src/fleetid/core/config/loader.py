"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import FleetIdConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config on every default-generator lookup
_config_cache: FleetIdConfig | None = None

# Env var -> config key, all integer-valued except the timezone
_INT_ENV_OVERRIDES = {
    "FLEETID_NODE": "node",
    "FLEETID_MAX_IDS_PER_MS": "max_ids_per_ms",
    "FLEETID_MAX_ATTEMPTS": "max_attempts",
}


class ConfigError(Exception):
    """Raised when configuration input exists but cannot be used."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/fleetid/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "fleetid" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .fleetid.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".fleetid.json"


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON config file.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if the file doesn't exist

    Raises:
        ConfigError: If the file exists but is not a JSON object
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Failed to parse config at {path}: {e}", source=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} must be a JSON object", source=str(path))
    return data


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        FLEETID_NODE - overrides node
        FLEETID_MAX_IDS_PER_MS - overrides max_ids_per_ms
        FLEETID_MAX_ATTEMPTS - overrides max_attempts
        FLEETID_TIMEZONE - overrides timezone

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied

    Raises:
        ConfigError: If an integer override is not a number
    """
    result = config_dict.copy()

    for env_name, key in _INT_ENV_OVERRIDES.items():
        if raw := os.environ.get(env_name):
            try:
                result[key] = int(raw)
            except ValueError:
                raise ConfigError(
                    f"Invalid {env_name} value '{raw}', expected an integer",
                    source=env_name,
                ) from None

    if tz_name := os.environ.get("FLEETID_TIMEZONE"):
        result["timezone"] = tz_name

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return FleetIdConfig().model_dump()


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> FleetIdConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (FLEETID_*)
        2. Project config (.fleetid.json)
        3. User config (~/.config/fleetid/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .fleetid.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated FleetIdConfig instance

    Raises:
        ConfigError: If a config file or env override is unusable
        ValidationError: If the merged config fails Pydantic validation

    Example:
        >>> config = load_config()
        >>> config.max_attempts
        512
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged.update(user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged.update(project_config)

    merged = apply_env_overrides(merged)

    config = FleetIdConfig(**merged)
    logger.debug("Loaded config: %s", config.model_dump())

    _config_cache = config
    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
