"""
FLEETID_* settings from .env files.

Only keys starting with ``FLEETID_`` are exported; anything else in a .env
file belongs to the host application and is left alone. Variables already
present in the process environment always win, and among files the first
one to define a key wins:

    os.environ > project .env.local > project .env > user fleetid/.env
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

from .loader import get_xdg_config_home

logger = logging.getLogger(__name__)

ENV_PREFIX = "FLEETID_"


def env_file_paths(project_dir: Path | None = None) -> list[Path]:
    """
    List the .env files consulted, highest precedence first.

    Args:
        project_dir: Project directory (defaults to current directory)
    """
    if project_dir is None:
        project_dir = Path.cwd()
    return [
        project_dir / ".env.local",
        project_dir / ".env",
        get_xdg_config_home() / "fleetid" / ".env",
    ]


def load_env_files(project_dir: Path | None = None) -> dict[str, str]:
    """
    Export FLEETID_* settings found in .env files into ``os.environ``.

    Args:
        project_dir: Project directory to look for .env files in

    Returns:
        The settings that were exported, keyed by variable name
    """
    exported: dict[str, str] = {}
    for path in env_file_paths(project_dir):
        if not path.is_file():
            continue
        for key, value in dotenv_values(path).items():
            if value is None or not key.startswith(ENV_PREFIX) or key in os.environ:
                continue
            os.environ[key] = value
            exported[key] = value
            logger.debug("Loaded %s from %s", key, path)
    return exported
