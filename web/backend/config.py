#!/usr/bin/env python3
"""
Configuration access for the TalentScout web application.

The app built by create_app() registers its configuration here, so route
decorators (rate limits) read the same settings as the running context.
"""

from pathlib import Path
from functools import lru_cache
from typing import Optional

from core.config_loader import AppConfig, load_config

_active_config: Optional[AppConfig] = None


def set_config(config: Optional[AppConfig]) -> None:
    """Make ``config`` the application configuration (None restores config.yaml)."""
    global _active_config
    _active_config = config


def get_config() -> AppConfig:
    """
    Get application configuration.

    Returns the configuration registered with set_config(), otherwise the
    cached contents of <project root>/config.yaml with environment overrides.

    Returns:
        AppConfig: The application configuration.
    """
    if _active_config is not None:
        return _active_config
    return _default_config()


@lru_cache()
def _default_config() -> AppConfig:
    return load_config(str(get_project_root() / 'config.yaml'))


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent
