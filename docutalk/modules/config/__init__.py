"""Configuration module."""

from .config_manager import AppSettings, ConfigManager, config_manager, get_app_settings, resolve_env_var

__all__ = [
    "AppSettings",
    "ConfigManager",
    "config_manager",
    "get_app_settings",
    "resolve_env_var",
]
