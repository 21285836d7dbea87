"""
Configuration for the pushnotifier CLI.
"""

from pushnotifier.config.config_loader import (
    ConfigError,
    ConfigLoader,
    PushNotifierConfig,
    default_config_path,
    load_config,
    save_config,
)

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "PushNotifierConfig",
    "default_config_path",
    "load_config",
    "save_config",
]
