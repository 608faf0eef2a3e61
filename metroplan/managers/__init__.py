"""
Managers for the MetroPlan application.

Currently holds configuration management.
"""

from .config_manager import ConfigManager, ConfigData, ConfigurationError

__all__ = [
    "ConfigManager",
    "ConfigData",
    "ConfigurationError",
]
