"""
Configuration management for the MetroPlan application.

This module handles loading, saving, and validating application configuration
using Pydantic models for type safety and validation.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from version import __version__

logger = logging.getLogger(__name__)


class EngineConfig(BaseModel):
    """Configuration for the external simulation engine."""

    base_url: str = "http://127.0.0.1:8750"
    timeout_seconds: int = Field(default=300, ge=1, description="Total request timeout")
    max_retries: int = Field(default=3, ge=1, le=10, description="Attempts on network errors")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Strip trailing slashes so endpoint paths can be appended."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Engine base_url must be an http(s) URL")
        return v.rstrip("/")


class EditorConfig(BaseModel):
    """Configuration for network editing."""

    default_link_weight: int = Field(default=3, gt=0)
    default_route_color: str = "#1976d2"
    prompt_for_link_weight: bool = True


class PlaybackConfig(BaseModel):
    """Configuration for simulation playback."""

    tick_interval_ms: int = Field(default=200, ge=10, le=5000)
    marker_radius: float = Field(default=6.0, gt=0)


class SimulationConfig(BaseModel):
    """Configuration for simulation requests."""

    frequency: int = Field(default=10, gt=0, description="Train headway sent to the engine")


class ConfigData(BaseModel):
    """Main configuration data model."""

    engine: EngineConfig = EngineConfig()
    editor: EditorConfig = EditorConfig()
    playback: PlaybackConfig = PlaybackConfig()
    simulation: SimulationConfig = SimulationConfig()
    config_version: str = __version__


class ConfigurationError(Exception):
    """Exception raised for configuration-related errors."""

    pass


class ConfigManager:
    """
    Manages application configuration with file persistence.

    Handles loading configuration from JSON files, creating default
    configurations, and saving changes back to disk.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, uses the user config directory
        """
        if config_path is None:
            self.config_path = self.get_default_config_path()
        else:
            self.config_path = Path(config_path)
        self.config: Optional[ConfigData] = None

        logger.debug(f"ConfigManager initialized with path: {self.config_path}")

    @staticmethod
    def get_default_config_path() -> Path:
        """
        Get the default configuration file path.

        On Windows, uses AppData/Roaming/MetroPlan/config.json
        Elsewhere, uses XDG_CONFIG_HOME/MetroPlan/config.json or ~/.config/MetroPlan/config.json

        Returns:
            Path: Default configuration file path
        """
        if os.name == "nt":
            appdata = os.environ.get("APPDATA")
            if appdata:
                return Path(appdata) / "MetroPlan" / "config.json"

        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "MetroPlan" / "config.json"
        return Path.home() / ".config" / "MetroPlan" / "config.json"

    def load_config(self) -> ConfigData:
        """
        Load configuration from file.

        If the configuration file doesn't exist, creates a default one.

        Returns:
            ConfigData: The loaded configuration

        Raises:
            ConfigurationError: If the configuration file is invalid
        """
        logger.debug(f"Loading config from: {self.config_path}")

        if not self.config_path.exists():
            logger.info(f"Config file doesn't exist, creating default at: {self.config_path}")
            self.create_default_config()
            return self.config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self.config = ConfigData(**data)
            logger.debug(f"Successfully loaded config from: {self.config_path}")
            return self.config
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file: {e}")
        except Exception as e:
            raise ConfigurationError(f"Failed to load config: {e}")

    def save_config(self, config: ConfigData) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration data to save

        Returns:
            bool: True if saved successfully, False otherwise
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(), f, indent=2, ensure_ascii=False)
            self.config = config
            logger.info(f"Saved config to: {self.config_path}")
            return True
        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")
            return False

    def create_default_config(self) -> None:
        """Create a default configuration file."""
        self.config = ConfigData()
        self.save_config(self.config)

    def update_frequency(self, frequency: int) -> None:
        """
        Update the simulation frequency and save to file.

        Args:
            frequency: Train headway sent to the engine
        """
        if self.config is None:
            self.load_config()

        if self.config and frequency > 0:
            self.config.simulation.frequency = frequency
            self.save_config(self.config)
