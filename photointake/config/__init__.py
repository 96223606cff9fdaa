"""Configuration management for photointake."""

from photointake.config.manager import ConfigManager, ConfigError
from photointake.config.defaults import DEFAULT_CONFIG

__all__ = ["ConfigManager", "ConfigError", "DEFAULT_CONFIG"]
