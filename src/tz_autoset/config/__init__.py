"""Configuration management for tz-autoset."""

from tz_autoset.config.schema import AppConfig
from tz_autoset.config.manager import ConfigManager

__all__ = ["AppConfig", "ConfigManager"]
