"""Configuration loading and validation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tz_autoset.config.schema import AppConfig
from tz_autoset.errors import ConfigError

logger = logging.getLogger(__name__)


class ConfigManager:
    """Loads config from a defaults YAML file plus optional user overrides."""

    def __init__(
        self,
        defaults_path: Path | None = None,
        user_path: Path | None = None,
    ) -> None:
        self._defaults_path = defaults_path or Path("config.defaults.yaml")
        self._user_path = user_path or Path("config.yaml")
        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            raise RuntimeError("Config not loaded. Call load() first.")
        return self._config

    def load(self) -> AppConfig:
        """Load configuration from defaults + user overrides."""
        defaults = self._load_yaml(self._defaults_path)
        overrides = self._load_yaml(self._user_path)
        merged = self._deep_merge(defaults, overrides)
        try:
            self._config = AppConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
        logger.debug(
            "Configuration loaded (defaults=%s, overrides=%s)",
            self._defaults_path,
            self._user_path if overrides else None,
        )
        return self._config

    def to_json(self) -> str:
        return self.config.model_dump_json(indent=2)

    @staticmethod
    def _load_yaml(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {path}: {e}") from e
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Recursively merge override into base, returning a new dict."""
        result = dict(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ConfigManager._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
