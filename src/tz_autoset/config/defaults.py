"""Default configuration values as Python constants.

These are also defined in config.defaults.yaml. This module provides
programmatic access to defaults for testing and documentation.
"""

from tz_autoset.config.schema import AppConfig

DEFAULT_CONFIG = AppConfig()
