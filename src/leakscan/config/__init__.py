"""Configuration loading, schema, and defaults."""

from leakscan.config.loader import ConfigError, load_config
from leakscan.config.schema import LeakScanConfig

__all__ = [
    "ConfigError",
    "LeakScanConfig",
    "load_config",
]
