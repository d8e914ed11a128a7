"""Configuration module."""

from clocktick.config.loader import load_config
from clocktick.config.models import ClocktickConfig, ConfigError, ServerConfig
from clocktick.config.paths import get_clocktick_home, get_config_path

__all__ = [
    "ClocktickConfig",
    "ConfigError",
    "ServerConfig",
    "get_clocktick_home",
    "get_config_path",
    "load_config",
]
