"""Path management for clocktick.

The base directory defaults to ~/.clocktick and can be overridden with the
CLOCKTICK_HOME environment variable.
"""

import os
from pathlib import Path

ENV_VAR = "CLOCKTICK_HOME"


def get_clocktick_home() -> Path:
    """Get the base directory for clocktick configuration."""
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".clocktick"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_clocktick_home() / "config.toml"
