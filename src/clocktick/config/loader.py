"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError

from clocktick.config.models import ClocktickConfig, ConfigError
from clocktick.config.paths import get_config_path

# (config key, environment variable, secret)
ENV_MAPPINGS: list[tuple[str, str, bool]] = [
    ("api_key", "CLOCKTICK_API_KEY", True),
    ("encryption_key", "CLOCKTICK_ENCRYPTION_KEY", True),
    ("public_key", "CLOCKTICK_PUBLIC_KEY", False),
    ("default_endpoint_id", "CLOCKTICK_DEFAULT_ENDPOINT_ID", False),
    ("base_url", "CLOCKTICK_BASE_URL", False),
]


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("clocktick.toml"),  # Current directory
        get_config_path(),  # ~/.clocktick/config.toml (or CLOCKTICK_HOME)
    ]


def _resolve_env(config: dict[str, Any]) -> dict[str, Any]:
    """Fill values missing from the file from environment variables."""
    for key, env_var, secret in ENV_MAPPINGS:
        if config.get(key) is not None:
            continue
        value = os.environ.get(env_var)
        if value:
            config[key] = SecretStr(value) if secret else value
    return config


def find_config_path(path: Path | None = None) -> Path | None:
    """Resolve the config file to read.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
    """
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return config_path

    for default_path in _get_default_config_paths():
        expanded = default_path.expanduser()
        if expanded.exists():
            return expanded
    return None


def load_config(path: Path | None = None) -> ClocktickConfig:
    """Load configuration from a TOML file and the environment.

    Args:
        path: Explicit path to config file. If None, searches default
            locations and falls back to environment variables only.

    Returns:
        Validated ClocktickConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ConfigError: If the file is not valid TOML or fails validation.
    """
    raw_config: dict[str, Any] = {}
    config_path = find_config_path(path)
    if config_path is not None:
        try:
            with config_path.open("rb") as f:
                raw_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    raw_config = _resolve_env(raw_config)

    try:
        return ClocktickConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
