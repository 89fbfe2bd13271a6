"""Configuration loading for Academia.

Settings are resolved in three layers: built-in defaults, an optional YAML
file, then ``ACADEMIA_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from academia.exceptions import ConfigError

ENV_PREFIX = "ACADEMIA_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Runtime settings for the service."""

    db_path: str = "academia.db"
    api_prefix: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8000
    log_dir: str = "logs"
    log_level: str = "INFO"
    log_file: str = "academia.log"
    log_max_bytes: int = 10 * 1024 * 1024
    log_backup_count: int = 5
    busy_timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a dictionary, coercing values to field types.

        Args:
            data: Mapping of setting name to value. Unknown keys are rejected.

        Returns:
            Parsed settings object.

        Raises:
            ConfigError: If a key is unknown or a value has the wrong type.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for name, value in data.items():
            default = getattr(cls, name)
            try:
                values[name] = type(default)(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid value for '{name}': {value!r}") from e

        settings = cls(**values)
        settings.validate()
        return settings

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigError: If a value is out of range.
        """
        if not 0 < self.port < 65536:
            raise ConfigError(f"Port out of range: {self.port}")
        if self.busy_timeout < 0:
            raise ConfigError(f"busy_timeout cannot be negative: {self.busy_timeout}")
        if not self.api_prefix.startswith("/"):
            raise ConfigError(f"api_prefix must start with '/': {self.api_prefix!r}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level: {self.log_level!r}")
        if self.log_max_bytes <= 0 or self.log_backup_count < 0:
            raise ConfigError("log_max_bytes must be positive and log_backup_count not negative")


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")
    return data


def _read_env(environ: Mapping[str, str]) -> dict[str, str]:
    names = {f.name for f in fields(Settings)}
    values = {}
    for key, value in environ.items():
        if key.startswith(ENV_PREFIX):
            name = key[len(ENV_PREFIX) :].lower()
            if name in names:
                values[name] = value
    return values


def load_settings(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from defaults, an optional YAML file and the environment.

    Args:
        config_path: Path to a YAML settings file (optional). Falls back to
            the ACADEMIA_CONFIG environment variable.
        environ: Environment mapping to read overrides from. Defaults to os.environ.

    Returns:
        Resolved settings.

    Raises:
        ConfigError: If the file is missing or invalid, or a value is invalid.
    """
    env = os.environ if environ is None else environ

    if config_path is None:
        config_path = env.get(f"{ENV_PREFIX}CONFIG")

    data: dict[str, Any] = {}
    if config_path is not None:
        data.update(_read_yaml(Path(config_path)))
    data.update(_read_env(env))

    return Settings.from_dict(data)
