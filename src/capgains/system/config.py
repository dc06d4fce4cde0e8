"""
System configuration for capgains.

One YAML file configures the whole tool. Values are merged over built-in
defaults, so a config file only needs the keys it changes:

    logging:
      level: DEBUG
      enable_file: true
      file_path: ${CAPGAINS_LOG_DIR:-logs}/capgains.log

    output:
      breakdown: true

Lookup order for the config file:
1. Explicit path passed to SystemConfig.load()
2. CAPGAINS_CONFIG environment variable
3. config/system.yaml in the working directory
4. Built-in defaults

The tax rate and exemption threshold are fixed and not configurable.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from capgains.system.log_system import LoggingConfig as LoggerConfig

CONFIG_ENV_VAR = "CAPGAINS_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/system.yaml")

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


@dataclass
class LoggingConfig:
    """Logging section of the system config.

    Plain-data mirror of log_system.LoggingConfig; see to_logger_config().
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["console", "json"] = "console"
    timestamp_format: Literal["iso", "compact", "time"] = "compact"
    enable_file: bool = False
    file_path: str = "logs/capgains.log"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> LoggerConfig:
        """Convert to the pydantic config consumed by LoggerFactory."""
        return LoggerConfig(
            level=self.level,
            format=self.format,
            timestamp_format=self.timestamp_format,
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class OutputConfig:
    """Output section of the system config.

    Attributes:
        breakdown: Render a per-transaction table on stderr for every run
    """

    breakdown: bool = False


@dataclass
class SystemConfig:
    """Complete system configuration."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from YAML, merged over built-in defaults.

        Args:
            path: Config file path. If None, uses CAPGAINS_CONFIG or
                config/system.yaml. Missing files fall back to defaults.

        Returns:
            SystemConfig instance

        Raises:
            ValueError: If the file is not a YAML mapping
        """
        if path is None:
            env_path = os.environ.get(CONFIG_ENV_VAR)
            path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
        path = Path(path)

        if not path.exists():
            return cls()

        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            raise ValueError(f"Config file must contain a mapping, got {type(raw).__name__}: {path}")

        return cls._from_dict(_substitute_env_vars(raw))

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary."""
        defaults = cls()
        merged = _deep_merge(
            {
                "logging": vars(defaults.logging),
                "output": vars(defaults.output),
            },
            data,
        )
        return cls(
            logging=LoggingConfig(**merged["logging"]),
            output=OutputConfig(**merged["output"]),
        )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} and ${VAR:-default} in all string values."""
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config() -> SystemConfig:
    """Get the system config singleton, loading it on first use."""
    global _system_config
    if _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force reload of the system config singleton."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
