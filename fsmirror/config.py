"""Configuration management and validation for fsmirror.

Configuration is a tree of validated dataclasses loaded from YAML, with
environment variable overrides applied on top.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Type

import yaml

from .exceptions import ConfigurationError, ValidationError

log = logging.getLogger(__name__)

VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class ApiConfig:
    """Remote file store API settings."""
    base_url: str = "https://app.harness.io/gateway"
    api_key: str = ""
    timeout: float = 30
    verify_ssl: bool = True

    def __post_init__(self):
        if not self.base_url.startswith(("http://", "https://")):
            raise ValidationError(f"Invalid base_url: {self.base_url!r}", field_name="api.base_url")
        if self.timeout < 1:
            raise ValidationError("timeout must be at least 1 second", field_name="api.timeout")


@dataclass
class PathsConfig:
    """Local storage layout."""
    root_dir: str = "filestore"
    logs: str = "logs"

    def __post_init__(self):
        if not str(self.root_dir).strip():
            raise ValidationError("root_dir cannot be empty", field_name="paths.root_dir")


@dataclass
class ProcessingConfig:
    """Batch driver behaviour."""
    workers: int = 4
    abort_on_filesystem_error: bool = True
    failed_report: Optional[str] = None

    def __post_init__(self):
        if self.workers < 1:
            raise ValidationError("workers must be at least 1", field_name="processing.workers")


@dataclass
class LoggingConfig:
    """Console logging settings."""
    console_level: str = "INFO"

    def __post_init__(self):
        if self.console_level.upper() not in VALID_LEVELS:
            raise ValidationError(
                f"Invalid console log level: {self.console_level}. Must be one of {VALID_LEVELS}",
                field_name="logging.console_level",
            )


@dataclass
class GlobalConfig:
    """Main configuration container."""
    api: ApiConfig = field(default_factory=ApiConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def require_api_key(self) -> str:
        if not self.api.api_key:
            raise ConfigurationError(
                "No API key configured (set api.api_key or FSMIRROR_API_KEY)",
                config_key="api.api_key",
            )
        return self.api.api_key


class ConfigManager:
    """Loads YAML configuration and applies environment overrides."""

    ENV_MAPPINGS = {
        "FSMIRROR_API_KEY": ("api", "api_key"),
        "FSMIRROR_BASE_URL": ("api", "base_url"),
        "FSMIRROR_ROOT_DIR": ("paths", "root_dir"),
        "FSMIRROR_WORKERS": ("processing", "workers"),
        "FSMIRROR_LOG_LEVEL": ("logging", "console_level"),
    }
    INT_KEYS = {"workers"}

    SECTIONS: Dict[str, Type] = {
        "api": ApiConfig,
        "paths": PathsConfig,
        "processing": ProcessingConfig,
        "logging": LoggingConfig,
    }

    def load_global_config(self, config_path: Optional[Path] = None) -> GlobalConfig:
        """Load and validate global configuration; no file means defaults."""
        config_dict: Dict[str, Any] = {}
        if config_path is not None:
            config_dict = self._load_yaml_file(Path(config_path))
            log.info("🛠  Using global config %s", config_path)

        config_dict = self._apply_environment_variables(config_dict)

        try:
            return self._create_global_config(config_dict)
        except (ConfigurationError, ValidationError):
            raise
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {config_path}: {e}",
                config_file=str(config_path) if config_path else None,
            ) from e

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        """Load YAML file with error handling."""
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}", config_file=str(path))

        try:
            with path.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", config_file=str(path)) from e

        if content is None:
            return {}

        if not isinstance(content, dict):
            raise ConfigurationError(
                f"Configuration file must contain a YAML dictionary: {path}", config_file=str(path)
            )

        return content

    def _apply_environment_variables(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides."""
        for env_var, (section, key) in self.ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue
            current = config_dict.get(section) or {}
            config_dict[section] = current
            if key in self.INT_KEYS:
                try:
                    current[key] = int(env_value)
                except ValueError as e:
                    raise ValidationError(
                        f"{env_var} must be an integer, got {env_value!r}", field_name=f"{section}.{key}"
                    ) from e
            else:
                current[key] = env_value

        return config_dict

    def _create_global_config(self, config_dict: Dict[str, Any]) -> GlobalConfig:
        """Create GlobalConfig from dictionary with validation."""
        sections = {}
        for name, cls in self.SECTIONS.items():
            if name in config_dict:
                data = config_dict[name] or {}
                if not isinstance(data, dict):
                    raise ValidationError(f"Section '{name}' must be a mapping", field_name=name)
                sections[name] = self._create_dataclass_from_dict(cls, data)
        return GlobalConfig(**sections)

    def _create_dataclass_from_dict(self, cls: Type, data: Dict[str, Any]):
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            log.warning("⚠️  Ignoring unknown %s settings: %s", cls.__name__, ", ".join(sorted(unknown)))
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(config_path: Optional[Path] = None) -> GlobalConfig:
    return ConfigManager().load_global_config(config_path)
