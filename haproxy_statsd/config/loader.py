"""
Configuration loader for haproxy_statsd.

This module loads configuration from a JSON or YAML file and from
environment variables, and translates the flat documents written for the
haproxy-statsd 0.1 (Go) tool.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .models import CollectorConfig

logger = logging.getLogger(__name__)

# Keys of the 0.1 flat config.json and where they live now.
LEGACY_KEYS: Dict[str, Tuple[str, ...]] = {
    "HAproxyUrl": ("source", "url"),
    "HAproxyUsername": ("source", "username"),
    "HAproxyPassword": ("source", "password"),
    "StatsdAddr": ("statsd", "address"),
    "StatsdPrefix": ("statsd", "prefix"),
    "SleepPeriod": ("poll_interval",),
}


def _to_bool(value: str) -> bool:
    lower = value.strip().lower()
    if lower in ("true", "yes", "1", "on"):
        return True
    if lower in ("false", "no", "0", "off"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


class ConfigLoader:
    """Configuration loader with support for files and environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            environ: Environment mapping (defaults to os.environ)
        """
        self.environ = os.environ if environ is None else environ
        self.config_paths: List[Path] = [
            Path("haproxy-statsd.yaml"),
            Path("haproxy-statsd.yml"),
            Path("haproxy-statsd.json"),
            Path("config.json"),
        ]

        # Environment variable prefix
        self.env_prefix = "HAPROXY_STATSD_"

        # Values are converted explicitly so a password of "1" stays a string
        self.env_mappings: Dict[str, Tuple[Tuple[str, ...], Callable[[str], Any]]] = {
            "SOURCE_URL": (("source", "url"), str),
            "SOURCE_USERNAME": (("source", "username"), str),
            "SOURCE_PASSWORD": (("source", "password"), str),
            "SOURCE_TIMEOUT": (("source", "timeout"), float),
            "STATSD_ADDRESS": (("statsd", "address"), str),
            "STATSD_PREFIX": (("statsd", "prefix"), str),
            "POLL_INTERVAL": (("poll_interval",), float),
            "FAIL_FAST": (("fail_fast",), _to_bool),
            "LOG_LEVEL": (("logging", "level"), str),
            "LOG_FILE": (("logging", "file_path"), str),
            "LOG_STRUCTURED": (("logging", "enable_structured"), _to_bool),
        }

    def load_config(
        self,
        config_file: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> CollectorConfig:
        """
        Load configuration from all available sources.

        Later sources win: file, then environment, then overrides.

        Args:
            config_file: Specific config file to load; it must exist
            overrides: Nested values applied last (e.g. from the CLI)

        Returns:
            Validated CollectorConfig

        Raises:
            ConfigurationError: If a source cannot be read or the result is invalid
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_from_file(config_file)
        if file_config:
            config_data = self._deep_merge(config_data, file_config)

        env_config = self._load_from_environment()
        if env_config:
            config_data = self._deep_merge(config_data, env_config)

        if overrides:
            config_data = self._deep_merge(config_data, overrides)

        return self.build_config(config_data)

    def build_config(self, config_data: Dict[str, Any]) -> CollectorConfig:
        """Validate a configuration dictionary."""
        try:
            return CollectorConfig(**self.translate_legacy(config_data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _load_from_file(
        self, config_file: Optional[Union[str, Path]] = None
    ) -> Optional[Dict[str, Any]]:
        """Load configuration from file."""
        if config_file:
            config_path = Path(config_file)
            if not config_path.is_file():
                raise ConfigurationError(
                    f"Configuration file is not found or readable: {config_path}"
                )
            return self._parse_config_file(config_path)

        for config_path in self.config_paths:
            if config_path.is_file():
                return self._parse_config_file(config_path)

        logger.debug("No configuration file found, using environment only")
        return None

    def _parse_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Parse configuration file based on extension."""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                suffix = config_path.suffix.lower()
                if suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                elif suffix == ".json":
                    data = json.load(f)
                else:
                    raise ConfigurationError(
                        f"Unsupported config file format: {config_path.suffix}"
                    )
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to parse config file {config_path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a mapping, got {type(data).__name__}"
            )

        logger.debug(f"Loaded configuration from {config_path}")
        return data

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        for suffix, (config_path, convert) in self.env_mappings.items():
            env_var = f"{self.env_prefix}{suffix}"
            value = self.environ.get(env_var)
            if value is None:
                continue

            try:
                converted_value = convert(value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {env_var}: {e}")

            # Set nested configuration value
            current = config
            for key in config_path[:-1]:
                current = current.setdefault(key, {})
            current[config_path[-1]] = converted_value

        return config

    def translate_legacy(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Move keys of a 0.1 flat document into the nested layout."""
        legacy = {key: config_data[key] for key in LEGACY_KEYS if key in config_data}
        if not legacy:
            return config_data

        logger.info("Translating legacy configuration keys: " + ", ".join(sorted(legacy)))
        translated: Dict[str, Any] = {
            key: value for key, value in config_data.items() if key not in LEGACY_KEYS
        }
        nested: Dict[str, Any] = {}
        for key, value in legacy.items():
            current = nested
            path = LEGACY_KEYS[key]
            for part in path[:-1]:
                current = current.setdefault(part, {})
            current[path[-1]] = value

        # Values already in the nested layout take precedence
        return self._deep_merge(nested, translated)

    def _deep_merge(
        self, base: Dict[str, Any], override: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> CollectorConfig:
    """Load configuration with a default ConfigLoader."""
    return ConfigLoader().load_config(config_file, overrides)
