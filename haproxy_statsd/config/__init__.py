"""
Configuration management for haproxy_statsd.

This module provides the configuration models and the loader that builds
them from a configuration file and environment variables.
"""

from .loader import ConfigLoader, load_config
from .models import (
    CollectorConfig,
    LoggingConfig,
    LogLevel,
    StatsdSinkConfig,
    StatsSourceConfig,
    split_address,
)

__all__ = [
    "ConfigLoader",
    "load_config",
    "CollectorConfig",
    "LoggingConfig",
    "LogLevel",
    "StatsSourceConfig",
    "StatsdSinkConfig",
    "split_address",
]
