"""
Configuration models for haproxy_statsd.

This module defines all configuration data models with validation and defaults.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

DEFAULT_STATSD_PORT = 8125


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Default logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    file_path: Optional[Path] = Field(default=None, description="Log file path")
    max_file_size: int = Field(
        default=10 * 1024 * 1024, gt=0, description="Max log file size in bytes"
    )
    backup_count: int = Field(default=5, ge=0, description="Number of backup log files")
    enable_console: bool = Field(default=True, description="Enable console logging")
    enable_structured: bool = Field(
        default=False, description="Enable structured JSON logging"
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v


class StatsSourceConfig(BaseModel):
    """HAProxy statistics endpoint."""

    url: HttpUrl = Field(description="URL of the CSV statistics page, e.g. http://lb:8404/stats;csv")
    username: str = Field(default="", description="Basic authentication user")
    password: str = Field(default="", repr=False, description="Basic authentication password")
    timeout: float = Field(
        default=10.0, gt=0, description="Total timeout for fetching one report, in seconds"
    )
    connect_timeout: float = Field(
        default=5.0, gt=0, description="Connection timeout in seconds"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("username", "password", mode="before")
    @classmethod
    def coerce_credentials(cls, v: Any) -> Any:
        """Accept numeric credentials written unquoted in YAML."""
        return str(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else v

    @property
    def has_credentials(self) -> bool:
        """Check if basic authentication should be sent."""
        return bool(self.username or self.password)


class StatsdSinkConfig(BaseModel):
    """StatsD daemon receiving the gauges."""

    address: str = Field(description="StatsD address as host:port")
    prefix: str = Field(default="", description="Prefix prepended to every metric name")
    max_udp_size: int = Field(
        default=512, gt=0, description="Largest UDP datagram built by the client"
    )
    ipv6: bool = Field(default=False, description="Resolve the StatsD host as IPv6")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        """Ensure the address splits into a host and a valid port."""
        split_address(v)
        return v

    @field_validator("prefix", mode="before")
    @classmethod
    def coerce_prefix(cls, v: Any) -> Any:
        """Accept a numeric prefix written unquoted in YAML."""
        return str(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else v

    @field_validator("prefix")
    @classmethod
    def strip_prefix(cls, v: str) -> str:
        """Drop surrounding dots so names never contain empty path nodes."""
        return v.strip().strip(".")

    @property
    def host(self) -> str:
        return split_address(self.address)[0]

    @property
    def port(self) -> int:
        return split_address(self.address)[1]


def split_address(address: str) -> Tuple[str, int]:
    """
    Split ``host:port`` (or ``[v6]:port``) into its parts.

    The port defaults to 8125 when omitted.

    Raises:
        ValueError: If the address is empty or the port is invalid
    """
    address = address.strip()
    if not address:
        raise ValueError("StatsD address must not be empty")

    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep:
            raise ValueError(f"Unterminated IPv6 address: {address}")
        port_str = rest[1:] if rest.startswith(":") else rest
    elif address.count(":") == 1:
        host, port_str = address.split(":")
    else:
        host, port_str = address, ""

    if not host:
        raise ValueError(f"Missing host in StatsD address: {address}")

    if not port_str:
        return host, DEFAULT_STATSD_PORT

    if not port_str.isdigit() or not 0 < int(port_str) < 65536:
        raise ValueError(f"Invalid port in StatsD address: {address}")

    return host, int(port_str)


class CollectorConfig(BaseModel):
    """Global configuration container."""

    source: StatsSourceConfig
    statsd: StatsdSinkConfig
    poll_interval: float = Field(
        ge=0, description="Seconds to sleep between cycles; 0 polls back to back"
    )
    fail_fast: bool = Field(
        default=False, description="Stop the process on the first failed cycle"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=False)
