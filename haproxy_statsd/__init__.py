"""
HAProxy statistics emitter for StatsD.

This package polls the HAProxy CSV statistics page over HTTP and forwards a
fixed set of per-proxy, per-server gauges to a StatsD daemon over UDP.

Workflow:
- GET the HAProxy CSV statistics page (HTTP Basic authentication)
- parse each proxy/server line into a MetricRecord
- send one ``<prefix>.<proxy>.<server>.<field>:<value>|g`` datagram per field
"""

__version__ = "0.2.0"

from .collector import StatsCollector, statsd_sink_factory
from .config import (
    CollectorConfig,
    ConfigLoader,
    LoggingConfig,
    StatsdSinkConfig,
    StatsSourceConfig,
    load_config,
)
from .dispatcher import MetricDispatcher
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    ContentError,
    ErrorHandler,
    FieldCountError,
    HAProxyStatsdError,
    HTTPError,
    NetworkError,
    NotFoundError,
    ParseError,
    RowWidthError,
    ServerError,
    SinkError,
    TimeoutError,
    ValueParseError,
)
from .fetcher import StatsFetcher
from .models import (
    MIN_ROW_WIDTH,
    STAT_FIELDS,
    CycleResult,
    FieldSpec,
    MetricPoint,
    MetricRecord,
)
from .parser import ReportParser
from .sinks import ConsoleSink, MemorySink, MetricsSink, StatsdSink

__all__ = [
    "__version__",
    # Pipeline
    "StatsCollector",
    "StatsFetcher",
    "ReportParser",
    "MetricDispatcher",
    "statsd_sink_factory",
    # Sinks
    "MetricsSink",
    "StatsdSink",
    "ConsoleSink",
    "MemorySink",
    # Models
    "FieldSpec",
    "STAT_FIELDS",
    "MIN_ROW_WIDTH",
    "MetricRecord",
    "MetricPoint",
    "CycleResult",
    # Configuration
    "CollectorConfig",
    "StatsSourceConfig",
    "StatsdSinkConfig",
    "LoggingConfig",
    "ConfigLoader",
    "load_config",
    # Exceptions
    "HAProxyStatsdError",
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    "HTTPError",
    "AuthenticationError",
    "NotFoundError",
    "ServerError",
    "ContentError",
    "ParseError",
    "RowWidthError",
    "FieldCountError",
    "ValueParseError",
    "SinkError",
    "ConfigurationError",
    "ErrorHandler",
]
