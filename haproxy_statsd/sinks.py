"""
Metrics sinks for gauge observations.

The StatsD sink is the production path: one UDP datagram per gauge, no
acknowledgement. The console and memory sinks share the same interface and
are used for dry runs and tests.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

import statsd

from .exceptions import SinkError
from .models import MetricPoint

logger = logging.getLogger(__name__)


class MetricsSink(ABC):
    """Abstract interface for metrics sinks."""

    prefix: str = ""

    @abstractmethod
    def record_gauge(self, name: str, value: int) -> None:
        """Record gauge metric."""
        pass

    def close(self) -> None:
        """Release the underlying transport."""
        pass

    def __enter__(self) -> MetricsSink:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class StatsdSink(MetricsSink):
    """
    StatsD sink over UDP.

    The prefix is applied by the StatsD client, so ``record_gauge("web.srv1.scur", 3)``
    with prefix ``lb`` produces the datagram ``lb.web.srv1.scur:3|g``.
    """

    def __init__(
        self,
        host: str,
        port: int,
        prefix: str = "",
        max_udp_size: int = 512,
        ipv6: bool = False,
    ):
        """
        Initialize StatsD sink.

        Args:
            host: StatsD host name or address
            port: StatsD UDP port
            prefix: Prefix prepended to every metric name
            max_udp_size: Largest datagram the client will build
            ipv6: Resolve the host as IPv6

        Raises:
            SinkError: If the StatsD address cannot be resolved
        """
        self.host = host
        self.port = port
        self.prefix = prefix
        try:
            self._client: Optional[statsd.StatsClient] = statsd.StatsClient(
                host=host,
                port=port,
                prefix=prefix or None,
                maxudpsize=max_udp_size,
                ipv6=ipv6,
            )
        except OSError as e:
            raise SinkError(f"Cannot resolve StatsD address {host}:{port}: {e}")

    def record_gauge(self, name: str, value: int) -> None:
        """Send one gauge datagram."""
        if self._client is None:
            raise SinkError("StatsD sink is closed")
        self._client.gauge(name, value)

    def close(self) -> None:
        """Close the UDP socket."""
        if self._client is not None:
            self._client.close()
            self._client = None


class ConsoleSink(MetricsSink):
    """Console sink printing StatsD lines instead of sending them."""

    def __init__(self, prefix: str = "", print_func: Callable[[str], Any] = print):
        """
        Initialize console sink.

        Args:
            prefix: Prefix prepended to every metric name
            print_func: Function to use for printing metric lines
        """
        self.prefix = prefix
        self.print_func = print_func

    def record_gauge(self, name: str, value: int) -> None:
        """Print gauge metric."""
        self.print_func(MetricPoint(name, value).wire_format(self.prefix))


class MemorySink(MetricsSink):
    """In-memory sink for testing and embedding."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self.points: List[MetricPoint] = []
        self.closed = False

    def record_gauge(self, name: str, value: int) -> None:
        """Store gauge metric."""
        self.points.append(MetricPoint(name, value))

    def close(self) -> None:
        self.closed = True

    def lines(self) -> List[str]:
        """Return recorded points as StatsD lines."""
        return [point.wire_format(self.prefix) for point in self.points]
