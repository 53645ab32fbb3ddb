"""
Polling loop tying fetcher, parser and dispatcher together.

Each cycle fetches one report, parses it and dispatches every record. A
failing cycle is logged and recorded on its CycleResult; the loop then
sleeps and tries again, unless fail_fast is set.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from .config.models import CollectorConfig
from .dispatcher import MetricDispatcher
from .exceptions import HAProxyStatsdError
from .fetcher import StatsFetcher
from .models import CycleResult
from .parser import ReportParser
from .sinks import MetricsSink, StatsdSink

logger = logging.getLogger(__name__)

SinkFactory = Callable[[CollectorConfig], MetricsSink]


def statsd_sink_factory(config: CollectorConfig) -> MetricsSink:
    """Open a StatsD sink for one cycle."""
    return StatsdSink(
        host=config.statsd.host,
        port=config.statsd.port,
        prefix=config.statsd.prefix,
        max_udp_size=config.statsd.max_udp_size,
        ipv6=config.statsd.ipv6,
    )


class StatsCollector:
    """Runs fetch, parse and dispatch cycles on a fixed interval."""

    def __init__(
        self,
        config: CollectorConfig,
        sink_factory: Optional[SinkFactory] = None,
    ):
        """
        Initialize the collector.

        Args:
            config: Validated collector configuration
            sink_factory: Builds the sink opened at the start of each cycle
                (StatsD by default)
        """
        self.config = config
        self.sink_factory = sink_factory or statsd_sink_factory
        self.cycles = 0

    async def run_cycle(self) -> CycleResult:
        """
        Run one cycle inside its own failure boundary.

        Returns:
            CycleResult with counters and the error, if the cycle failed

        Raises:
            Exception: The cycle error, only when fail_fast is configured
        """
        self.cycles += 1
        result = CycleResult(cycle=self.cycles)
        start_time = time.monotonic()

        try:
            await self._run_pipeline(result)
        except HAProxyStatsdError as e:
            result.error = e
            logger.error(f"Cycle {result.cycle} failed: {type(e).__name__}: {e}")
            if self.config.fail_fast:
                raise
        except Exception as e:
            result.error = e
            logger.exception(f"Cycle {result.cycle} failed unexpectedly: {type(e).__name__}: {e}")
            if self.config.fail_fast:
                raise
        finally:
            result.duration = time.monotonic() - start_time

        if result.is_success:
            logger.info(result.summary())
        return result

    async def _run_pipeline(self, result: CycleResult) -> None:
        parser = ReportParser()

        async with StatsFetcher(self.config.source) as fetcher:
            async with fetcher.open_report() as stream:
                with self.sink_factory(self.config) as sink:
                    dispatcher = MetricDispatcher(sink)
                    async for record in parser.records(stream):
                        result.metrics_sent += dispatcher.dispatch(record)
                        result.records += 1

    async def run_forever(self, max_cycles: Optional[int] = None) -> Optional[CycleResult]:
        """
        Repeat cycles, sleeping poll_interval between them.

        Args:
            max_cycles: Stop after this many cycles (None runs until cancelled)

        Returns:
            Result of the last cycle run
        """
        logger.info(
            f"Polling {self.config.source.url} every {self.config.poll_interval}s, "
            f"sending to {self.config.statsd.address}"
        )
        last_result: Optional[CycleResult] = None
        ran = 0

        while max_cycles is None or ran < max_cycles:
            last_result = await self.run_cycle()
            ran += 1
            if max_cycles is not None and ran >= max_cycles:
                break
            await asyncio.sleep(self.config.poll_interval)

        return last_result
