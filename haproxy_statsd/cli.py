"""
Command-line interface for haproxy_statsd.

Loads the configuration, sets up logging and runs the polling loop until
interrupted.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from . import __version__
from .collector import SinkFactory, StatsCollector
from .config import CollectorConfig, LogLevel, load_config
from .exceptions import ConfigurationError, HAProxyStatsdError
from .logging import cleanup_logging, setup_logging
from .sinks import ConsoleSink, MetricsSink

logger = logging.getLogger(__name__)


def console_sink_factory(config: CollectorConfig) -> MetricsSink:
    """Sink factory for --dry-run: print StatsD lines to stdout."""
    return ConsoleSink(prefix=config.statsd.prefix, print_func=click.echo)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (JSON or YAML). Searched in the working directory if omitted.",
)
@click.option("--once", is_flag=True, help="Run a single cycle and exit.")
@click.option("--dry-run", is_flag=True, help="Print metrics instead of sending them to StatsD.")
@click.option("--fail-fast", is_flag=True, help="Exit on the first failed cycle.")
@click.option(
    "--log-level",
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
@click.version_option(__version__, prog_name="haproxy-statsd")
def main(
    config_file: Optional[Path],
    once: bool,
    dry_run: bool,
    fail_fast: bool,
    log_level: Optional[str],
) -> None:
    """Poll HAProxy CSV statistics and forward them to StatsD as gauges."""
    overrides: Dict[str, Any] = {}
    if fail_fast:
        overrides["fail_fast"] = True
    if log_level:
        overrides["logging"] = {"level": log_level.upper()}

    try:
        config = load_config(config_file, overrides)
    except ConfigurationError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    setup_logging(config.logging)
    logger.info(f"Starting haproxy-statsd {__version__}")

    sink_factory: Optional[SinkFactory] = console_sink_factory if dry_run else None
    collector = StatsCollector(config, sink_factory=sink_factory)

    try:
        result = asyncio.run(collector.run_forever(max_cycles=1 if once else None))
    except HAProxyStatsdError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
        return
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        click.echo(f"✗ Unexpected error: {type(e).__name__}: {e}", err=True)
        sys.exit(1)
    finally:
        cleanup_logging()

    if result is not None and not result.is_success:
        sys.exit(1)


if __name__ == "__main__":
    main()
