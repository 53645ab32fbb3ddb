"""
Logging manager for haproxy_statsd.

This module provides centralized logging configuration and management.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict

from ..config.models import LoggingConfig
from .filters import SensitiveDataFilter
from .formatters import ColoredFormatter, StructuredFormatter


class LoggingManager:
    """Centralized logging manager."""

    def __init__(self) -> None:
        """Initialize logging manager."""
        self._configured = False
        self._handlers: Dict[str, logging.Handler] = {}

    def setup_logging(self, config: LoggingConfig) -> None:
        """
        Setup logging based on configuration.

        Args:
            config: Logging configuration
        """
        if self._configured:
            self.cleanup()

        level = getattr(logging, config.level.value)
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        if config.enable_console:
            self._setup_console_handler(config, level)

        if config.file_path:
            self._setup_file_handler(config, level)

        # aiohttp's access-level chatter is rarely useful for a poller
        logging.getLogger("aiohttp").setLevel(max(level, logging.WARNING))

        self._configured = True
        logging.getLogger(__name__).debug("Logging system configured")

    def _setup_console_handler(self, config: LoggingConfig, level: int) -> None:
        """Setup console logging handler."""
        handler = logging.StreamHandler(sys.stderr)

        formatter: logging.Formatter
        if config.enable_structured:
            formatter = StructuredFormatter()
        else:
            formatter = ColoredFormatter(config.format)

        self._add_handler("console", handler, formatter, level)

    def _setup_file_handler(self, config: LoggingConfig, level: int) -> None:
        """Setup rotating file logging handler."""
        log_path = Path(str(config.file_path))
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        )

        formatter: logging.Formatter
        if config.enable_structured:
            formatter = StructuredFormatter()
        else:
            formatter = logging.Formatter(config.format)

        self._add_handler("file", handler, formatter, level)

    def _add_handler(
        self,
        name: str,
        handler: logging.Handler,
        formatter: logging.Formatter,
        level: int,
    ) -> None:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        handler.addFilter(SensitiveDataFilter())
        logging.getLogger().addHandler(handler)
        self._handlers[name] = handler

    def cleanup(self) -> None:
        """Remove and close the handlers installed by this manager."""
        root_logger = logging.getLogger()
        for handler in self._handlers.values():
            root_logger.removeHandler(handler)
            handler.close()

        self._handlers.clear()
        self._configured = False

    @property
    def handlers(self) -> Dict[str, logging.Handler]:
        """Handlers installed by this manager, by name."""
        return dict(self._handlers)

    def is_configured(self) -> bool:
        """Check if logging is configured."""
        return self._configured


# Global logging manager instance
_logging_manager = LoggingManager()


def setup_logging(config: LoggingConfig) -> None:
    """
    Setup logging with configuration.

    Args:
        config: Logging configuration
    """
    _logging_manager.setup_logging(config)


def cleanup_logging() -> None:
    """Cleanup logging system."""
    _logging_manager.cleanup()
