"""
Custom logging filters for haproxy_statsd.

This module provides the filter that keeps HAProxy credentials out of log
output.
"""

import logging
import re
from typing import List, Pattern, Tuple


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials in log messages."""

    def __init__(self) -> None:
        """Initialize sensitive data filter."""
        super().__init__()

        # (pattern, replacement) pairs
        self.rules: List[Tuple[Pattern[str], str]] = [
            # Authorization headers
            (
                re.compile(r"(authorization[\"'\s]*[:=][\"'\s]*(?:basic|bearer)\s+)([a-zA-Z0-9+/=._-]+)", re.IGNORECASE),
                r"\1***MASKED***",
            ),
            # Passwords
            (
                re.compile(r"(password|passwd|pwd)([\"'\s]*[:=][\"'\s]*)([^\s\"',)]+)", re.IGNORECASE),
                r"\1\2***MASKED***",
            ),
            # URLs with credentials
            (re.compile(r"(https?://[^:/@\s]+):([^@\s]+)@", re.IGNORECASE), r"\1:***MASKED***@"),
        ]

    def mask(self, message: str) -> str:
        """Apply all masking rules to a message."""
        for pattern, replacement in self.rules:
            message = pattern.sub(replacement, message)
        return message

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter log record to mask sensitive data."""
        message = record.getMessage()
        masked = self.mask(message)
        if masked != message:
            record.msg = masked
            record.args = ()
        return True
