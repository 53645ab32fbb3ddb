"""
Metric derivation and dispatch.

Turns a MetricRecord into gauge points named ``<entity>.<sub-entity>.<field>``
and hands them to a sink one by one.
"""

from __future__ import annotations

import logging
import re
from typing import List

from .exceptions import ValueParseError
from .models import MetricPoint, MetricRecord
from .sinks import MetricsSink

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")


def metric_name(record: MetricRecord, key: str) -> str:
    """Build the hierarchical metric name for one field of a record."""
    return f"{record.entity}.{record.sub_entity}.{key}"


def parse_value(raw: str) -> int:
    """Convert a raw field to an integer; empty fields count as zero."""
    if raw == "":
        return 0
    if not _INTEGER.fullmatch(raw):
        raise ValueError(f"invalid integer: {raw!r}")
    return int(raw, 10)


class MetricDispatcher:
    """Dispatcher sending one gauge per numeric field of each record."""

    def __init__(self, sink: MetricsSink):
        """
        Initialize metric dispatcher.

        Args:
            sink: Open sink receiving the gauges
        """
        self.sink = sink

    @staticmethod
    def build_points(record: MetricRecord) -> List[MetricPoint]:
        """
        Derive the gauge points of a record without sending anything.

        Args:
            record: Parsed report row

        Returns:
            Points in field table order

        Raises:
            ValueParseError: If a numeric field is not a base-10 integer
        """
        points = []
        for key, raw in record.values:
            try:
                value = parse_value(raw)
            except ValueError:
                raise ValueParseError(
                    f"Field {key!r} of {record.entity}/{record.sub_entity} "
                    f"is not an integer: {raw!r}",
                    field=key,
                    value=raw,
                    line_number=record.line_number,
                )
            points.append(MetricPoint(metric_name(record, key), value))
        return points

    def dispatch(self, record: MetricRecord) -> int:
        """
        Send every gauge of a record to the sink.

        The record is fully converted before the first send, so a bad value
        never leaves half a row behind.

        Returns:
            Number of gauges sent
        """
        points = self.build_points(record)
        for point in points:
            self.sink.record_gauge(point.name, point.value)
        logger.debug(
            f"Sent {len(points)} gauges for {record.entity}/{record.sub_entity}"
        )
        return len(points)
