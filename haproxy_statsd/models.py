"""
Value objects for one polling cycle.

This module contains the declarative table of CSV positions read from the
HAProxy report, and the records, metric points and cycle results that flow
through the pipeline. None of them outlive the cycle that created them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

ENTITY_SEPARATOR = ":"
ENTITY_SEPARATOR_SUBSTITUTE = "."


class MetricType(str, Enum):
    """StatsD metric kinds emitted by the dispatcher."""

    GAUGE = "g"


@dataclass(frozen=True)
class FieldSpec:
    """A named column of the HAProxy CSV report."""

    key: str
    position: int


ENTITY_FIELD = FieldSpec("pxname", 0)
SUB_ENTITY_FIELD = FieldSpec("svname", 1)

# Tested against the HAProxy 1.5 CSV layout. Dispatch follows this order.
STAT_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("scur", 4),
    FieldSpec("smax", 5),
    FieldSpec("bin", 8),
    FieldSpec("bout", 9),
    FieldSpec("ereq", 12),
    FieldSpec("econ", 13),
    FieldSpec("rate", 33),
    FieldSpec("hrsp_1xx", 39),
    FieldSpec("hrsp_2xx", 40),
    FieldSpec("hrsp_3xx", 41),
    FieldSpec("hrsp_4xx", 42),
    FieldSpec("hrsp_5xx", 43),
    FieldSpec("qtime", 58),
    FieldSpec("ctime", 59),
    FieldSpec("rtime", 60),
    FieldSpec("ttime", 61),
)

STAT_KEYS: Tuple[str, ...] = tuple(spec.key for spec in STAT_FIELDS)

MIN_ROW_WIDTH = max(spec.position for spec in (ENTITY_FIELD, SUB_ENTITY_FIELD, *STAT_FIELDS)) + 1


def normalize_entity(name: str) -> str:
    """Replace the reserved separator so the name stays one graphite node path."""
    return name.replace(ENTITY_SEPARATOR, ENTITY_SEPARATOR_SUBSTITUTE)


@dataclass(frozen=True)
class MetricRecord:
    """
    Named view of one report row.

    Attributes:
        entity: Proxy name, already normalized
        sub_entity: Server name within the proxy
        values: (field key, raw string) pairs in STAT_FIELDS order
        line_number: 1-based line in the report the record came from
    """

    entity: str
    sub_entity: str
    values: Tuple[Tuple[str, str], ...]
    line_number: Optional[int] = field(default=None, compare=False)


@dataclass(frozen=True)
class MetricPoint:
    """A single gauge observation ready for the sink."""

    name: str
    value: int
    metric_type: MetricType = MetricType.GAUGE

    def wire_format(self, prefix: str = "") -> str:
        """Render the point as a StatsD line, e.g. ``lb.web.srv1.scur:3|g``."""
        name = f"{prefix}.{self.name}" if prefix else self.name
        return f"{name}:{self.value}|{self.metric_type.value}"


@dataclass
class CycleResult:
    """Outcome of one fetch, parse and dispatch cycle."""

    cycle: int
    started_at: datetime = field(default_factory=datetime.now)
    duration: float = 0.0
    records: int = 0
    metrics_sent: int = 0
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        """Check if the cycle ran to completion."""
        return self.error is None

    def summary(self) -> str:
        """One-line description suitable for logging."""
        status = "ok" if self.is_success else f"failed ({type(self.error).__name__})"
        return (
            f"cycle {self.cycle} started {self.started_at:%H:%M:%S} {status}: "
            f"{self.records} rows, {self.metrics_sent} metrics in {self.duration:.3f}s"
        )
