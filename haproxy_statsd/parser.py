"""
HAProxy CSV report parsing.

This module turns the body of the HAProxy ``;csv`` statistics page into
MetricRecord objects, one per proxy/server line. Comment lines (the
``# pxname,svname,...`` definition line included) and blank lines are
skipped. A malformed line aborts the whole report: rows are never dropped
silently.
"""

from __future__ import annotations

import csv
import logging
from typing import AsyncIterable, AsyncIterator, List, Optional, Union

from .exceptions import FieldCountError, ParseError, RowWidthError
from .models import (
    ENTITY_FIELD,
    MIN_ROW_WIDTH,
    STAT_FIELDS,
    SUB_ENTITY_FIELD,
    MetricRecord,
    normalize_entity,
)

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"
DELIMITER = ","

Line = Union[str, bytes]


class ReportParser:
    """
    Parser for one HAProxy statistics report.

    The parser keeps the line counter and the width of the first data row,
    so a new instance must be used for each report.
    """

    def __init__(self, encoding: str = "utf-8"):
        """
        Initialize report parser.

        Args:
            encoding: Encoding used to decode byte lines
        """
        self.encoding = encoding
        self.line_number = 0
        self.expected_width: Optional[int] = None

    async def records(self, stream: AsyncIterable[Line]) -> AsyncIterator[MetricRecord]:
        """
        Lazily parse an async stream of report lines.

        Args:
            stream: Async iterable of lines, e.g. ``aiohttp.StreamReader``

        Yields:
            One MetricRecord per data line

        Raises:
            ParseError: If a line is malformed
        """
        async for line in stream:
            record = self.feed(line)
            if record is not None:
                yield record

    def feed(self, line: Line) -> Optional[MetricRecord]:
        """
        Parse the next line of the report.

        Args:
            line: Raw line, with or without its line terminator

        Returns:
            MetricRecord for data lines, None for comment and blank lines
        """
        self.line_number += 1

        if isinstance(line, bytes):
            line = line.decode(self.encoding, errors="replace")
        text = line.rstrip("\r\n")

        if not text or text.startswith(COMMENT_MARKER):
            return None

        row = self.parse_line(text)
        self._check_width(row)
        return self.extract(row, self.line_number)

    def parse_line(self, text: str) -> List[str]:
        """Split one CSV line into positional fields."""
        try:
            return next(csv.reader([text], delimiter=DELIMITER, strict=True))
        except csv.Error as e:
            raise ParseError(
                f"Malformed CSV on line {self.line_number}: {e}",
                line_number=self.line_number,
            )

    def _check_width(self, row: List[str]) -> None:
        width = len(row)

        if width < MIN_ROW_WIDTH:
            raise RowWidthError(
                f"Line {self.line_number} has {width} fields, at least "
                f"{MIN_ROW_WIDTH} are required",
                line_number=self.line_number,
                width=width,
                required=MIN_ROW_WIDTH,
            )

        if self.expected_width is None:
            self.expected_width = width
            logger.debug(f"Report rows are {width} fields wide")
        elif width != self.expected_width:
            raise FieldCountError(
                f"Line {self.line_number} has {width} fields, expected "
                f"{self.expected_width} like the first row",
                line_number=self.line_number,
                width=width,
                expected=self.expected_width,
            )

    @staticmethod
    def extract(row: List[str], line_number: Optional[int] = None) -> MetricRecord:
        """
        Build a MetricRecord from the fixed positions of a row.

        Args:
            row: Positional fields, at least MIN_ROW_WIDTH long
            line_number: Line the row came from, kept for error messages

        Returns:
            MetricRecord with a normalized entity name
        """
        if len(row) < MIN_ROW_WIDTH:
            raise RowWidthError(
                f"Row has {len(row)} fields, at least {MIN_ROW_WIDTH} are required",
                line_number=line_number,
                width=len(row),
                required=MIN_ROW_WIDTH,
            )

        return MetricRecord(
            entity=normalize_entity(row[ENTITY_FIELD.position]),
            sub_entity=row[SUB_ENTITY_FIELD.position],
            values=tuple((spec.key, row[spec.position]) for spec in STAT_FIELDS),
            line_number=line_number,
        )
