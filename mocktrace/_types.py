"""Core value types shared across mocktrace: time units, tag values, log entries."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Anything else is accepted too and stored unchanged.
TagValue = str | int | float | bool


def _truncate_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // denominator
    return int(quotient if numerator >= 0 else -quotient)


class TimeUnit(Enum):
    """Time granularity of a timestamp, expressed as a microsecond ratio.

    Conversions truncate toward zero, so sub-microsecond precision is dropped
    rather than rounded.
    """

    NANOSECONDS = (1, 1000)
    MICROSECONDS = (1, 1)
    MILLISECONDS = (1_000, 1)
    SECONDS = (1_000_000, 1)
    MINUTES = (60_000_000, 1)
    HOURS = (3_600_000_000, 1)
    DAYS = (86_400_000_000, 1)

    def __init__(self, micros: int, per: int) -> None:
        self._micros = micros
        self._per = per

    def to_micros(self, value: int) -> int:
        """Convert *value* in this unit to whole microseconds."""
        return _truncate_div(value * self._micros, self._per)

    def from_micros(self, micros: int) -> int:
        """Convert whole microseconds to this unit."""
        return _truncate_div(micros * self._per, self._micros)


def now_micros() -> int:
    """Current wall-clock time in microseconds since the epoch."""
    return time.time_ns() // 1000


@dataclass(frozen=True, slots=True)
class LogEntry:
    """A timestamped set of fields recorded on a span."""

    timestamp_micros: int
    fields: dict[str, Any] = field(default_factory=dict)

    def timestamp(self, unit: TimeUnit = TimeUnit.MICROSECONDS) -> int:
        return unit.from_micros(self.timestamp_micros)
