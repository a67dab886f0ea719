"""The mutable span record handed to instrumentation code."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from mocktrace._context import SpanContext
from mocktrace._types import LogEntry, TagValue, TimeUnit, now_micros

if TYPE_CHECKING:
    from mocktrace._tracer import Tracer

logger = logging.getLogger("mocktrace")


class Span:
    """One unit of work: operation name, timestamps, tags, logs and baggage.

    A span is owned by whoever started it until :meth:`finish`, which hands it
    to the tracer's finished-span list.  Mutating a finished span (including
    finishing it again) is ignored; the attempt is recorded in
    :attr:`generated_errors` and logged as a warning.
    """

    def __init__(
        self,
        tracer: Tracer,
        operation_name: str,
        start_micros: int,
        tags: Mapping[str, Any],
        parent: SpanContext | None,
    ) -> None:
        self._tracer = tracer
        self._lock = threading.Lock()
        self._operation_name = operation_name
        self._start_micros = start_micros
        self._finish_micros: int | None = None
        self._tags: dict[str, Any] = dict(tags)
        self._log_entries: list[LogEntry] = []
        self._errors: list[str] = []

        span_id = tracer.id_generator.next_id()
        if parent is None:
            self._parent_id = 0
            self._context = SpanContext(tracer.id_generator.next_id(), span_id)
        else:
            self._parent_id = parent.span_id
            self._context = SpanContext(parent.trace_id, span_id, parent.baggage)

    # -- identity -------------------------------------------------------------

    @property
    def context(self) -> SpanContext:
        """Current context; ids never change, baggage reflects later sets."""
        return self._context

    @property
    def parent_id(self) -> int:
        """Span id of the parent, or ``0`` for a root span."""
        return self._parent_id

    @property
    def tracer(self) -> Tracer:
        return self._tracer

    @property
    def operation_name(self) -> str:
        return self._operation_name

    @operation_name.setter
    def operation_name(self, name: str) -> None:
        self.set_operation_name(name)

    def set_operation_name(self, name: str) -> Span:
        if not self._finished_check("set operation name %r", name):
            self._operation_name = name
        return self

    # -- timing ---------------------------------------------------------------

    def start_timestamp(self, unit: TimeUnit = TimeUnit.MICROSECONDS) -> int:
        return unit.from_micros(self._start_micros)

    def finish_timestamp(self, unit: TimeUnit = TimeUnit.MICROSECONDS) -> int | None:
        """Finish time in *unit*, or ``None`` while the span is in flight."""
        if self._finish_micros is None:
            return None
        return unit.from_micros(self._finish_micros)

    @property
    def finished(self) -> bool:
        return self._finish_micros is not None

    # -- tags -----------------------------------------------------------------

    def set_tag(self, key: str, value: TagValue | Any) -> Span:
        """Set a tag. Values of any type are stored as-is."""
        if not self._finished_check("set tag %r", key):
            self._tags[key] = value
        return self

    @property
    def tags(self) -> dict[str, Any]:
        """Snapshot of the tags."""
        return dict(self._tags)

    # -- logs -----------------------------------------------------------------

    def log(
        self,
        event_or_fields: str | Mapping[str, Any],
        timestamp: int | None = None,
        unit: TimeUnit = TimeUnit.MICROSECONDS,
    ) -> Span:
        """Append a log entry.

        A plain string is shorthand for ``{"event": <string>}``.  Without a
        *timestamp* the wall clock is used.  Fields are copied at call time.
        """
        if self._finished_check("log %r", event_or_fields):
            return self
        if isinstance(event_or_fields, str):
            fields: dict[str, Any] = {"event": event_or_fields}
        else:
            fields = dict(event_or_fields)
        micros = now_micros() if timestamp is None else unit.to_micros(timestamp)
        self._log_entries.append(LogEntry(micros, fields))
        return self

    @property
    def log_entries(self) -> list[LogEntry]:
        """Snapshot of the log entries in insertion order."""
        return list(self._log_entries)

    # -- baggage --------------------------------------------------------------

    def set_baggage_item(self, key: str, value: str) -> Span:
        """Set a baggage item on this span only.

        Children created afterwards inherit it; existing children and the
        parent are unaffected.
        """
        if not self._finished_check("set baggage item %r", key):
            self._context = self._context.with_baggage_item(key, value)
        return self

    def get_baggage_item(self, key: str) -> str | None:
        return self._context.get_baggage_item(key)

    # -- lifecycle ------------------------------------------------------------

    def finish(
        self, timestamp: int | None = None, unit: TimeUnit = TimeUnit.MICROSECONDS
    ) -> None:
        """Freeze the span and append it to the tracer's finished spans."""
        with self._lock:
            already = self._finish_micros is not None
            if not already:
                self._finish_micros = (
                    now_micros() if timestamp is None else unit.to_micros(timestamp)
                )
        if already:
            self._record_error("finish called on an already finished span")
            return
        self._tracer._span_finished(self)

    @property
    def generated_errors(self) -> list[str]:
        """Misuse recorded against this span, oldest first."""
        return list(self._errors)

    # -- helpers --------------------------------------------------------------

    def _finished_check(self, action: str, *args: Any) -> bool:
        if self._finish_micros is None:
            return False
        self._record_error(f"Attempted to {action % args} on a finished span")
        return True

    def _record_error(self, message: str) -> None:
        self._errors.append(message)
        logger.warning(
            "span.misuse",
            extra={
                "operation_name": self._operation_name,
                "span_id": self._context.span_id,
                "error": message,
            },
        )

    def __repr__(self) -> str:
        return (
            f"Span(operation_name={self._operation_name!r}, "
            f"trace_id={self._context.trace_id}, span_id={self._context.span_id}, "
            f"parent_id={self._parent_id})"
        )
