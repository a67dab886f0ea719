"""Span builder returned by :meth:`Tracer.build_span`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mocktrace._context import Scope, SpanContext
from mocktrace._span import Span
from mocktrace._types import TimeUnit, now_micros

if TYPE_CHECKING:
    from mocktrace._tracer import Tracer


class SpanBuilder:
    """Accumulates span configuration, consumed once by :meth:`start`."""

    def __init__(self, tracer: Tracer, operation_name: str) -> None:
        self._tracer = tracer
        self._operation_name = operation_name
        self._parent: SpanContext | None = None
        self._start_micros: int | None = None
        self._tags: dict[str, Any] = {}
        self._started = False

    def as_child_of(self, parent: Span | SpanContext | None) -> SpanBuilder:
        """Set the parent reference. Last call wins; ``None`` clears it."""
        if isinstance(parent, Span):
            parent = parent.context
        self._parent = parent
        return self

    def with_start_timestamp(
        self, value: int, unit: TimeUnit = TimeUnit.MICROSECONDS
    ) -> SpanBuilder:
        self._start_micros = unit.to_micros(value)
        return self

    def with_tag(self, key: str, value: Any) -> SpanBuilder:
        self._tags[key] = value
        return self

    def start(self) -> Span:
        """Build and start the span. A builder can start only one span."""
        if self._started:
            raise RuntimeError(
                f"SpanBuilder for '{self._operation_name}' has already started a span"
            )
        self._started = True
        start = self._start_micros if self._start_micros is not None else now_micros()
        return Span(
            self._tracer,
            self._operation_name,
            start,
            self._tags,
            self._parent,
        )

    def start_active(self, finish_on_close: bool = True) -> Scope:
        """Start the span and make it the tracer's active span."""
        return self._tracer.scope_manager.activate(self.start(), finish_on_close)
