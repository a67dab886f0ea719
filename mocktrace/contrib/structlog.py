"""structlog processor that injects the active span's ids into log entries.

Usage::

    import structlog
    from mocktrace.contrib.structlog import trace_processor

    structlog.configure(
        processors=[
            trace_processor(tracer),
            structlog.dev.ConsoleRenderer(),
        ]
    )

Every log entry emitted while a span is active on *tracer* will include
``trace_id`` and ``span_id`` keys.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mocktrace._tracer import Tracer

Processor = Callable[[Any, str, dict[str, Any]], dict[str, Any]]


def trace_processor(tracer: Tracer) -> Processor:
    """Build a structlog processor bound to *tracer*.

    When no span is active the keys are omitted rather than set to ``None``,
    keeping logs clean outside of traced code.
    """

    def processor(
        _logger: Any, _method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        span = tracer.active_span
        if span is not None:
            event_dict["trace_id"] = span.context.trace_id
            event_dict["span_id"] = span.context.span_id
        return event_dict

    return processor
