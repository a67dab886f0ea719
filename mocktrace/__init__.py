"""mocktrace: an in-memory tracer for testing instrumentation code."""

from mocktrace._builder import SpanBuilder
from mocktrace._context import Scope, ScopeManager, SpanContext
from mocktrace._decorators import traced
from mocktrace._errors import SpanContextCorruptedError, UnsupportedFormatError
from mocktrace._ids import IdGenerator
from mocktrace._span import Span
from mocktrace._tracer import Tracer
from mocktrace._types import LogEntry, TagValue, TimeUnit
from mocktrace.propagation import Format, PrinterPropagator, Propagator, TextMapPropagator

__all__ = [
    "Format",
    "IdGenerator",
    "LogEntry",
    "PrinterPropagator",
    "Propagator",
    "Scope",
    "ScopeManager",
    "Span",
    "SpanBuilder",
    "SpanContext",
    "SpanContextCorruptedError",
    "TagValue",
    "TextMapPropagator",
    "TimeUnit",
    "Tracer",
    "UnsupportedFormatError",
    "traced",
]
