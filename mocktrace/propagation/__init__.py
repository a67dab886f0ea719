"""Span context propagators."""

from mocktrace.propagation.base import Format, Propagator, coerce_format
from mocktrace.propagation.printer import PrinterPropagator
from mocktrace.propagation.text_map import (
    PERCENT,
    PLAIN,
    Escaping,
    TextMapCodec,
    TextMapPropagator,
)

__all__ = [
    "PERCENT",
    "PLAIN",
    "Escaping",
    "Format",
    "PrinterPropagator",
    "Propagator",
    "TextMapCodec",
    "TextMapPropagator",
    "coerce_format",
]
