"""Propagator selection for :class:`~mocktrace.Tracer`."""

from __future__ import annotations

from mocktrace.propagation.base import Propagator


def resolve_propagator(propagator: Propagator | str = "text_map") -> Propagator:
    """Return a :class:`Propagator` for *propagator*.

    *propagator* can be:
    - A :class:`Propagator` instance, returned unchanged
    - ``"text_map"`` (default) - :class:`TextMapPropagator`, handling both
      plain text maps and HTTP headers
    - ``"printer"`` - :class:`PrinterPropagator`, which only logs calls
    """
    if isinstance(propagator, Propagator):
        return propagator
    if propagator == "text_map":
        from mocktrace.propagation.text_map import TextMapPropagator

        return TextMapPropagator()
    if propagator == "printer":
        from mocktrace.propagation.printer import PrinterPropagator

        return PrinterPropagator()
    raise ValueError(f"Unknown propagator: {propagator!r}")
