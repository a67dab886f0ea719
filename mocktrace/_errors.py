"""Exceptions raised by mocktrace."""

from __future__ import annotations


class UnsupportedFormatError(ValueError):
    """The propagator does not handle the requested carrier format."""


class SpanContextCorruptedError(ValueError):
    """A carrier holds tracing keys whose values cannot be decoded."""
