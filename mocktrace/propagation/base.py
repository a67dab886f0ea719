"""Abstract base class for span context propagators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, MutableMapping
from enum import Enum

from mocktrace._context import SpanContext
from mocktrace._errors import UnsupportedFormatError


class Format(str, Enum):
    """Carrier formats understood by :meth:`Tracer.inject` / :meth:`Tracer.extract`."""

    TEXT_MAP = "text_map"
    HTTP_HEADERS = "http_headers"


class Propagator(ABC):
    """Interface that all mocktrace propagators must implement."""

    @abstractmethod
    def inject(
        self, context: SpanContext, format: Format | str, carrier: MutableMapping[str, str]
    ) -> None:
        """Write *context* into *carrier* without removing foreign entries."""

    @abstractmethod
    def extract(
        self, format: Format | str, carrier: Mapping[str, str]
    ) -> SpanContext | None:
        """Read a context from *carrier*, or ``None`` if it holds none."""


def coerce_format(format: Format | str) -> Format:
    """Normalize *format* to a :class:`Format` member.

    Raises :class:`UnsupportedFormatError` for anything else.
    """
    try:
        return Format(format)
    except ValueError:
        raise UnsupportedFormatError(f"Unsupported carrier format: {format!r}") from None
