"""Text-map propagation for plain and HTTP-header carriers.

Both formats share one codec and differ only in how baggage is escaped::

    traceid           -> decimal trace id
    spanid            -> decimal span id
    baggage-<key>     -> <value>

For :attr:`Format.HTTP_HEADERS` baggage keys and values are percent-escaped
and the reserved keys are matched case-insensitively on extract, since HTTP
stacks are free to change header case.  Baggage keys keep only lower-case
letters, digits and ``-.~`` literal; everything else, upper-case letters and
``_`` included, is escaped, so folding case or swapping ``_`` for ``-`` (as
WSGI servers and Django do) cannot change the decoded key.
"""

from __future__ import annotations

import logging
import string
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass
from functools import partial
from urllib.parse import quote, unquote

from mocktrace._context import SpanContext
from mocktrace._errors import SpanContextCorruptedError
from mocktrace.propagation.base import Format, Propagator, coerce_format

logger = logging.getLogger("mocktrace")

TRACE_ID_KEY = "traceid"
SPAN_ID_KEY = "spanid"
BAGGAGE_PREFIX = "baggage-"


def _identity(value: str) -> str:
    return value


@dataclass(frozen=True, slots=True)
class Escaping:
    """How a carrier flavor encodes baggage and compares reserved keys."""

    escape: Callable[[str], str]
    unescape: Callable[[str], str]
    escape_key: Callable[[str], str] = _identity
    unescape_key: Callable[[str], str] = _identity
    case_sensitive: bool = True


_HEADER_KEY_SAFE = frozenset(string.ascii_lowercase + string.digits + "-.~")


def _escape_header_key(key: str) -> str:
    return "".join(
        char
        if char in _HEADER_KEY_SAFE
        else "".join(f"%{byte:02X}" for byte in char.encode("utf-8"))
        for char in key
    )


def _unescape_header_key(key: str) -> str:
    # Literal letters were lower-case on the way out; escapes are hex.
    return unquote(key.lower())


PLAIN = Escaping(escape=_identity, unescape=_identity)
PERCENT = Escaping(
    escape=partial(quote, safe=""),
    unescape=unquote,
    escape_key=_escape_header_key,
    unescape_key=_unescape_header_key,
    case_sensitive=False,
)


def _parse_id(key: str, value: str) -> int:
    if not (value.isascii() and value.isdigit()) or int(value) == 0:
        raise SpanContextCorruptedError(
            f"Carrier entry {key!r} is not a valid identifier: {value!r}"
        )
    return int(value)


class TextMapCodec:
    """Encodes a :class:`SpanContext` into a flat string map and back."""

    def __init__(self, escaping: Escaping = PLAIN) -> None:
        self.escaping = escaping

    def inject(self, context: SpanContext, carrier: MutableMapping[str, str]) -> None:
        escape = self.escaping.escape
        carrier[TRACE_ID_KEY] = str(context.trace_id)
        carrier[SPAN_ID_KEY] = str(context.span_id)
        for key, value in context.baggage.items():
            carrier[BAGGAGE_PREFIX + self.escaping.escape_key(key)] = escape(value)

    def extract(self, carrier: Mapping[str, str]) -> SpanContext | None:
        unescape = self.escaping.unescape
        trace_id: int | None = None
        span_id: int | None = None
        baggage: dict[str, str] = {}

        for key, value in carrier.items():
            match = key if self.escaping.case_sensitive else key.lower()
            if match == TRACE_ID_KEY:
                trace_id = _parse_id(key, value)
            elif match == SPAN_ID_KEY:
                span_id = _parse_id(key, value)
            elif match.startswith(BAGGAGE_PREFIX):
                name = self.escaping.unescape_key(key[len(BAGGAGE_PREFIX) :])
                baggage[name] = unescape(value)

        if trace_id is None or span_id is None:
            return None
        return SpanContext(trace_id, span_id, baggage)


class TextMapPropagator(Propagator):
    """Default propagator: :data:`PLAIN` for text maps, :data:`PERCENT` for headers."""

    def __init__(self) -> None:
        self._codecs: dict[Format, TextMapCodec] = {
            Format.TEXT_MAP: TextMapCodec(PLAIN),
            Format.HTTP_HEADERS: TextMapCodec(PERCENT),
        }

    def codec(self, format: Format | str) -> TextMapCodec:
        return self._codecs[coerce_format(format)]

    def inject(
        self, context: SpanContext, format: Format | str, carrier: MutableMapping[str, str]
    ) -> None:
        self.codec(format).inject(context, carrier)
        logger.debug(
            "propagation.inject",
            extra={
                "trace_id": context.trace_id,
                "span_id": context.span_id,
                "format": coerce_format(format).value,
            },
        )

    def extract(
        self, format: Format | str, carrier: Mapping[str, str]
    ) -> SpanContext | None:
        context = self.codec(format).extract(carrier)
        logger.debug(
            "propagation.extract",
            extra={
                "format": coerce_format(format).value,
                "found": context is not None,
            },
        )
        return context
