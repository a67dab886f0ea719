"""Propagator that only logs what it is asked to do."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping

from mocktrace._context import SpanContext
from mocktrace.propagation.base import Format, Propagator, coerce_format

logger = logging.getLogger("mocktrace")


class PrinterPropagator(Propagator):
    """Logs each inject/extract call and leaves the carrier untouched.

    :meth:`extract` always returns ``None``.
    """

    def inject(
        self, context: SpanContext, format: Format | str, carrier: MutableMapping[str, str]
    ) -> None:
        logger.info(
            "propagation.inject",
            extra={
                "trace_id": context.trace_id,
                "span_id": context.span_id,
                "format": coerce_format(format).value,
                "carrier_keys": sorted(carrier),
            },
        )

    def extract(
        self, format: Format | str, carrier: Mapping[str, str]
    ) -> SpanContext | None:
        logger.info(
            "propagation.extract",
            extra={
                "format": coerce_format(format).value,
                "carrier_keys": sorted(carrier),
            },
        )
        return None
