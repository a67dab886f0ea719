"""The tracer: span factory, propagation entry point and finished-span store."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping

from mocktrace._builder import SpanBuilder
from mocktrace._config import resolve_propagator
from mocktrace._context import ScopeManager, SpanContext
from mocktrace._ids import IdGenerator
from mocktrace._recorder import FinishedSpanRecorder
from mocktrace._span import Span
from mocktrace.propagation.base import Format, Propagator

logger = logging.getLogger("mocktrace")


class Tracer:
    """In-memory tracer that keeps every finished span for later assertions.

    Instances are independent; pass the tracer explicitly to whatever code
    needs it.  :meth:`finished_spans` lists spans in the order they finished.
    """

    def __init__(
        self,
        propagator: Propagator | str = "text_map",
        id_generator: IdGenerator | None = None,
        scope_manager: ScopeManager | None = None,
    ) -> None:
        self.propagator = resolve_propagator(propagator)
        self.id_generator = id_generator or IdGenerator()
        self.scope_manager = scope_manager or ScopeManager()
        self._recorder = FinishedSpanRecorder()

    # -- span creation --------------------------------------------------------

    def build_span(self, operation_name: str) -> SpanBuilder:
        return SpanBuilder(self, operation_name)

    @property
    def active_span(self) -> Span | None:
        scope = self.scope_manager.active
        return scope.span if scope is not None else None

    # -- propagation ----------------------------------------------------------

    def inject(
        self,
        context: SpanContext | Span,
        format: Format | str,
        carrier: MutableMapping[str, str],
    ) -> None:
        """Encode *context* into *carrier* using the configured propagator."""
        if isinstance(context, Span):
            context = context.context
        self.propagator.inject(context, format, carrier)

    def extract(
        self, format: Format | str, carrier: Mapping[str, str]
    ) -> SpanContext | None:
        """Decode a context from *carrier*; ``None`` when it carries none."""
        return self.propagator.extract(format, carrier)

    # -- finished spans -------------------------------------------------------

    def finished_spans(self) -> list[Span]:
        """Snapshot of finished spans, earliest finish first."""
        return self._recorder.snapshot()

    def reset(self) -> None:
        """Forget all finished spans. Spans still in flight are unaffected."""
        self._recorder.clear()
        logger.debug("tracer.reset")

    def _span_finished(self, span: Span) -> None:
        self._recorder.record(span)
        logger.debug(
            "span.finish",
            extra={
                "operation_name": span.operation_name,
                "trace_id": span.context.trace_id,
                "span_id": span.context.span_id,
                "parent_id": span.parent_id,
            },
        )
