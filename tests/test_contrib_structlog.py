"""Tests for mocktrace.contrib.structlog.trace_processor."""

from __future__ import annotations

import structlog
from structlog.testing import CapturingLogger

from mocktrace import Tracer
from mocktrace.contrib.structlog import trace_processor


class TestTraceProcessor:
    def test_adds_ids_inside_span(self, tracer: Tracer) -> None:
        processor = trace_processor(tracer)
        with tracer.build_span("s").start_active() as scope:
            event = processor(None, "info", {"event": "hello"})
        assert event == {
            "event": "hello",
            "trace_id": scope.span.context.trace_id,
            "span_id": scope.span.context.span_id,
        }

    def test_omits_ids_outside_span(self, tracer: Tracer) -> None:
        processor = trace_processor(tracer)
        assert processor(None, "info", {"event": "hello"}) == {"event": "hello"}

    def test_runs_in_structlog_pipeline(self, tracer: Tracer) -> None:
        capture = CapturingLogger()
        logger = structlog.wrap_logger(
            capture,
            processors=[trace_processor(tracer), structlog.processors.KeyValueRenderer()],
        )
        with tracer.build_span("s").start_active() as scope:
            logger.info("inside")
        logger.info("outside")

        inside, outside = capture.calls
        assert f"trace_id={scope.span.context.trace_id}" in inside.args[0]
        assert "trace_id" not in outside.args[0]
