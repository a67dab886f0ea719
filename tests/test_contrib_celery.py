"""Tests for mocktrace.contrib.celery.traced_task."""

from __future__ import annotations

import contextlib
from types import SimpleNamespace

from mocktrace import Format, Span, Tracer
from mocktrace.contrib.celery import _request_carrier, traced_task


class TestTracedTask:
    def test_runs_in_active_span(self, tracer: Tracer) -> None:
        captured: list[Span | None] = []

        @traced_task(tracer)
        def my_task() -> None:
            captured.append(tracer.active_span)

        my_task()
        (span,) = tracer.finished_spans()
        assert captured == [span]
        assert span.operation_name == "task.my_task"
        assert span.tags["component"] == "celery"
        assert span.parent_id == 0

    def test_resets_active_span_after_execution(self, tracer: Tracer) -> None:
        @traced_task(tracer)
        def my_task() -> None:
            pass

        my_task()
        assert tracer.active_span is None

    def test_exception_marks_span(self, tracer: Tracer) -> None:
        @traced_task(tracer)
        def my_task() -> None:
            raise ValueError("boom")

        with contextlib.suppress(ValueError):
            my_task()
        assert tracer.active_span is None
        assert tracer.finished_spans()[0].tags["error"] is True

    def test_continues_trace_from_headers(self, tracer: Tracer) -> None:
        @traced_task(tracer, operation_name="process")
        def my_task() -> None:
            pass

        with tracer.build_span("producer").start_active() as scope:
            headers = my_task._mocktrace_headers()  # type: ignore[attr-defined]
        my_task(__mocktrace_headers__=headers)

        producer, task = tracer.finished_spans()
        assert task.operation_name == "process"
        assert task.parent_id == scope.span.context.span_id
        assert task.context.trace_id == producer.context.trace_id

    def test_headers_helper_outside_span(self, tracer: Tracer) -> None:
        @traced_task(tracer)
        def my_task() -> None:
            pass

        assert my_task._mocktrace_headers() == {}  # type: ignore[attr-defined]

    def test_preserves_return_value_and_name(self, tracer: Tracer) -> None:
        @traced_task(tracer)
        def my_task(x: int) -> int:
            return x * 2

        assert my_task(21) == 42
        assert my_task.__name__ == "my_task"


class TestRequestCarrier:
    def test_merges_headers_and_attributes(self, tracer: Tracer) -> None:
        span = tracer.build_span("s").start()
        carrier: dict[str, str] = {}
        tracer.inject(span.context, Format.TEXT_MAP, carrier)

        request = SimpleNamespace(headers={"traceid": carrier["traceid"]}, retries=0)
        request.spanid = carrier["spanid"]  # type: ignore[attr-defined]

        extracted = tracer.extract(Format.TEXT_MAP, _request_carrier(request))
        assert extracted == span.context

    def test_keeps_only_tracing_keys(self) -> None:
        request = SimpleNamespace(
            headers={"traceid": "1", "x-priority": "high"},
            spanid="2",
            task="tasks.add",
            hostname="worker@host",
        )
        request.__dict__["baggage-tenant"] = "acme"

        assert _request_carrier(request) == {
            "traceid": "1",
            "spanid": "2",
            "baggage-tenant": "acme",
        }
