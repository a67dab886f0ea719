"""Tests for mocktrace._builder."""

from __future__ import annotations

import pytest

from mocktrace import IdGenerator, SpanContext, Tracer


class TestRootSpans:
    def test_root_invariants(self, tracer: Tracer) -> None:
        for _ in range(10):
            span = tracer.build_span("root").start()
            assert span.parent_id == 0
            assert span.context.trace_id != 0
            assert span.context.span_id != 0

    def test_each_root_starts_a_new_trace(self, tracer: Tracer) -> None:
        a = tracer.build_span("a").start()
        b = tracer.build_span("b").start()
        assert a.context.trace_id != b.context.trace_id

    def test_root_consumes_two_ids(self) -> None:
        tracer = Tracer(id_generator=IdGenerator())
        span = tracer.build_span("root").start()
        assert span.context.span_id == 1
        assert span.context.trace_id == 2


class TestChildSpans:
    def test_child_of_span(self, tracer: Tracer) -> None:
        parent = tracer.build_span("p").start()
        child = tracer.build_span("c").as_child_of(parent).start()
        assert child.context.trace_id == parent.context.trace_id
        assert child.parent_id == parent.context.span_id

    def test_child_of_context(self, tracer: Tracer) -> None:
        remote = SpanContext(trace_id=77, span_id=88, baggage={"k": "v"})
        child = tracer.build_span("c").as_child_of(remote).start()
        assert child.context.trace_id == 77
        assert child.parent_id == 88
        assert child.get_baggage_item("k") == "v"

    def test_child_consumes_one_id(self) -> None:
        tracer = Tracer(id_generator=IdGenerator())
        parent = tracer.build_span("p").start()
        child = tracer.build_span("c").as_child_of(parent).start()
        assert child.context.span_id == 3
        assert tracer.id_generator.next_id() == 4

    def test_last_parent_wins(self, tracer: Tracer) -> None:
        first = tracer.build_span("first").start()
        second = tracer.build_span("second").start()
        child = (
            tracer.build_span("c").as_child_of(first).as_child_of(second).start()
        )
        assert child.parent_id == second.context.span_id
        assert child.context.trace_id == second.context.trace_id

    def test_none_clears_parent(self, tracer: Tracer) -> None:
        parent = tracer.build_span("p").start()
        span = tracer.build_span("c").as_child_of(parent).as_child_of(None).start()
        assert span.parent_id == 0
        assert span.context.trace_id != parent.context.trace_id

    def test_baggage_copied_at_build_time(self, tracer: Tracer) -> None:
        parent = tracer.build_span("p").start()
        parent.set_baggage_item("k", "before")
        builder = tracer.build_span("c").as_child_of(parent)
        parent.set_baggage_item("k", "after")
        child = builder.start()
        # The reference captured the parent's context as it was.
        assert child.get_baggage_item("k") == "before"


class TestInitialTags:
    def test_tags_applied_at_start(self, tracer: Tracer) -> None:
        span = (
            tracer.build_span("s")
            .with_tag("component", "db")
            .with_tag("retries", 3)
            .start()
        )
        assert span.tags == {"component": "db", "retries": 3}


class TestStart:
    def test_builder_starts_once(self, tracer: Tracer) -> None:
        builder = tracer.build_span("s")
        builder.start()
        with pytest.raises(RuntimeError, match="already started"):
            builder.start()

    def test_start_active_finishes_on_close(self, tracer: Tracer) -> None:
        with tracer.build_span("s").start_active() as scope:
            assert not scope.span.finished
        assert scope.span.finished
        assert tracer.finished_spans() == [scope.span]

    def test_start_active_without_finish(self, tracer: Tracer) -> None:
        with tracer.build_span("s").start_active(finish_on_close=False) as scope:
            pass
        assert not scope.span.finished
        assert tracer.finished_spans() == []
