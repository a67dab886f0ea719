"""Celery integration that propagates span context across task boundaries.

Usage::

    from mocktrace.contrib.celery import traced_task

    @app.task
    @traced_task(tracer)
    def process_async() -> None:
        # Runs inside a span that continues the caller's trace
        ...

    process_async.apply_async(headers=process_async._mocktrace_headers())

The ``traced_task`` decorator restores the caller's span context from the
task headers on the worker side and runs the task in a child span.
:func:`install_celery_signals` does the same transparently through Celery
signals.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from mocktrace._context import Scope
from mocktrace.propagation.base import Format
from mocktrace.propagation.text_map import BAGGAGE_PREFIX, SPAN_ID_KEY, TRACE_ID_KEY

if TYPE_CHECKING:
    from mocktrace._tracer import Tracer

HEADERS_KWARG = "__mocktrace_headers__"


def _current_headers(tracer: Tracer) -> dict[str, str]:
    span = tracer.active_span
    if span is None:
        return {}
    headers: dict[str, str] = {}
    tracer.inject(span.context, Format.TEXT_MAP, headers)
    return headers


def traced_task(
    tracer: Tracer, *, operation_name: str | None = None
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator that continues the caller's trace inside a Celery task.

    Wraps the function so that:

    1. When the task **executes** (worker side), span context is extracted
       from the ``__mocktrace_headers__`` keyword argument and the task body
       runs in an active child span.
    2. Callers can build those headers with the attached
       ``_mocktrace_headers()`` helper.
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        name = operation_name or f"task.{fn.__name__}"

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            headers: dict[str, str] = kwargs.pop(HEADERS_KWARG, {})
            parent = tracer.extract(Format.TEXT_MAP, headers)
            scope = (
                tracer.build_span(name)
                .as_child_of(parent)
                .with_tag("component", "celery")
                .start_active(finish_on_close=True)
            )
            with scope:
                try:
                    return fn(*args, **kwargs)
                except Exception:
                    scope.span.set_tag("error", True)
                    raise

        def _mocktrace_headers() -> dict[str, str]:
            return _current_headers(tracer)

        wrapper._mocktrace_headers = _mocktrace_headers  # type: ignore[attr-defined]
        return wrapper

    return decorator


def _is_tracing_key(key: str) -> bool:
    return key in (TRACE_ID_KEY, SPAN_ID_KEY) or key.startswith(BAGGAGE_PREFIX)


def _request_carrier(request: Any) -> dict[str, str]:
    carrier: dict[str, str] = {}
    req_headers = getattr(request, "headers", None)
    if isinstance(req_headers, dict):
        carrier.update(
            (key, value) for key, value in req_headers.items() if _is_tracing_key(key)
        )
    # Celery exposes custom message headers as request attributes.
    for key, value in getattr(request, "__dict__", {}).items():
        if isinstance(value, str) and _is_tracing_key(key):
            carrier.setdefault(key, value)
    return carrier


def install_celery_signals(tracer: Tracer) -> None:
    """Connect Celery signals for automatic span context propagation.

    Call this once at application startup (e.g. in your Celery
    ``app.on_after_configure`` handler).  Published tasks carry the active
    span's context in their headers; each executed task runs in an active
    span that continues that trace and finishes when the task returns.

    Requires ``celery`` to be installed.
    """
    from celery.signals import (  # type: ignore[import-not-found]
        before_task_publish,
        task_postrun,
        task_prerun,
    )

    scopes: dict[str, Scope] = {}

    @before_task_publish.connect(weak=False)  # type: ignore[untyped-decorator]
    def _inject_mocktrace_headers(
        headers: dict[str, Any] | None = None, **_kwargs: Any
    ) -> None:
        if headers is None:
            return
        headers.update(_current_headers(tracer))

    @task_prerun.connect(weak=False)  # type: ignore[untyped-decorator]
    def _start_task_span(
        sender: Any = None, task_id: str | None = None, **_kwargs: Any
    ) -> None:
        if task_id is None:
            return
        request = getattr(sender, "request", None)
        parent = (
            tracer.extract(Format.TEXT_MAP, _request_carrier(request))
            if request is not None
            else None
        )
        task_name = getattr(sender, "name", None) or "unknown"
        scopes[task_id] = (
            tracer.build_span(f"task.{task_name}")
            .as_child_of(parent)
            .with_tag("component", "celery")
            .with_tag("celery.task_id", task_id)
            .start_active(finish_on_close=True)
        )

    @task_postrun.connect(weak=False)  # type: ignore[untyped-decorator]
    def _finish_task_span(
        task_id: str | None = None, state: str | None = None, **_kwargs: Any
    ) -> None:
        scope = scopes.pop(task_id, None) if task_id is not None else None
        if scope is None:
            return
        if state is not None:
            scope.span.set_tag("celery.state", state)
        scope.close()
