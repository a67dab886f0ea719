"""User-facing decorator: @traced."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from mocktrace._context import Scope

if TYPE_CHECKING:
    from mocktrace._tracer import Tracer


def traced(
    tracer: Tracer,
    fn: Callable[..., Any] | None = None,
    *,
    operation_name: str | None = None,
    tags: Mapping[str, Any] | None = None,
) -> Any:
    """Run the decorated callable inside a span.

    The span is a child of the tracer's active span (if any) and is itself
    active for the duration of the call.  When the callable raises, the span
    is tagged ``error=True`` and gets an ``error`` log entry before the
    exception propagates.

    Can be used as ``@traced(tracer)`` or with arguments
    (``@traced(tracer, operation_name="custom")``).
    """
    if fn is not None:
        return _make_traced(tracer, fn, operation_name=None, tags=None)

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        return _make_traced(tracer, f, operation_name=operation_name, tags=tags)

    return decorator


def _make_traced(
    tracer: Tracer,
    fn: Callable[..., Any],
    *,
    operation_name: str | None,
    tags: Mapping[str, Any] | None,
) -> Callable[..., Any]:
    name = operation_name or fn.__qualname__
    initial_tags = dict(tags or {})

    def open_scope() -> Scope:
        builder = tracer.build_span(name).as_child_of(tracer.active_span)
        for key, value in initial_tags.items():
            builder.with_tag(key, value)
        return builder.start_active(finish_on_close=True)

    if inspect.iscoroutinefunction(fn):

        @functools.wraps(fn)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with open_scope() as scope:
                try:
                    return await fn(*args, **kwargs)
                except Exception as exc:
                    _mark_error(scope, exc)
                    raise

        return async_wrapper

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        with open_scope() as scope:
            try:
                return fn(*args, **kwargs)
            except Exception as exc:
                _mark_error(scope, exc)
                raise

    return wrapper


def _mark_error(scope: Scope, exc: BaseException) -> None:
    scope.span.set_tag("error", True)
    scope.span.log(
        {
            "event": "error",
            "error.kind": type(exc).__name__,
            "error.object": exc,
            "message": str(exc),
        }
    )
