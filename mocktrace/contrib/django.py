"""Django middleware that runs each request inside a server span.

Bind a tracer by subclassing and add the subclass to ``MIDDLEWARE``::

    class AppTracingMiddleware(TracingMiddleware):
        tracer = app_tracer

    MIDDLEWARE = [
        "myproject.middleware.AppTracingMiddleware",
        ...
    ]

The span continues the trace found in the incoming HTTP headers (if any),
is active for the duration of the view, and its trace id is returned in the
``X-Trace-ID`` response header.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from mocktrace.propagation.base import Format

if TYPE_CHECKING:
    from mocktrace._tracer import Tracer


class TracingMiddleware:
    """Django middleware that wraps each request in an active span."""

    tracer: Tracer | None = None

    def __init__(
        self, get_response: Callable[..., Any], tracer: Tracer | None = None
    ) -> None:
        self.get_response = get_response
        if tracer is not None:
            self.tracer = tracer
        if self.tracer is None:
            raise RuntimeError(
                "TracingMiddleware needs a tracer. "
                "Pass one or set the `tracer` class attribute on a subclass."
            )

    def __call__(self, request: Any) -> Any:
        assert self.tracer is not None
        headers = dict(getattr(request, "headers", None) or {})
        parent = self.tracer.extract(Format.HTTP_HEADERS, headers)
        method = getattr(request, "method", None) or "GET"
        builder = (
            self.tracer.build_span(f"http.{method.lower()}")
            .as_child_of(parent)
            .with_tag("span.kind", "server")
            .with_tag("http.method", method)
        )
        path = getattr(request, "path", None)
        if path is not None:
            builder.with_tag("http.url", path)

        with builder.start_active(finish_on_close=True) as scope:
            try:
                response = self.get_response(request)
            except Exception:
                scope.span.set_tag("error", True)
                raise
            status = getattr(response, "status_code", None)
            if status is not None:
                scope.span.set_tag("http.status_code", status)
            response["X-Trace-ID"] = str(scope.span.context.trace_id)
            return response
