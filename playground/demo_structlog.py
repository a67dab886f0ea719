"""Demo: structlog integration.

Run this to see trace and span ids automatically injected into structlog
output, and the finished spans the tracer kept.
Note: requires `structlog` to be installed (pip install structlog).
"""

from __future__ import annotations

from mocktrace import Format, Tracer, traced
from mocktrace.contrib.structlog import trace_processor

try:
    import structlog
except ImportError:
    print("This demo requires structlog: pip install structlog")
    raise SystemExit(1) from None

tracer = Tracer()

structlog.configure(
    processors=[
        trace_processor(tracer),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.BoundLogger,
    logger_factory=structlog.PrintLoggerFactory(),
)

log = structlog.get_logger()


@traced(tracer, operation_name="checkout")
def checkout() -> dict[str, str]:
    log.info("checkout started")
    tracer.active_span.set_baggage_item("tenant", "acme")  # type: ignore[union-attr]
    return charge()


@traced(tracer, operation_name="charge")
def charge() -> dict[str, str]:
    log.info("charging card")
    headers: dict[str, str] = {}
    tracer.inject(tracer.active_span, Format.HTTP_HEADERS, headers)  # type: ignore[arg-type]
    log.warning("outgoing headers", headers=headers)
    return headers


if __name__ == "__main__":
    # Outside a span - no ids injected.
    log.info("before checkout")

    checkout()

    # Outside again.
    log.info("after checkout")

    for span in tracer.finished_spans():
        log.info(
            "finished span",
            operation=span.operation_name,
            parent_id=span.parent_id,
            duration_us=(span.finish_timestamp() or 0) - span.start_timestamp(),
        )
