"""Span context identity and active-span tracking via contextvars."""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mocktrace._span import Span


@dataclass(frozen=True, slots=True)
class SpanContext:
    """Immutable identity of a span: trace id, span id and baggage.

    Two contexts are equal iff both ids match; baggage does not take part in
    equality.  Use :meth:`with_baggage_item` to derive a context carrying an
    extra baggage entry.
    """

    trace_id: int
    span_id: int
    baggage: Mapping[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        # Copy so later mutation of the caller's dict cannot leak in.
        object.__setattr__(self, "baggage", MappingProxyType(dict(self.baggage)))

    def get_baggage_item(self, key: str) -> str | None:
        return self.baggage.get(key)

    def with_baggage_item(self, key: str, value: str) -> SpanContext:
        """Return a new context with the same ids and *key* set to *value*."""
        baggage = dict(self.baggage)
        baggage[key] = value
        return SpanContext(self.trace_id, self.span_id, baggage)

    def __repr__(self) -> str:
        return (
            f"SpanContext(trace_id={self.trace_id}, span_id={self.span_id}, "
            f"baggage={dict(self.baggage)!r})"
        )


class Scope:
    """An activation of a span; closing it restores the previous scope."""

    __slots__ = ("_closed", "_finish_on_close", "_manager", "_span", "_token")

    def __init__(self, manager: ScopeManager, span: Span, finish_on_close: bool) -> None:
        self._manager = manager
        self._span = span
        self._finish_on_close = finish_on_close
        self._token: Token[Scope | None] | None = None
        self._closed = False

    @property
    def span(self) -> Span:
        return self._span

    def close(self) -> None:
        """Deactivate the span, finishing it if requested. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._token is not None:
            self._manager._restore(self._token)
        if self._finish_on_close:
            self._span.finish()

    def __enter__(self) -> Scope:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class ScopeManager:
    """Tracks the active span per thread / async task using ``contextvars``.

    Each manager owns its own ``ContextVar`` so tracers never observe one
    another's active spans.  A scope must be closed in the same context it
    was activated in.
    """

    def __init__(self) -> None:
        self._active_var: ContextVar[Scope | None] = ContextVar(
            f"mocktrace_active_scope_{id(self):x}", default=None
        )

    def activate(self, span: Span, finish_on_close: bool = True) -> Scope:
        """Make *span* the active span until the returned scope is closed."""
        scope = Scope(self, span, finish_on_close)
        scope._token = self._active_var.set(scope)
        return scope

    @property
    def active(self) -> Scope | None:
        """The innermost open scope, or ``None``."""
        return self._active_var.get()

    def _restore(self, token: Token[Scope | None]) -> None:
        self._active_var.reset(token)
