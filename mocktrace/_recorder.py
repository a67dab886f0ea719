"""Thread-safe store of finished spans."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mocktrace._span import Span


class FinishedSpanRecorder:
    """Append-only (until :meth:`clear`) list of finished spans in finish order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._spans: list[Span] = []

    def record(self, span: Span) -> None:
        with self._lock:
            self._spans.append(span)

    def snapshot(self) -> list[Span]:
        """Return a copy; later finishes do not affect it."""
        with self._lock:
            return list(self._spans)

    def clear(self) -> None:
        with self._lock:
            self._spans.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._spans)
