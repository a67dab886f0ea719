"""Span and trace identifier generation."""

from __future__ import annotations

import itertools
import threading


class IdGenerator:
    """Issues non-zero identifiers, unique for the lifetime of the generator.

    Identifiers come from a lock-guarded counter, so uniqueness holds by
    construction and runs are reproducible.
    """

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError(f"start must be positive, got {start!r}")
        self._lock = threading.Lock()
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)
