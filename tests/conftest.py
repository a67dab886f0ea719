"""Shared fixtures for the mocktrace test suite."""

from __future__ import annotations

import pytest

from mocktrace import Tracer


@pytest.fixture
def tracer() -> Tracer:
    return Tracer()
