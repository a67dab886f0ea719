"""Tests for mocktrace._config."""

from __future__ import annotations

import pytest

from mocktrace import PrinterPropagator, TextMapPropagator, Tracer
from mocktrace._config import resolve_propagator


class TestResolvePropagator:
    def test_default_is_text_map(self) -> None:
        assert isinstance(resolve_propagator(), TextMapPropagator)

    def test_string_text_map(self) -> None:
        assert isinstance(resolve_propagator("text_map"), TextMapPropagator)

    def test_string_printer(self) -> None:
        assert isinstance(resolve_propagator("printer"), PrinterPropagator)

    def test_instance_returned_unchanged(self) -> None:
        instance = PrinterPropagator()
        assert resolve_propagator(instance) is instance

    def test_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown propagator"):
            resolve_propagator("bogus")


class TestTracerWiring:
    def test_tracer_uses_resolved_propagator(self) -> None:
        instance = TextMapPropagator()
        assert Tracer(propagator=instance).propagator is instance

    def test_tracer_rejects_unknown_propagator(self) -> None:
        with pytest.raises(ValueError, match="Unknown propagator"):
            Tracer(propagator="bogus")

    def test_each_tracer_gets_its_own_collaborators(self) -> None:
        a, b = Tracer(), Tracer()
        assert a.id_generator is not b.id_generator
        assert a.scope_manager is not b.scope_manager
