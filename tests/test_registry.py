"""
Unit Tests for the Strategy Registry
====================================

Covers registration order, named and unnamed selection, sticky selection,
availability probing on every read, and the error taxonomy.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging

import pytest

from bytepeek.errors import NoStrategyAvailable, StrategyUnavailable, StrategyUnknown
from bytepeek.registry import Strategy, StrategyRegistry


def upper(data: bytes) -> str:
    return data.decode().upper()


def length(data: bytes) -> str:
    return str(len(data))


class Switch:
    """Availability probe that tests can turn on and off."""

    def __init__(self, on: bool = True):
        self.on = on
        self.calls = 0

    def __call__(self) -> bool:
        self.calls += 1
        return self.on


class TestRegistration:
    """Tests for register/lookup."""

    def test_register_then_select_returns_handler(self):
        registry = StrategyRegistry()
        registry.register("upper", upper)

        assert registry.select("upper") is upper

    def test_register_returns_entry(self):
        registry = StrategyRegistry()
        entry = registry.register("upper", upper, description="shout")

        assert isinstance(entry, Strategy)
        assert entry.name == "upper"
        assert entry.description == "shout"

    def test_registration_order_preserved(self):
        registry = StrategyRegistry()
        registry.register("b", upper)
        registry.register("a", length)

        assert registry.names() == ["b", "a"]
        assert len(registry) == 2
        assert "a" in registry
        assert "c" not in registry

    def test_duplicate_names_earliest_wins(self):
        registry = StrategyRegistry()
        registry.register("x", upper)
        registry.register("x", length)

        assert registry.select("x") is upper
        assert registry.names() == ["x", "x"]

    def test_probe_not_run_at_registration(self):
        probe = Switch()
        registry = StrategyRegistry()
        registry.register("tool", upper, probe=probe)

        assert probe.calls == 0


class TestNamedSelection:
    """Tests for select(name)."""

    def test_unknown_name_raises(self):
        registry = StrategyRegistry()
        registry.register("upper", upper)

        with pytest.raises(StrategyUnknown) as exc_info:
            registry.select("missing")

        assert exc_info.value.name == "missing"
        assert "upper" in str(exc_info.value)

    def test_unknown_name_on_empty_registry(self):
        with pytest.raises(StrategyUnknown):
            StrategyRegistry().select("anything")

    def test_unavailable_probe_raises(self):
        registry = StrategyRegistry()
        registry.register("tool", upper, probe=Switch(on=False))

        with pytest.raises(StrategyUnavailable) as exc_info:
            registry.select("tool")

        assert "tool" in str(exc_info.value)

    def test_non_callable_handler_raises(self):
        registry = StrategyRegistry()
        registry.register("broken", None)

        with pytest.raises(StrategyUnavailable):
            registry.select("broken")

    def test_named_selection_becomes_active(self):
        registry = StrategyRegistry()
        registry.register("upper", upper)
        registry.register("length", length)

        registry.select("length")

        assert registry.active.name == "length"
        assert registry.select() is length

    def test_strategy_available_after_late_initialisation(self):
        probe = Switch(on=False)
        registry = StrategyRegistry()
        registry.register("tool", upper, probe=probe)

        with pytest.raises(StrategyUnavailable):
            registry.select("tool")

        probe.on = True
        assert registry.select("tool") is upper


class TestUnnamedSelection:
    """Tests for select() without a name."""

    def test_single_callable_strategy_chosen_regardless_of_order(self):
        registry = StrategyRegistry()
        registry.register("off1", upper, probe=Switch(on=False))
        registry.register("off2", None)
        registry.register("length", length)
        registry.register("off3", upper, probe=Switch(on=False))

        assert registry.select() is length

    def test_first_callable_in_registration_order(self):
        registry = StrategyRegistry()
        registry.register("upper", upper)
        registry.register("length", length)

        assert registry.select() is upper

    def test_no_callable_strategy_returns_none_with_warning(self, caplog):
        registry = StrategyRegistry()
        registry.register("off", upper, probe=Switch(on=False))

        with caplog.at_level(logging.WARNING, logger="bytepeek.registry"):
            result = registry.select()

        assert result is None
        assert "No suitable" in caplog.text

    def test_empty_registry_returns_none(self):
        assert StrategyRegistry().select() is None

    def test_selection_is_sticky(self):
        late = Switch(on=False)
        registry = StrategyRegistry()
        registry.register("preferred", upper, probe=late)
        registry.register("length", length)

        assert registry.select() is length

        # The earlier strategy becoming available does not displace the active one
        late.on = True
        assert registry.select() is length

    def test_active_strategy_probed_on_every_read(self, caplog):
        switch = Switch()
        registry = StrategyRegistry()
        registry.register("tool", upper, probe=switch)
        registry.register("length", length)

        assert registry.select() is upper
        switch.on = False

        with caplog.at_level(logging.WARNING, logger="bytepeek.registry"):
            assert registry.select() is length

        assert "no longer available" in caplog.text
        assert registry.active.name == "length"

    def test_active_is_none_when_stale(self):
        switch = Switch()
        registry = StrategyRegistry()
        registry.register("tool", upper, probe=switch)
        registry.select()

        switch.on = False
        assert registry.active is None


class TestRequire:
    """Tests for require()."""

    def test_require_returns_handler(self):
        registry = StrategyRegistry()
        registry.register("upper", upper)

        assert registry.require() is upper

    def test_require_raises_when_nothing_callable(self):
        registry = StrategyRegistry()
        registry.register("off", None)

        with pytest.raises(NoStrategyAvailable) as exc_info:
            registry.require()

        assert exc_info.value.known == ["off"]
