"""Tests for the hoisted definition table."""

import pytest

from src.fsm.context import CompilationContext, DefinitionTable
from src.fsm.program import Order


def test_register_sanitizes_key():
    """Keys are sanitized identifiers."""
    table = DefinitionTable()

    key = table.register("low battery", "const low_battery = 15;")

    assert key == "low_battery"
    assert "low battery" in table
    assert "low_battery" in table


def test_register_overwrites_but_keeps_slot():
    """Re-registering replaces the text; first-registration order is kept."""
    table = DefinitionTable()
    table.register("A", "const A = 1;")
    table.register("B", "const B = 2;")
    table.register("A", "const A = 3;")

    assert table.drain_all() == [("A", "const A = 3;"), ("B", "const B = 2;")]


def test_reserve_does_not_overwrite():
    """Reserving an existing name keeps the registered body."""
    table = DefinitionTable()
    table.register("A", "const A = 1;")
    table.reserve("A", "const A = undefined;")

    assert table.drain_all() == [("A", "const A = 1;")]


def test_register_after_reserve_fills_slot():
    """A later definition replaces a placeholder in place."""
    table = DefinitionTable()
    table.reserve("A", "const A = undefined;")
    table.register("B", "const B = 2;")
    table.register("A", "const A = 1;")

    assert table.drain_all() == [("A", "const A = 1;"), ("B", "const B = 2;")]


def test_register_call_renders_against_sanitized_name():
    """Calls work before the definition exists."""
    table = DefinitionTable()

    call = table.register_call("my helper", "...[1, 2]")

    assert call.text == "my_helper(...[1, 2])"
    assert call.order is Order.FUNCTION_CALL
    assert len(table) == 0


def test_drain_twice_raises():
    """The table is drained exactly once per compile."""
    table = DefinitionTable()
    table.drain_all()

    with pytest.raises(RuntimeError):
        table.drain_all()


def test_contexts_do_not_share_tables():
    """Each compile gets its own table."""
    first = CompilationContext()
    second = CompilationContext()
    first.definitions.register("A", "const A = 1;")

    assert "A" not in second.definitions
    assert len(second.definitions) == 0
