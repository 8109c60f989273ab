"""Shared test fixtures and helpers."""

import json
from pathlib import Path

import pytest

from src.fsm.compiler import CodeGenerator
from src.fsm.context import CompilationContext
from src.fsm.node import Node

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =============================================================================
# Block builders
# =============================================================================


def block(
    kind: str,
    id: str | None = None,
    fields: dict | None = None,
    values: dict | None = None,
    statements: dict | None = None,
    extra_state: dict | None = None,
) -> Node:
    """Build a Node without the keyword noise."""
    return Node(
        kind=kind,
        id=id,
        fields=fields or {},
        values=values or {},
        statements=statements or {},
        extra_state=extra_state,
    )


def chain(*nodes: Node) -> Node | None:
    """Link nodes through ``next`` and return the head."""
    for current, following in zip(nodes, nodes[1:]):
        current.next = following
    return nodes[0] if nodes else None


def number(value, id: str | None = None) -> Node:
    return block("math_number", id=id, fields={"NUM": value})


def boolean(value: bool) -> Node:
    return block("logic_boolean", fields={"BOOL": "TRUE" if value else "FALSE"})


def text(value: str) -> Node:
    return block("text", fields={"TEXT": value})


def transition(target: str, condition: Node | None = None, id: str | None = None) -> Node:
    values = {"CONDITION": condition} if condition is not None else {}
    return block("fsm_transition", id=id, fields={"TARGET": target}, values=values)


def global_transition(
    kind: str,
    target: str,
    description: str = "",
    condition: Node | None = None,
    id: str | None = None,
) -> Node:
    values = {"CONDITION": condition} if condition is not None else {}
    return block(
        kind, id=id, fields={"TARGET": target, "DESCRIPTION": description}, values=values
    )


def make_state(
    name: str,
    on_enter: Node | None = None,
    on_execute: Node | None = None,
    on_exit: Node | None = None,
    transitions: Node | None = None,
    interruptible_by: Node | None = None,
    id: str | None = None,
) -> Node:
    """Build an fsm_state block; each argument is the head of its chain."""
    sockets = {
        "ON_ENTER": on_enter,
        "ON_EXECUTE": on_execute,
        "ON_EXIT": on_exit,
        "TRANSITIONS": transitions,
        "INTERRUPTIBLE_BY": interruptible_by,
    }
    return block(
        "fsm_state",
        id=id or f"state_{name}",
        fields={"STATE_NAME": name},
        statements={k: v for k, v in sockets.items() if v is not None},
    )


def make_root(
    initial_state: str,
    states: Node | None = None,
    global_transitions: Node | None = None,
) -> Node:
    statements = {}
    if states is not None:
        statements["STATES"] = states
    if global_transitions is not None:
        statements["GLOBAL_TRANSITIONS"] = global_transitions
    return block(
        "ai_definition",
        id="root",
        fields={"INITIAL_STATE": initial_state},
        statements=statements,
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def gen() -> CodeGenerator:
    """A generator over a fresh compilation context."""
    return CodeGenerator(CompilationContext())


@pytest.fixture
def default_bot_json() -> dict:
    """The editor's default bot, as saved by the editor."""
    return json.loads((FIXTURES_DIR / "default_bot.json").read_text())
