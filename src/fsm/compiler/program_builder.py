"""State and transition builders for the FSM assembly stage.

Key differences between the transition kinds:
- Local transitions default to an inert ``false`` condition and carry no
  description. The runtime calls them with (api, readOnlyMemory, context).
- Global transitions default to the no-arg predicate ``() => false`` and
  carry a description. The runtime calls them with live events as well.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..catalog import (
    EMERGENCY_TRANSITION_KIND,
    LOCAL_TRANSITION_KIND,
    STATE_KIND,
    STATE_REFERENCE_KIND,
    STATE_REFERENCE_STATEMENT_KIND,
    TACTICAL_TRANSITION_KIND,
)
from ..errors import CompileError, UnknownNodeKindError
from ..node import Node, collect_chain
from ..program import EmitMode, Order, StateDescriptor, Tier, TransitionDescriptor

if TYPE_CHECKING:
    from .generator import CodeGenerator

logger = logging.getLogger(__name__)

LOCAL_CONDITION_DEFAULT = "false"
GLOBAL_CONDITION_DEFAULT = "() => false"

GLOBAL_TIERS: dict[str, Tier] = {
    TACTICAL_TRANSITION_KIND: Tier.TACTICAL,
    EMERGENCY_TRANSITION_KIND: Tier.EMERGENCY,
}


def build_state(node: Node, gen: CodeGenerator) -> StateDescriptor:
    """Compile one fsm_state block.

    Handlers compile in SEQUENCE mode; each socket is optional. TRANSITIONS
    walks as a sibling list with the local-transition rule.

    Raises:
        UnknownNodeKindError: If the node is not a state block.
    """
    if node.kind != STATE_KIND:
        raise UnknownNodeKindError(node.id, node.kind, "state")

    name = str(node.field("STATE_NAME"))
    logger.debug(f"Compiling state {name} ({node.describe()})")

    return StateDescriptor(
        name=name,
        on_enter=gen.compile_statements(node, "ON_ENTER", EmitMode.SEQUENCE),
        on_execute=gen.compile_statements(node, "ON_EXECUTE", EmitMode.SEQUENCE),
        on_exit=gen.compile_statements(node, "ON_EXIT", EmitMode.SEQUENCE),
        transitions=gen.collect_records(node, "TRANSITIONS", build_local_transition),
        interruptible_by=resolve_interruptible_by(node),
    )


def build_local_transition(node: Node, gen: CodeGenerator) -> TransitionDescriptor:
    """Compile one fsm_transition block inside a state.

    Raises:
        UnknownNodeKindError: If the node is not a local transition.
    """
    if node.kind != LOCAL_TRANSITION_KIND:
        raise UnknownNodeKindError(node.id, node.kind, "local transition")
    return TransitionDescriptor(
        target=str(node.field("TARGET")),
        condition=gen.compile_value(node, "CONDITION", Order.ATOMIC, LOCAL_CONDITION_DEFAULT),
        description="",
        tier=Tier.LOCAL,
    )


def build_global_transition(node: Node, gen: CodeGenerator, tier: Tier) -> TransitionDescriptor:
    """Compile one tactical or emergency transition block."""
    return TransitionDescriptor(
        target=str(node.field("TARGET")),
        condition=gen.compile_value(node, "CONDITION", Order.ATOMIC, GLOBAL_CONDITION_DEFAULT),
        description=str(node.field("DESCRIPTION", "")),
        tier=tier,
    )


def resolve_interruptible_by(node: Node) -> list[str] | None:
    """Resolve a state's INTERRUPTIBLE_BY chain to bare state names.

    Accepts a state_reference directly in the chain as well as the
    state_reference_statement wrapper whose STATE socket holds the name;
    both normalize to the same string. An empty chain yields None.
    Duplicates are kept.
    """
    names: list[str] = []
    for entry in collect_chain(node.statement_head("INTERRUPTIBLE_BY")):
        if entry.kind == STATE_REFERENCE_KIND:
            names.append(str(entry.field("STATE_NAME")))
        elif entry.kind == STATE_REFERENCE_STATEMENT_KIND:
            names.append(_wrapped_state_name(entry))
        else:
            raise UnknownNodeKindError(entry.id, entry.kind, "interruption reference")
    return names or None


def _wrapped_state_name(wrapper: Node) -> str:
    inner = wrapper.value_child("STATE")
    if inner is None:
        return ""
    if inner.kind == STATE_REFERENCE_KIND:
        return str(inner.field("STATE_NAME"))
    if inner.kind == "text":
        return str(inner.field("TEXT", ""))
    raise CompileError(
        f"Interruption reference {wrapper.describe()} must hold a state name, got '{inner.kind}'",
        node_id=inner.id,
        kind=inner.kind,
    )
