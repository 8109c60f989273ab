"""Compiled program descriptors.

This module defines the structured artifact the compiler produces and the
downstream bot runtime consumes. Uses Pydantic for serialization; keys
dump in camelCase (``initialState``) to match the runtime's field names.

Per game tick the runtime evaluates emergency transitions, then tactical
transitions, then the active state's local transitions. The first truthy
condition in list order wins, so list order is part of the contract.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# =============================================================================
# Enums
# =============================================================================


class Order(float, Enum):
    """JavaScript operator precedence of an emitted expression.

    Lower binds tighter. Only used to decide parenthesization; values follow
    the Blockly JavaScript generator so block authors see familiar output.
    """

    ATOMIC = 0
    NEW = 1.1
    MEMBER = 1.2
    FUNCTION_CALL = 2
    UNARY_NEGATION = 4.3
    LOGICAL_NOT = 4.4
    TYPEOF = 4.5
    AWAIT = 4.8
    EXPONENTIATION = 5.0
    MULTIPLICATION = 5.1
    DIVISION = 5.2
    SUBTRACTION = 6.1
    ADDITION = 6.2
    RELATIONAL = 8
    EQUALITY = 9
    LOGICAL_AND = 13
    LOGICAL_OR = 14
    CONDITIONAL = 15
    ASSIGNMENT = 16
    COMMA = 18
    NONE = 99


# (outer, inner) pairs that never need parentheses even though inner >= outer.
# a.b.c, f()(), a.b(), !!x, a * b * c, a + b + c, a && b && c, a || b || c
ORDER_OVERRIDES = frozenset(
    {
        (Order.FUNCTION_CALL, Order.MEMBER),
        (Order.FUNCTION_CALL, Order.FUNCTION_CALL),
        (Order.MEMBER, Order.MEMBER),
        (Order.MEMBER, Order.FUNCTION_CALL),
        (Order.LOGICAL_NOT, Order.LOGICAL_NOT),
        (Order.MULTIPLICATION, Order.MULTIPLICATION),
        (Order.ADDITION, Order.ADDITION),
        (Order.LOGICAL_AND, Order.LOGICAL_AND),
        (Order.LOGICAL_OR, Order.LOGICAL_OR),
    }
)


def needs_parentheses(inner: Order, outer: Order) -> bool:
    """Decide whether an expression of ``inner`` order must be wrapped
    when placed in a context that binds at ``outer`` order."""
    if outer > inner:
        return False
    if outer == inner and outer in (Order.ATOMIC, Order.NONE):
        return False
    return (outer, inner) not in ORDER_OVERRIDES


class Tier(str, Enum):
    """Priority tier of a transition."""

    LOCAL = "local"
    TACTICAL = "tactical"
    EMERGENCY = "emergency"


class EmitMode(str, Enum):
    """How a statement chain is joined."""

    SEQUENCE = "sequence"
    COMMA_ARRAY = "comma_array"


# =============================================================================
# Descriptors
# =============================================================================


class _Descriptor(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompiledExpression(_Descriptor):
    """Inline expression text plus the precedence it binds at."""

    text: str
    order: Order = Order.ATOMIC


class TransitionDescriptor(_Descriptor):
    target: str
    condition: CompiledExpression
    description: str = ""
    tier: Tier = Tier.LOCAL


class StateDescriptor(_Descriptor):
    name: str
    on_enter: str = ""
    on_execute: str = ""
    on_exit: str = ""
    transitions: list[TransitionDescriptor] = Field(default_factory=list)
    interruptible_by: list[str] | None = None


class ProgramDescriptor(_Descriptor):
    """The compiler's final artifact.

    Field order is the serialization order: hoisted definitions first,
    then the state machine.
    """

    definitions: dict[str, str] = Field(default_factory=dict)
    initial_state: str
    states: dict[str, StateDescriptor] = Field(default_factory=dict)
    tactical_transitions: list[TransitionDescriptor] = Field(default_factory=list)
    emergency_transitions: list[TransitionDescriptor] = Field(default_factory=list)
