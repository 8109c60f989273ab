"""Compilation context for block tree compilation.

Accumulates hoisted user definitions during one compile. A fresh context
is created per compile; contexts are never shared between compiles.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .program import CompiledExpression, Order
from .text import sanitize_identifier


@dataclass
class DefinitionTable:
    """Hoisted user-defined constants and functions.

    Keys are sanitized identifiers. Insertion order is emission order:
    re-registering a name replaces its text but keeps its original slot.
    """

    _entries: dict[str, str] = field(default_factory=dict, init=False)
    _drained: bool = field(default=False, init=False)

    def register(self, name: str, rendered: str) -> str:
        """Store a definition, overwriting any earlier body. Returns the key."""
        key = sanitize_identifier(name)
        self._entries[key] = rendered
        return key

    def reserve(self, name: str, rendered: str) -> str:
        """Store a definition only if the name is not registered yet."""
        key = sanitize_identifier(name)
        self._entries.setdefault(key, rendered)
        return key

    def register_call(self, name: str, args: str) -> CompiledExpression:
        """Render a call against the sanitized name.

        The definition does not need to exist yet; forward references
        resolve when the table is drained.
        """
        return CompiledExpression(
            text=f"{sanitize_identifier(name)}({args})",
            order=Order.FUNCTION_CALL,
        )

    def drain_all(self) -> list[tuple[str, str]]:
        """Return all entries in first-registration order.

        Raises:
            RuntimeError: If the table was already drained.
        """
        if self._drained:
            raise RuntimeError("Definition table already drained")
        self._drained = True
        return list(self._entries.items())

    def __contains__(self, name: str) -> bool:
        return sanitize_identifier(name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class CompilationContext:
    """Per-compile accumulation state.

    Threaded through every rule. ``active`` holds the identities of nodes
    currently being compiled so nested-socket cycles are caught.
    """

    definitions: DefinitionTable = field(default_factory=DefinitionTable)
    active: set[int] = field(default_factory=set)
