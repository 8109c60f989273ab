"""Node model for the author's block tree.

A Node is a read-only view over one block of the visual program. The
compiler never mutates nodes. Statement sockets hold the head of a singly
linked chain (via ``next``); the chain is flattened to a list at the
boundary by ``collect_chain`` so the rest of the compiler never chases
pointers.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .errors import CompileError, CyclicChainError, MissingFieldError

FieldValue = bool | int | float | str


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class Node(BaseModel):
    """One block of the visual program.

    ``values`` and ``statements`` are both keyed by socket name.
    ``extra_state`` is the editor's mutator state (``itemCount`` on lists,
    ``elseIfCount``/``hasElse`` on ifs); empty sockets are not saved, so
    rules read slot counts from it. ``shadow``, ``x`` and ``y`` are editor
    metadata: the compiler ignores them but the workspace format
    round-trips them.
    """

    kind: str
    id: str | None = None
    fields: dict[str, FieldValue] = Field(default_factory=dict)
    values: dict[str, Node | None] = Field(default_factory=dict)
    statements: dict[str, Node | None] = Field(default_factory=dict)
    next: Node | None = None
    extra_state: dict[str, Any] | None = None
    shadow: bool = False
    x: float | None = None
    y: float | None = None

    def field(self, name: str, default: FieldValue | _Missing = MISSING) -> FieldValue:
        """Return a field value.

        Raises:
            MissingFieldError: If the field is absent and no default is given.
        """
        if name in self.fields:
            return self.fields[name]
        if isinstance(default, _Missing):
            raise MissingFieldError(self.id, self.kind, name)
        return default

    def value_child(self, socket: str) -> Node | None:
        return self.values.get(socket)

    def statement_head(self, socket: str) -> Node | None:
        return self.statements.get(socket)

    def mutation_count(self, key: str) -> int:
        """Return a slot count from the mutator state, 0 when unset.

        Raises:
            CompileError: If the saved count is not a non-negative integer.
        """
        count = (self.extra_state or {}).get(key, 0)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise CompileError(
                f"Invalid {key} {count!r} on {self.describe()}", node_id=self.id, kind=self.kind
            )
        return count

    def describe(self) -> str:
        return f"{self.kind}#{self.id}" if self.id else self.kind


def collect_chain(head: Node | None) -> list[Node]:
    """Flatten a next-chain into an ordered list.

    Raises:
        CyclicChainError: If the chain revisits a node.
    """
    chain: list[Node] = []
    seen: set[int] = set()
    node = head
    while node is not None:
        if id(node) in seen:
            raise CyclicChainError(node.id, node.kind)
        seen.add(id(node))
        chain.append(node)
        node = node.next
    return chain
