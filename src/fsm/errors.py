"""Compile error taxonomy.

Every fatal condition aborts the whole compile and surfaces to the caller
of compile_program. Errors carry the identity of the offending node so the
editor can highlight it.
"""

from __future__ import annotations


class CompileError(Exception):
    """Raised when a block tree cannot be compiled."""

    def __init__(self, message: str, node_id: str | None = None, kind: str | None = None):
        super().__init__(message)
        self.message = message
        self.node_id = node_id
        self.kind = kind

    def to_dict(self) -> dict[str, str | None]:
        return {"message": self.message, "node_id": self.node_id, "kind": self.kind}


class UnknownNodeKindError(CompileError):
    """A node kind has no rule in the dispatch table it was looked up in."""

    def __init__(self, node_id: str | None, kind: str, role: str):
        super().__init__(
            f"No {role} rule for block kind '{kind}' (block {node_id})",
            node_id=node_id,
            kind=kind,
        )


class CyclicChainError(CompileError):
    """A next-chain or a nested socket leads back to a node already visited."""

    def __init__(self, node_id: str | None, kind: str | None):
        super().__init__(
            f"Cycle detected at block {node_id} ({kind})",
            node_id=node_id,
            kind=kind,
        )


class MissingFieldError(CompileError):
    """A required field is absent from a node."""

    def __init__(self, node_id: str | None, kind: str, field: str):
        super().__init__(
            f"Block {node_id} ({kind}) is missing required field '{field}'",
            node_id=node_id,
            kind=kind,
        )
        self.field = field


class InvalidGlobalTransitionError(CompileError):
    """A node in GLOBAL_TRANSITIONS is neither tactical nor emergency."""

    def __init__(self, node_id: str | None, kind: str):
        super().__init__(
            f"Block {node_id} ({kind}) is not a tactical or emergency transition",
            node_id=node_id,
            kind=kind,
        )


class WorkspaceFormatError(CompileError):
    """The saved workspace does not match the editor serialization format."""

    pass
