"""Editor persistence format.

The editor saves workspaces with Blockly's JSON serialization. Inputs are
not tagged as value or statement sockets in that format, so loading
consults the static catalog. ``dump_workspace`` is the inverse of
``load_workspace``; a stored tree fed back through the compiler produces
byte-identical output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from .catalog import ROOT_KIND, is_statement_socket
from .errors import WorkspaceFormatError
from .node import Node, collect_chain

LANGUAGE_VERSION = 0


@dataclass
class Workspace:
    """Top-level blocks of a saved editor workspace, in saved order."""

    blocks: list[Node] = field(default_factory=list)

    def root(self) -> Node:
        """Return the single program root block.

        Raises:
            WorkspaceFormatError: If there is no root or more than one.
        """
        roots = [b for b in self.blocks if b.kind == ROOT_KIND]
        if not roots:
            raise WorkspaceFormatError(f"Workspace has no '{ROOT_KIND}' block", kind=ROOT_KIND)
        if len(roots) > 1:
            ids = ", ".join(str(r.id) for r in roots)
            raise WorkspaceFormatError(
                f"Workspace has {len(roots)} '{ROOT_KIND}' blocks ({ids})",
                node_id=roots[1].id,
                kind=ROOT_KIND,
            )
        return roots[0]


def load_workspace(data: dict[str, Any]) -> Workspace:
    """Build a Workspace from the editor's saved JSON.

    Raises:
        WorkspaceFormatError: If the JSON does not follow the format.
    """
    if not isinstance(data, dict):
        raise WorkspaceFormatError("Workspace must be a JSON object")
    section = data.get("blocks", {})
    if not isinstance(section, dict):
        raise WorkspaceFormatError("'blocks' must be an object")
    raw_blocks = section.get("blocks", [])
    if not isinstance(raw_blocks, list):
        raise WorkspaceFormatError("'blocks.blocks' must be a list")
    return Workspace(blocks=[_load_chain(raw) for raw in raw_blocks])


def dump_workspace(workspace: Workspace) -> dict[str, Any]:
    """Serialize a Workspace back to the editor's JSON format."""
    return {
        "blocks": {
            "languageVersion": LANGUAGE_VERSION,
            "blocks": [_dump_chain(b) for b in workspace.blocks],
        }
    }


def _load_chain(raw: Any, shadow: bool = False) -> Node:
    """Load a block and every block stacked below it through ``next``.

    The ``next`` links are walked iteratively, so stack height is not
    bounded by the interpreter's recursion limit.
    """
    head = node = _load_block(raw, shadow)
    while raw.get("next"):
        target = _unwrap_connection(raw["next"], node.kind, node.id)
        if target is None:
            break
        raw, shadow = target
        node.next = _load_block(raw, shadow)
        node = node.next
    return head


def _load_block(raw: Any, shadow: bool = False) -> Node:
    if not isinstance(raw, dict) or "type" not in raw:
        raise WorkspaceFormatError(f"Block without a type: {raw!r}")

    kind = raw["type"]
    block_id = raw.get("id")
    inputs = raw.get("inputs") or {}
    if not isinstance(inputs, dict):
        raise WorkspaceFormatError(
            f"Malformed inputs on block {block_id}", node_id=block_id, kind=kind
        )

    values: dict[str, Node | None] = {}
    statements: dict[str, Node | None] = {}
    for socket, connection in inputs.items():
        target = _unwrap_connection(connection, kind, block_id)
        child = _load_chain(*target) if target is not None else None
        if is_statement_socket(kind, socket):
            statements[socket] = child
        else:
            values[socket] = child

    try:
        return Node(
            kind=kind,
            id=block_id,
            fields=dict(raw.get("fields") or {}),
            values=values,
            statements=statements,
            extra_state=raw.get("extraState"),
            shadow=shadow,
            x=raw.get("x"),
            y=raw.get("y"),
        )
    except (TypeError, ValueError, ValidationError) as e:
        raise WorkspaceFormatError(
            f"Malformed block {block_id} ({kind}): {e}", node_id=block_id, kind=str(kind)
        ) from e


def _unwrap_connection(
    connection: Any, kind: str, block_id: str | None
) -> tuple[dict[str, Any], bool] | None:
    """Return the connected block's JSON and whether it is a shadow."""
    if not isinstance(connection, dict):
        raise WorkspaceFormatError(
            f"Malformed connection on block {block_id}", node_id=block_id, kind=kind
        )
    if connection.get("block") is not None:
        return connection["block"], False
    if connection.get("shadow") is not None:
        return connection["shadow"], True
    return None


def _dump_chain(head: Node) -> dict[str, Any]:
    nodes = collect_chain(head)
    raws = [_dump_block(n) for n in nodes]
    for raw, following, following_raw in zip(raws, nodes[1:], raws[1:]):
        raw["next"] = {_connection_key(following): following_raw}
    return raws[0]


def _dump_block(node: Node) -> dict[str, Any]:
    raw: dict[str, Any] = {"type": node.kind}
    if node.id is not None:
        raw["id"] = node.id
    if node.x is not None:
        raw["x"] = node.x
    if node.y is not None:
        raw["y"] = node.y
    if node.extra_state is not None:
        raw["extraState"] = dict(node.extra_state)
    if node.fields:
        raw["fields"] = dict(node.fields)

    inputs: dict[str, Any] = {}
    for socket, child in {**node.values, **node.statements}.items():
        if child is not None:
            inputs[socket] = {_connection_key(child): _dump_chain(child)}
    if inputs:
        raw["inputs"] = inputs
    return raw


def _connection_key(child: Node) -> str:
    return "shadow" if child.shadow else "block"
