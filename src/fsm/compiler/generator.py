"""Expression and statement-chain compilation.

CodeGenerator walks value sockets and statement chains, dispatching each
node to the rule registered for its kind. Rules receive the generator so
they can recurse into their own sockets; the generator owns parenthesization
(via the context order each rule passes) and cycle detection.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from ..context import CompilationContext
from ..errors import CyclicChainError, UnknownNodeKindError
from ..node import Node, collect_chain
from ..program import CompiledExpression, EmitMode, Order, needs_parentheses
from ..registries import STATEMENT_RULES, VALUE_RULES, StatementRule, ValueRule
from ..text import close_dangling_scope, join_records

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CodeGenerator:
    """Compiles value sockets and statement chains for one compile.

    Usage:
        gen = CodeGenerator(CompilationContext())
        expr = gen.compile_value(node, "CONDITION", Order.ATOMIC, "false")
        body = gen.compile_statements(node, "ON_EXECUTE", EmitMode.SEQUENCE)
    """

    def __init__(
        self,
        ctx: CompilationContext,
        value_rules: dict[str, ValueRule] | None = None,
        statement_rules: dict[str, StatementRule] | None = None,
    ) -> None:
        self.ctx = ctx
        self.value_rules = VALUE_RULES if value_rules is None else value_rules
        self.statement_rules = STATEMENT_RULES if statement_rules is None else statement_rules

    # =========================================================================
    # Values
    # =========================================================================

    def compile_value(
        self, node: Node | None, socket: str, context: Order, default: str
    ) -> CompiledExpression:
        """Compile the child in a value socket for use at ``context`` order.

        An empty socket yields ``default`` as an atomic expression. A child
        whose own order binds looser than ``context`` comes back parenthesized.
        """
        child = node.value_child(socket) if node is not None else None
        if child is None:
            return CompiledExpression(text=default, order=Order.ATOMIC)

        expr = self.expression(child)
        if needs_parentheses(expr.order, context):
            return CompiledExpression(text=f"({expr.text})", order=Order.ATOMIC)
        return expr

    def expression(self, node: Node) -> CompiledExpression:
        """Compile a value node with no context constraint.

        Raises:
            UnknownNodeKindError: If no value rule exists for the node's kind.
        """
        rule = self.value_rules.get(node.kind)
        if rule is None:
            raise UnknownNodeKindError(node.id, node.kind, "value")
        with self._visiting(node):
            return rule(node, self)

    # =========================================================================
    # Statements
    # =========================================================================

    def compile_statements(self, node: Node | None, socket: str, mode: EmitMode) -> str:
        """Compile the chain in a statement socket.

        SEQUENCE concatenates fragments in chain order, closing bare blocks
        so further statements stay composable. COMMA_ARRAY compiles each
        node in isolation and joins the non-empty results with commas.
        """
        fragments = self.statement_fragments(node, socket)
        if mode is EmitMode.COMMA_ARRAY:
            return join_records(fragments)
        return "".join(close_dangling_scope(f) for f in fragments if f)

    def statement_fragments(self, node: Node | None, socket: str) -> list[str]:
        """Compile every node of a statement chain, one fragment per node."""
        head = node.statement_head(socket) if node is not None else None
        return [self.statement(n) for n in collect_chain(head)]

    def statement(self, node: Node) -> str:
        """Compile a single statement node, ignoring its next pointer.

        Raises:
            UnknownNodeKindError: If no statement rule exists for the node's kind.
        """
        rule = self.statement_rules.get(node.kind)
        if rule is None:
            raise UnknownNodeKindError(node.id, node.kind, "statement")
        with self._visiting(node):
            return rule(node, self) or ""

    def collect_records(
        self, node: Node | None, socket: str, build: Callable[[Node, CodeGenerator], T]
    ) -> list[T]:
        """Structured counterpart of COMMA_ARRAY mode.

        Walks the chain as a sibling list and builds one record per node.
        """
        head = node.statement_head(socket) if node is not None else None
        records = []
        for item in collect_chain(head):
            with self._visiting(item):
                records.append(build(item, self))
        return records

    @contextmanager
    def _visiting(self, node: Node) -> Iterator[None]:
        key = id(node)
        if key in self.ctx.active:
            raise CyclicChainError(node.id, node.kind)
        self.ctx.active.add(key)
        try:
            yield
        finally:
            self.ctx.active.discard(key)
