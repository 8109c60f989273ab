"""Tests for CodeGenerator: value sockets and statement chains."""

import pytest

from src.fsm.compiler import CodeGenerator
from src.fsm.context import CompilationContext
from src.fsm.errors import CyclicChainError, UnknownNodeKindError
from src.fsm.program import CompiledExpression, EmitMode, Order
from tests.conftest import block, boolean, chain, number


def _arith(op: str, a, b):
    return block("math_arithmetic", fields={"OP": op}, values={"A": a, "B": b})


def _state_ref_statement(name: str):
    inner = block("state_reference", fields={"STATE_NAME": name})
    return block("state_reference_statement", values={"STATE": inner})


# =============================================================================
# Value sockets
# =============================================================================


class TestCompileValue:
    """Value sockets with defaults and parenthesization."""

    def test_empty_socket_yields_default(self, gen):
        node = block("logic_compare")
        result = gen.compile_value(node, "A", Order.RELATIONAL, "0")

        assert result.text == "0"
        assert result.order is Order.ATOMIC

    def test_none_parent_yields_default(self, gen):
        assert gen.compile_value(None, "A", Order.ATOMIC, "null").text == "null"

    def test_looser_child_is_parenthesized(self, gen):
        node = _arith("MULTIPLY", _arith("ADD", number(1), number(2)), number(3))

        assert gen.expression(node).text == "(1 + 2) * 3"

    def test_tighter_child_is_not_parenthesized(self, gen):
        node = _arith("ADD", _arith("MULTIPLY", number(1), number(2)), number(3))

        assert gen.expression(node).text == "1 * 2 + 3"

    def test_parenthesized_child_becomes_atomic(self, gen):
        parent = block("logic_negate", values={"BOOL": _arith("ADD", number(1), number(2))})
        result = gen.compile_value(parent, "BOOL", Order.LOGICAL_NOT, "true")

        assert result.text == "(1 + 2)"
        assert result.order is Order.ATOMIC

    def test_unknown_value_kind_raises(self, gen):
        node = block("not_a_block", id="x1")

        with pytest.raises(UnknownNodeKindError) as exc_info:
            gen.expression(node)

        assert exc_info.value.node_id == "x1"
        assert exc_info.value.kind == "not_a_block"

    def test_nested_cycle_raises(self, gen):
        node = block("logic_negate", id="loop")
        node.values["BOOL"] = node

        with pytest.raises(CyclicChainError) as exc_info:
            gen.expression(node)

        assert exc_info.value.node_id == "loop"

    def test_shared_subtree_is_not_a_cycle(self, gen):
        shared = boolean(True)
        node = block("logic_operation", fields={"OP": "AND"}, values={"A": shared, "B": shared})

        assert gen.expression(node).text == "true && true"
        assert gen.ctx.active == set()

    def test_custom_rule_table(self):
        rules = {"answer": lambda node, gen: CompiledExpression(text="42")}
        gen = CodeGenerator(CompilationContext(), value_rules=rules, statement_rules={})

        assert gen.expression(block("answer")).text == "42"
        with pytest.raises(UnknownNodeKindError):
            gen.statement(block("api_fire"))


# =============================================================================
# Statement chains
# =============================================================================


class TestSequenceMode:
    """SEQUENCE concatenates fragments in chain order."""

    def test_concatenates_in_order(self, gen):
        node = block("action_sequence", statements={"DO": chain(block("api_fire"), block("api_stop"))})

        result = gen.compile_statements(node, "DO", EmitMode.SEQUENCE)

        assert result == "api.fire();\napi.stop();\n"

    def test_empty_socket_yields_empty_string(self, gen):
        assert gen.compile_statements(block("fsm_state"), "ON_ENTER", EmitMode.SEQUENCE) == ""

    def test_bare_block_is_closed(self, gen):
        node = block(
            "action_sequence", statements={"DO": chain(block("api_move_random"), block("api_fire"))}
        )

        result = gen.compile_statements(node, "DO", EmitMode.SEQUENCE)

        assert result == (
            "{\n"
            "  const p = api.getRandomPoint();\n"
            "  if (p) api.moveTo(p.x, p.y);\n"
            "};\n"
            "api.fire();\n"
        )

    def test_rule_returning_none_contributes_nothing(self):
        rules = {"noop": lambda node, gen: None, "api_fire": lambda node, gen: "api.fire();\n"}
        gen = CodeGenerator(CompilationContext(), value_rules={}, statement_rules=rules)
        node = block("action_sequence", statements={"DO": chain(block("noop"), block("api_fire"))})

        assert gen.compile_statements(node, "DO", EmitMode.SEQUENCE) == "api.fire();\n"

    def test_unknown_statement_kind_raises(self, gen):
        node = block("action_sequence", statements={"DO": block("mystery", id="m1")})

        with pytest.raises(UnknownNodeKindError) as exc_info:
            gen.compile_statements(node, "DO", EmitMode.SEQUENCE)

        assert exc_info.value.node_id == "m1"

    def test_chain_cycle_raises(self, gen):
        a, b = block("api_fire", id="a"), block("api_stop", id="b")
        chain(a, b)
        b.next = a
        node = block("action_sequence", statements={"DO": a})

        with pytest.raises(CyclicChainError):
            gen.compile_statements(node, "DO", EmitMode.SEQUENCE)

    def test_socket_holding_ancestor_raises(self, gen):
        node = block("action_sequence", id="outer")
        node.statements["DO"] = node

        with pytest.raises(CyclicChainError):
            gen.statement(node)


class TestCommaArrayMode:
    """COMMA_ARRAY joins records with exactly one comma between them."""

    def test_three_records(self, gen):
        refs = chain(_state_ref_statement("A"), _state_ref_statement("B"), _state_ref_statement("C"))
        node = block("fsm_state", statements={"INTERRUPTIBLE_BY": refs})

        result = gen.compile_statements(node, "INTERRUPTIBLE_BY", EmitMode.COMMA_ARRAY)

        assert result == '"A",\n"B",\n"C"'
        assert result.count(",") == 2
        assert not result.rstrip().endswith(",")

    def test_single_record_has_no_comma(self, gen):
        node = block("fsm_state", statements={"INTERRUPTIBLE_BY": _state_ref_statement("A")})

        assert gen.compile_statements(node, "INTERRUPTIBLE_BY", EmitMode.COMMA_ARRAY) == '"A"'

    def test_empty_chain(self, gen):
        assert gen.compile_statements(block("fsm_state"), "TRANSITIONS", EmitMode.COMMA_ARRAY) == ""


class TestCollectRecords:
    """Structured counterpart of COMMA_ARRAY mode."""

    def test_builds_one_record_per_node(self, gen):
        refs = chain(block("api_fire", id="a"), block("api_stop", id="b"))
        node = block("action_sequence", statements={"DO": refs})

        result = gen.collect_records(node, "DO", lambda n, g: n.id)

        assert result == ["a", "b"]
        assert gen.ctx.active == set()
