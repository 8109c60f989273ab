"""Statement rule registry.

Maps statement block kinds to rule functions. Each rule returns a code
fragment terminated by its own newline, or an empty string when the block
only has side effects (hoisted definitions).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..emitter import render_transition
from ..node import Node, collect_chain
from ..program import EmitMode, Order
from ..text import close_dangling_scope, indent, quote, sanitize_identifier

if TYPE_CHECKING:
    from ..compiler.generator import CodeGenerator

logger = logging.getLogger(__name__)

# Type alias for statement rule functions
StatementRule = Callable[[Node, "CodeGenerator"], str]

_IF_SOCKET = re.compile(r"^(?:IF|DO)(\d+)$")

# Statement starts that cannot take an await prefix
_NOT_AWAITABLE = ("let ", "const ", "var ", "return", "if ", "if(", "{", "debugger")

FIXED_STATEMENTS: dict[str, str] = {
    "api_fire": "api.fire();\n",
    "api_stop": "api.stop();\n",
    "debug_breakpoint": "debugger;\n",
    "api_move_random": (
        "{\n"
        "  const p = api.getRandomPoint();\n"
        "  if (p) api.moveTo(p.x, p.y);\n"
        "}\n"
    ),
    "aim_at_enemy": (
        "{\n"
        "  const enemy = api.scan();\n"
        "  if (enemy) {\n"
        "    api.aimAt(enemy.x, enemy.y);\n"
        "  }\n"
        "}\n"
    ),
}


def _fixed(code: str) -> StatementRule:
    return lambda node, gen: code


# =============================================================================
# Actions
# =============================================================================


def _api_log(node: Node, gen: CodeGenerator) -> str:
    message = gen.compile_value(node, "MESSAGE", Order.ATOMIC, "''").text
    return f"api.log({message});\n"


def _api_turn(node: Node, gen: CodeGenerator) -> str:
    degrees = gen.compile_value(node, "DEGREES", Order.NONE, "0").text
    return f"api.turn({degrees});\n"


def _api_strafe(node: Node, gen: CodeGenerator) -> str:
    direction = gen.compile_value(node, "DIRECTION", Order.ATOMIC, "'left'").text
    return f"api.strafe({direction});\n"


def _api_move_to(node: Node, gen: CodeGenerator) -> str:
    # Own scope so the position is evaluated once and may be null
    position = gen.compile_value(node, "POSITION", Order.ASSIGNMENT, "{ x: 0, y: 0 }").text
    return f"{{\n  const pos = {position};\n  if (pos) api.moveTo(pos.x, pos.y);\n}}\n"


def _action_sequence(node: Node, gen: CodeGenerator) -> str:
    """Run the DO chain in order, awaiting each action.

    Handlers are synchronous, so the awaits live in an async IIFE. A
    ``fsm_return_state`` in the chain ends the sequence: its return is
    emitted after the IIFE so the handler itself returns the state.
    """
    lines = []
    exit_fragment = ""
    chain = collect_chain(node.statement_head("DO"))
    for position, step in enumerate(chain):
        if step.kind == "fsm_return_state":
            exit_fragment = gen.statement(step)
            if position + 1 < len(chain):
                logger.warning(
                    f"Skipping {len(chain) - position - 1} block(s) after return in "
                    f"{node.describe()}"
                )
            break
        fragment = gen.statement(step)
        if fragment.strip():
            lines.append(_awaited(fragment))
    if not lines:
        return exit_fragment
    return "(async () => {\n" + indent("".join(lines)) + "})();\n" + exit_fragment


def _awaited(fragment: str) -> str:
    code = fragment.strip()
    if "\n" in code or not code.endswith(";") or code.startswith(_NOT_AWAITABLE):
        return close_dangling_scope(fragment)
    return f"await {code}\n"


def _memory_set(node: Node, gen: CodeGenerator) -> str:
    key = quote(node.field("KEY"))
    value = gen.compile_value(node, "VALUE", Order.NONE, "null").text
    return f"api.updateMemory({{ [{key}]: {value} }});\n"


# =============================================================================
# Control flow and local scope
# =============================================================================


def _controls_if(node: Node, gen: CodeGenerator) -> str:
    """Chain IF/DO branches into if-else-if, plus an optional else.

    Branch and else counts come from the ``elseIfCount`` and ``hasElse``
    mutator state, since empty sockets are not saved.
    """
    indices = set(range(node.mutation_count("elseIfCount") + 1))
    for socket in (*node.values, *node.statements):
        if m := _IF_SOCKET.match(socket):
            indices.add(int(m.group(1)))

    branches = []
    for i in sorted(indices):
        cond = gen.compile_value(node, f"IF{i}", Order.NONE, "false").text
        body = gen.compile_statements(node, f"DO{i}", EmitMode.SEQUENCE)
        branches.append(f"if ({cond}) {{\n{indent(body)}}}")
    code = " else ".join(branches)

    has_else = (node.extra_state or {}).get("hasElse") is True
    if has_else or node.statement_head("ELSE") is not None:
        body = gen.compile_statements(node, "ELSE", EmitMode.SEQUENCE)
        code += f" else {{\n{indent(body)}}}"
    return code + "\n"


def _local_scope(node: Node, gen: CodeGenerator) -> str:
    """Declare VARIABLES and run BODY inside one bare block.

    The block is left unterminated; SEQUENCE mode closes it.
    """
    variables = gen.compile_statements(node, "VARIABLES", EmitMode.SEQUENCE)
    body = gen.compile_statements(node, "BODY", EmitMode.SEQUENCE)
    if not (variables or body):
        return ""
    return "{\n" + indent(variables + body) + "}\n"


def _local_declare_variable(node: Node, gen: CodeGenerator) -> str:
    name = sanitize_identifier(node.field("VAR_NAME"))
    value = gen.compile_value(node, "INITIAL_VALUE", Order.ASSIGNMENT, "0").text
    return f"let {name} = {value};\n"


def _local_set_variable(node: Node, gen: CodeGenerator) -> str:
    name = sanitize_identifier(node.field("VAR_NAME"))
    value = gen.compile_value(node, "VALUE", Order.ASSIGNMENT, "0").text
    return f"{name} = {value};\n"


def _fsm_return_state(node: Node, gen: CodeGenerator) -> str:
    return f"return {quote(node.field('STATE_NAME'))};\n"


# =============================================================================
# Hoisted definitions
# =============================================================================


def _custom_constant_define(node: Node, gen: CodeGenerator) -> str:
    name = node.field("NAME")
    value = gen.compile_value(node, "VALUE", Order.ASSIGNMENT, "undefined").text
    gen.ctx.definitions.register(name, f"const {sanitize_identifier(name)} = {value};")
    return ""


def _custom_function_define(node: Node, gen: CodeGenerator) -> str:
    name = node.field("NAME")
    params = ", ".join(
        sanitize_identifier(p) for p in str(node.field("PARAMS", "")).split(",") if p.strip()
    )
    code = str(node.field("CODE", ""))
    gen.ctx.definitions.register(
        name, f"function {sanitize_identifier(name)}({params}) {{\n{code}\n}}"
    )
    return ""


# =============================================================================
# Records (joined in COMMA_ARRAY mode)
# =============================================================================


def _fsm_transition(node: Node, gen: CodeGenerator) -> str:
    from ..compiler.program_builder import build_local_transition

    return render_transition(build_local_transition(node, gen)) + ",\n"


def _state_reference_statement(node: Node, gen: CodeGenerator) -> str:
    name = gen.compile_value(node, "STATE", Order.ATOMIC, '""').text
    return f"{name},"


# Registry mapping statement kinds to rule functions
STATEMENT_RULES: dict[str, StatementRule] = {
    **{kind: _fixed(code) for kind, code in FIXED_STATEMENTS.items()},
    "api_log": _api_log,
    "api_turn": _api_turn,
    "api_strafe": _api_strafe,
    "api_move_to": _api_move_to,
    "action_sequence": _action_sequence,
    "memory_set": _memory_set,
    "controls_if": _controls_if,
    "local_scope": _local_scope,
    "local_declare_variable": _local_declare_variable,
    "local_set_variable": _local_set_variable,
    "fsm_return_state": _fsm_return_state,
    "custom_constant_define": _custom_constant_define,
    "custom_function_define": _custom_function_define,
    "fsm_transition": _fsm_transition,
    "state_reference_statement": _state_reference_statement,
}
