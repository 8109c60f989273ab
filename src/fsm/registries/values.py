"""Value rule registry.

Maps value block kinds to rule functions. Each rule returns the inline
expression text and the order it binds at; rules pass their own syntactic
position as the context when compiling child sockets, so children come
back parenthesized only when needed.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..errors import CompileError
from ..node import Node
from ..program import CompiledExpression, Order
from ..text import quote, sanitize_identifier

if TYPE_CHECKING:
    from ..compiler.generator import CodeGenerator

# Type alias for value rule functions
ValueRule = Callable[[Node, "CodeGenerator"], CompiledExpression]

_LIST_ITEM_SOCKET = re.compile(r"^ADD(\d+)$")

_COMPARE_OPS: dict[str, tuple[str, Order]] = {
    "EQ": ("==", Order.EQUALITY),
    "NEQ": ("!=", Order.EQUALITY),
    "LT": ("<", Order.RELATIONAL),
    "LTE": ("<=", Order.RELATIONAL),
    "GT": (">", Order.RELATIONAL),
    "GTE": (">=", Order.RELATIONAL),
}

_ARITHMETIC_OPS: dict[str, tuple[str, Order]] = {
    "ADD": (" + ", Order.ADDITION),
    "MINUS": (" - ", Order.SUBTRACTION),
    "MULTIPLY": (" * ", Order.MULTIPLICATION),
    "DIVIDE": (" / ", Order.DIVISION),
}

_ENEMY_DISTANCE = """(function() {
  const enemy = api.scan();
  if (enemy) {
    const dx = context.bot.x - enemy.x;
    const dy = context.bot.y - enemy.y;
    return Math.sqrt(dx * dx + dy * dy);
  }
  return -1;
})()"""

_TURRET_ALIGNED = """(function() {
  const enemy = api.scan();
  if (enemy) {
    const dx = enemy.x - context.bot.x;
    const dy = enemy.y - context.bot.y;
    const targetAngle = Math.atan2(dy, dx) * 180 / Math.PI;
    const turretAngle = (context.bot.turretAngle % 360 + 360) % 360;
    const normalizedTarget = (targetAngle % 360 + 360) % 360;
    const diff = Math.abs(turretAngle - normalizedTarget);
    return Math.min(diff, 360 - diff) < 1;
  }
  return true;
})()"""

# Blocks whose output never depends on fields or sockets
FIXED_EXPRESSIONS: dict[str, tuple[str, Order]] = {
    "context_battery_percent": ("context.batteryPercent", Order.MEMBER),
    "context_is_moving": ("context.bot.isMoving", Order.MEMBER),
    "context_can_fire": ("context.bot.canFire", Order.MEMBER),
    "get_arena_width": ("api.getArenaDimensions().width", Order.MEMBER),
    "get_arena_height": ("api.getArenaDimensions().height", Order.MEMBER),
    "get_enemy_angle": ("(api.scan() || { angle: 0 }).angle", Order.MEMBER),
    "get_enemy_position": ("api.scan()", Order.FUNCTION_CALL),
    "get_enemy_distance": (_ENEMY_DISTANCE, Order.FUNCTION_CALL),
    "is_enemy_visible": ("!!api.scan()", Order.LOGICAL_NOT),
    "is_turret_aligned": (_TURRET_ALIGNED, Order.FUNCTION_CALL),
    "is_projectile_incoming": ("api.scanForIncomingProjectiles().length > 0", Order.RELATIONAL),
    "was_hit": ("api.getEvents().some(e => e.type === 'HIT_BY_PROJECTILE')", Order.FUNCTION_CALL),
    "is_wall_collision": (
        "api.getEvents().some(e => e.type === 'COLLISION_WITH_WALL')",
        Order.FUNCTION_CALL,
    ),
    "api_is_queue_empty": ("api.isQueueEmpty()", Order.FUNCTION_CALL),
    "api_is_obstacle_ahead": ("api.isObstacleAhead()", Order.FUNCTION_CALL),
    "api_get_state": ("api.getState()", Order.FUNCTION_CALL),
    "api_get_random_point": ("api.getRandomPoint()", Order.FUNCTION_CALL),
    "api_scan_obstacles": ("api.scanObstacles()", Order.FUNCTION_CALL),
    "api_get_events": ("api.getEvents()", Order.FUNCTION_CALL),
    "logic_null": ("null", Order.ATOMIC),
}


def _fixed(text: str, order: Order) -> ValueRule:
    expr = CompiledExpression(text=text, order=order)
    return lambda node, gen: expr


# =============================================================================
# Literals
# =============================================================================


def _logic_boolean(node: Node, gen: CodeGenerator) -> CompiledExpression:
    value = str(node.field("BOOL", "TRUE")).upper() == "TRUE"
    return CompiledExpression(text="true" if value else "false", order=Order.ATOMIC)


def _math_number(node: Node, gen: CodeGenerator) -> CompiledExpression:
    raw = node.field("NUM", 0)
    try:
        number = float(raw)
    except (TypeError, ValueError) as e:
        raise CompileError(f"Invalid number '{raw}'", node_id=node.id, kind=node.kind) from e

    if math.isnan(number):
        return CompiledExpression(text="NaN", order=Order.ATOMIC)
    if math.isinf(number):
        text = "Infinity" if number > 0 else "-Infinity"
    elif number.is_integer():
        text = str(int(number))
    else:
        text = repr(number)
    order = Order.UNARY_NEGATION if number < 0 else Order.ATOMIC
    return CompiledExpression(text=text, order=order)


def _text(node: Node, gen: CodeGenerator) -> CompiledExpression:
    return CompiledExpression(text=quote(node.field("TEXT", "")), order=Order.ATOMIC)


# =============================================================================
# Operators
# =============================================================================


def _logic_compare(node: Node, gen: CodeGenerator) -> CompiledExpression:
    op_name = str(node.field("OP", "EQ"))
    if op_name not in _COMPARE_OPS:
        raise CompileError(f"Unknown comparison '{op_name}'", node_id=node.id, kind=node.kind)
    op, order = _COMPARE_OPS[op_name]
    left = gen.compile_value(node, "A", order, "0").text
    right = gen.compile_value(node, "B", order, "0").text
    return CompiledExpression(text=f"{left} {op} {right}", order=order)


def _logic_operation(node: Node, gen: CodeGenerator) -> CompiledExpression:
    op_name = str(node.field("OP", "AND"))
    if op_name == "AND":
        op, order = "&&", Order.LOGICAL_AND
    elif op_name == "OR":
        op, order = "||", Order.LOGICAL_OR
    else:
        raise CompileError(f"Unknown logic operator '{op_name}'", node_id=node.id, kind=node.kind)

    # A single missing operand takes the identity of the operator
    if node.value_child("A") is None and node.value_child("B") is None:
        default = "false"
    else:
        default = "true" if op == "&&" else "false"
    left = gen.compile_value(node, "A", order, default).text
    right = gen.compile_value(node, "B", order, default).text
    return CompiledExpression(text=f"{left} {op} {right}", order=order)


def _logic_negate(node: Node, gen: CodeGenerator) -> CompiledExpression:
    operand = gen.compile_value(node, "BOOL", Order.LOGICAL_NOT, "true").text
    return CompiledExpression(text=f"!{operand}", order=Order.LOGICAL_NOT)


def _logic_ternary(node: Node, gen: CodeGenerator) -> CompiledExpression:
    cond = gen.compile_value(node, "IF", Order.CONDITIONAL, "false").text
    then = gen.compile_value(node, "THEN", Order.CONDITIONAL, "null").text
    other = gen.compile_value(node, "ELSE", Order.CONDITIONAL, "null").text
    return CompiledExpression(text=f"{cond} ? {then} : {other}", order=Order.CONDITIONAL)


def _math_arithmetic(node: Node, gen: CodeGenerator) -> CompiledExpression:
    op_name = str(node.field("OP", "ADD"))
    if op_name == "POWER":
        # JavaScript rejects a unary operand directly before **
        base = gen.compile_value(node, "A", Order.COMMA, "0").text
        exponent = gen.compile_value(node, "B", Order.COMMA, "0").text
        return CompiledExpression(
            text=f"Math.pow({base}, {exponent})", order=Order.FUNCTION_CALL
        )
    if op_name not in _ARITHMETIC_OPS:
        raise CompileError(f"Unknown arithmetic '{op_name}'", node_id=node.id, kind=node.kind)
    op, order = _ARITHMETIC_OPS[op_name]
    left = gen.compile_value(node, "A", order, "0").text
    right = gen.compile_value(node, "B", order, "0").text
    return CompiledExpression(text=f"{left}{op}{right}", order=order)


def _lists_create_with(node: Node, gen: CodeGenerator) -> CompiledExpression:
    """Build an array literal with one element per ADDn slot.

    Empty slots are absent from saved JSON, so the slot count comes from
    the ``itemCount`` mutator state; each empty slot renders ``null``.
    """
    present = [
        int(m.group(1)) for socket in node.values if (m := _LIST_ITEM_SOCKET.match(socket))
    ]
    count = max([node.mutation_count("itemCount"), *(i + 1 for i in present)])
    items = [gen.compile_value(node, f"ADD{i}", Order.COMMA, "null").text for i in range(count)]
    return CompiledExpression(text=f"[{', '.join(items)}]", order=Order.ATOMIC)


# =============================================================================
# Game, objects and memory
# =============================================================================


def _game_constant(node: Node, gen: CodeGenerator) -> CompiledExpression:
    name = sanitize_identifier(node.field("CONSTANT"))
    return CompiledExpression(text=f"context.constants.{name}", order=Order.MEMBER)


def _position_create(node: Node, gen: CodeGenerator) -> CompiledExpression:
    x = gen.compile_value(node, "X", Order.NONE, "0").text
    y = gen.compile_value(node, "Y", Order.NONE, "0").text
    return CompiledExpression(text=f"{{ x: {x}, y: {y} }}", order=Order.ATOMIC)


def _position_get_coordinate(node: Node, gen: CodeGenerator) -> CompiledExpression:
    coordinate = str(node.field("COORDINATE", "X")).lower()
    if coordinate not in ("x", "y"):
        raise CompileError(
            f"Unknown coordinate '{coordinate}'", node_id=node.id, kind=node.kind
        )
    position = gen.compile_value(node, "POSITION", Order.MEMBER, "{ x: 0, y: 0 }").text
    return CompiledExpression(text=f"{position}.{coordinate}", order=Order.MEMBER)


def _object_get_property(node: Node, gen: CodeGenerator) -> CompiledExpression:
    prop = quote(node.field("PROPERTY"))
    obj = gen.compile_value(node, "OBJECT", Order.MEMBER, "{}").text
    return CompiledExpression(text=f"{obj}[{prop}]", order=Order.MEMBER)


def _memory_get(node: Node, gen: CodeGenerator) -> CompiledExpression:
    key = quote(node.field("KEY"))
    return CompiledExpression(text=f"(api.getMemory() || {{}})[{key}]", order=Order.MEMBER)


def _local_get_variable(node: Node, gen: CodeGenerator) -> CompiledExpression:
    return CompiledExpression(
        text=sanitize_identifier(node.field("VAR_NAME")), order=Order.ATOMIC
    )


def _state_reference(node: Node, gen: CodeGenerator) -> CompiledExpression:
    return CompiledExpression(text=quote(node.field("STATE_NAME")), order=Order.ATOMIC)


# =============================================================================
# API calls with arguments
# =============================================================================


def _api_is_position_valid(node: Node, gen: CodeGenerator) -> CompiledExpression:
    position = gen.compile_value(node, "POSITION", Order.ATOMIC, "null").text
    return CompiledExpression(text=f"api.isPositionValid({position})", order=Order.FUNCTION_CALL)


def _api_is_line_of_sight_clear(node: Node, gen: CodeGenerator) -> CompiledExpression:
    position = gen.compile_value(node, "POSITION", Order.ATOMIC, "null").text
    return CompiledExpression(
        text=f"api.isLineOfSightClear({position})", order=Order.FUNCTION_CALL
    )


def _api_get_orbiting_position(node: Node, gen: CodeGenerator) -> CompiledExpression:
    target = gen.compile_value(node, "TARGET_POINT", Order.ATOMIC, "null").text
    distance = gen.compile_value(node, "DISTANCE", Order.ATOMIC, "150").text
    direction = gen.compile_value(node, "DIRECTION", Order.ATOMIC, quote("random")).text
    return CompiledExpression(
        text=f"api.getOrbitingPosition({target}, {distance}, {direction})",
        order=Order.FUNCTION_CALL,
    )


def _actions_move_to_and_check(node: Node, gen: CodeGenerator) -> CompiledExpression:
    # Bind the position once so it is evaluated a single time
    position = gen.compile_value(node, "POSITION", Order.NONE, "null").text
    return CompiledExpression(
        text=f"((pos) => pos ? (api.moveTo(pos.x, pos.y) !== null) : false)({position})",
        order=Order.FUNCTION_CALL,
    )


# =============================================================================
# User definitions
# =============================================================================


def _custom_constant_get(node: Node, gen: CodeGenerator) -> CompiledExpression:
    name = node.field("NAME")
    identifier = sanitize_identifier(name)
    gen.ctx.definitions.reserve(name, f"const {identifier} = undefined;")
    return CompiledExpression(text=identifier, order=Order.ATOMIC)


def _custom_function_call(node: Node, gen: CodeGenerator) -> CompiledExpression:
    args = gen.compile_value(node, "ARGS", Order.ATOMIC, "[]").text
    return gen.ctx.definitions.register_call(node.field("NAME"), f"...{args}")


# Registry mapping value kinds to rule functions
VALUE_RULES: dict[str, ValueRule] = {
    **{kind: _fixed(text, order) for kind, (text, order) in FIXED_EXPRESSIONS.items()},
    "logic_boolean": _logic_boolean,
    "math_number": _math_number,
    "text": _text,
    "logic_compare": _logic_compare,
    "logic_operation": _logic_operation,
    "logic_negate": _logic_negate,
    "logic_ternary": _logic_ternary,
    "math_arithmetic": _math_arithmetic,
    "lists_create_with": _lists_create_with,
    "game_constant": _game_constant,
    "position_create": _position_create,
    "position_get_coordinate": _position_get_coordinate,
    "object_get_property": _object_get_property,
    "memory_get": _memory_get,
    "local_get_variable": _local_get_variable,
    "state_reference": _state_reference,
    "api_is_position_valid": _api_is_position_valid,
    "api_is_line_of_sight_clear": _api_is_line_of_sight_clear,
    "api_get_orbiting_position": _api_get_orbiting_position,
    "actions_move_to_and_check": _actions_move_to_and_check,
    "custom_constant_get": _custom_constant_get,
    "custom_function_call": _custom_function_call,
}
