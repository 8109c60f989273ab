"""JavaScript serialization of a ProgramDescriptor.

Produces the function-body text the bot runtime loads: hoisted
definitions first, then ``return { initialState, states,
tacticalTransitions, emergencyTransitions };``. Output is a pure function
of the descriptor, so equal descriptors render byte-identical text.
"""

from __future__ import annotations

from .program import ProgramDescriptor, StateDescriptor, Tier, TransitionDescriptor
from .text import indent, join_records, quote

ON_ENTER_PARAMS = "api, readOnlyMemory, context"
ON_EXECUTE_PARAMS = "api, readOnlyMemory, events, context"
ON_EXIT_PARAMS = "api, readOnlyMemory"
LOCAL_CONDITION_PARAMS = "api, readOnlyMemory, context"
GLOBAL_CONDITION_PARAMS = "api, readOnlyMemory, context, events"


def render_program(program: ProgramDescriptor) -> str:
    """Render the whole program as JavaScript function-body text."""
    entries = [
        f"initialState: {quote(program.initial_state)}",
        f"states: {_render_states(program.states)}",
        f"tacticalTransitions: {render_array([render_transition(t) for t in program.tactical_transitions])}",
        f"emergencyTransitions: {render_array([render_transition(t) for t in program.emergency_transitions])}",
    ]
    body = "return {\n" + indent(",\n".join(entries)) + "\n};"
    return "\n\n".join([*program.definitions.values(), body]) + "\n"


def render_transition(transition: TransitionDescriptor) -> str:
    """Render one transition record as an object literal."""
    params = LOCAL_CONDITION_PARAMS if transition.tier is Tier.LOCAL else GLOBAL_CONDITION_PARAMS
    condition = (
        f"function ({params}) {{\n" + indent(f"return ({transition.condition.text});") + "\n}"
    )
    entries = [f"target: {quote(transition.target)}", f"condition: {condition}"]
    if transition.tier is not Tier.LOCAL:
        entries.append(f"description: {quote(transition.description)}")
    if transition.tier is Tier.EMERGENCY:
        entries.append("isEmergency: true")
    return "{\n" + indent(",\n".join(entries)) + "\n}"


def render_state(state: StateDescriptor) -> str:
    """Render one state as an object literal."""
    if state.interruptible_by is None:
        interruptible_by = "null"
    else:
        interruptible_by = "[" + ", ".join(quote(n) for n in state.interruptible_by) + "]"
    entries = [
        f"onEnter: {_render_handler(ON_ENTER_PARAMS, state.on_enter)}",
        f"onExecute: {_render_handler(ON_EXECUTE_PARAMS, state.on_execute)}",
        f"onExit: {_render_handler(ON_EXIT_PARAMS, state.on_exit)}",
        f"interruptibleBy: {interruptible_by}",
        f"transitions: {render_array([render_transition(t) for t in state.transitions])}",
    ]
    return "{\n" + indent(",\n".join(entries)) + "\n}"


def render_array(records: list[str]) -> str:
    """Render record fragments as an array literal with no dangling comma."""
    body = join_records(records)
    if not body:
        return "[]"
    return "[\n" + indent(body) + "\n]"


def _render_states(states: dict[str, StateDescriptor]) -> str:
    if not states:
        return "{}"
    records = [f"{quote(name)}: {render_state(state)}" for name, state in states.items()]
    return "{\n" + indent(",\n".join(records)) + "\n}"


def _render_handler(params: str, body: str) -> str:
    if not body.strip():
        return f"function({params}) {{}}"
    if not body.endswith("\n"):
        body += "\n"
    return f"function({params}) {{\n" + indent(body) + "}"
