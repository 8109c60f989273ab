"""Static block schema.

The editor's block catalog owns which kinds exist; the compiler only needs
to know which sockets of a kind hold statement chains. Everything not
listed here is a value socket.
"""

from __future__ import annotations

import re

ROOT_KIND = "ai_definition"
STATE_KIND = "fsm_state"
LOCAL_TRANSITION_KIND = "fsm_transition"
TACTICAL_TRANSITION_KIND = "fsm_tactical_transition"
EMERGENCY_TRANSITION_KIND = "fsm_emergency_transition"
STATE_REFERENCE_KIND = "state_reference"
STATE_REFERENCE_STATEMENT_KIND = "state_reference_statement"

# Definition blocks may sit at the top level of a workspace, outside the root
DEFINITION_KINDS = frozenset({"custom_function_define", "custom_constant_define"})

STATEMENT_SOCKETS: dict[str, frozenset[str]] = {
    ROOT_KIND: frozenset({"GLOBAL_TRANSITIONS", "STATES"}),
    STATE_KIND: frozenset({"ON_ENTER", "ON_EXECUTE", "ON_EXIT", "TRANSITIONS", "INTERRUPTIBLE_BY"}),
    "action_sequence": frozenset({"DO"}),
    "local_scope": frozenset({"VARIABLES", "BODY"}),
}

# Kinds whose statement sockets are numbered by the editor's mutator
STATEMENT_SOCKET_PATTERNS: dict[str, re.Pattern[str]] = {
    "controls_if": re.compile(r"^(DO\d+|ELSE)$"),
}


def is_statement_socket(kind: str, socket: str) -> bool:
    """Return True if ``socket`` on ``kind`` holds a statement chain."""
    if socket in STATEMENT_SOCKETS.get(kind, frozenset()):
        return True
    pattern = STATEMENT_SOCKET_PATTERNS.get(kind)
    return bool(pattern and pattern.match(socket))
