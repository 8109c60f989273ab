"""Tests for state and transition builders."""

import pytest

from src.fsm.compiler import (
    GLOBAL_CONDITION_DEFAULT,
    LOCAL_CONDITION_DEFAULT,
    build_global_transition,
    build_local_transition,
    build_state,
    resolve_interruptible_by,
)
from src.fsm.errors import CompileError, MissingFieldError, UnknownNodeKindError
from src.fsm.program import Tier
from tests.conftest import block, chain, global_transition, make_state, text, transition


def _ref(name: str):
    return block("state_reference", fields={"STATE_NAME": name})


def _wrapped(inner=None):
    values = {"STATE": inner} if inner is not None else {}
    return block("state_reference_statement", values=values)


class TestBuildState:
    def test_handlers_compile_in_sequence(self, gen):
        node = make_state(
            "IDLE",
            on_enter=block("api_stop"),
            on_execute=chain(block("api_fire"), block("api_stop")),
        )

        state = build_state(node, gen)

        assert state.name == "IDLE"
        assert state.on_enter == "api.stop();\n"
        assert state.on_execute == "api.fire();\napi.stop();\n"
        assert state.on_exit == ""

    def test_empty_transitions(self, gen):
        state = build_state(make_state("IDLE"), gen)

        assert state.transitions == []
        assert state.interruptible_by is None

    def test_transitions_keep_chain_order(self, gen):
        node = make_state(
            "IDLE", transitions=chain(transition("A"), transition("B"), transition("C"))
        )

        state = build_state(node, gen)

        assert [t.target for t in state.transitions] == ["A", "B", "C"]
        assert all(t.tier is Tier.LOCAL for t in state.transitions)

    def test_not_a_state_raises(self, gen):
        with pytest.raises(UnknownNodeKindError):
            build_state(block("api_fire", id="f1"), gen)

    def test_missing_name_raises(self, gen):
        with pytest.raises(MissingFieldError) as exc_info:
            build_state(block("fsm_state", id="s1"), gen)

        assert exc_info.value.field == "STATE_NAME"


class TestTransitions:
    def test_local_default_condition(self, gen):
        result = build_local_transition(transition("IDLE"), gen)

        assert result.condition.text == LOCAL_CONDITION_DEFAULT == "false"
        assert result.description == ""
        assert result.tier is Tier.LOCAL

    def test_local_condition_is_compiled(self, gen):
        result = build_local_transition(transition("ATTACK", block("is_enemy_visible")), gen)
        assert result.condition.text == "(!!api.scan())"

    def test_local_transition_rejects_other_kinds(self, gen):
        node = global_transition("fsm_tactical_transition", "A", id="t1")
        with pytest.raises(UnknownNodeKindError):
            build_local_transition(node, gen)

    def test_global_default_condition(self, gen):
        node = global_transition("fsm_emergency_transition", "FLEE", "Run away")

        result = build_global_transition(node, gen, Tier.EMERGENCY)

        assert result.condition.text == GLOBAL_CONDITION_DEFAULT == "() => false"
        assert result.description == "Run away"
        assert result.tier is Tier.EMERGENCY

    def test_global_missing_description_is_empty(self, gen):
        node = block("fsm_tactical_transition", fields={"TARGET": "A"})
        assert build_global_transition(node, gen, Tier.TACTICAL).description == ""

    def test_missing_target_raises(self, gen):
        with pytest.raises(MissingFieldError):
            build_local_transition(block("fsm_transition", id="t1"), gen)


class TestInterruptibleBy:
    """Both reference shapes normalize to the same bare name."""

    def test_direct_and_wrapped_are_equivalent(self):
        direct = make_state("A", interruptible_by=_ref("EVADE"))
        wrapped = make_state("B", interruptible_by=_wrapped(_ref("EVADE")))

        assert resolve_interruptible_by(direct) == resolve_interruptible_by(wrapped) == ["EVADE"]

    def test_mixed_chain_keeps_order_and_duplicates(self):
        node = make_state(
            "A",
            interruptible_by=chain(_ref("X"), _wrapped(_ref("Y")), _wrapped(text("X"))),
        )
        assert resolve_interruptible_by(node) == ["X", "Y", "X"]

    def test_empty_chain_is_none(self):
        assert resolve_interruptible_by(make_state("A")) is None

    def test_empty_wrapper_is_empty_name(self):
        assert resolve_interruptible_by(make_state("A", interruptible_by=_wrapped())) == [""]

    def test_unknown_entry_raises(self):
        node = make_state("A", interruptible_by=block("api_fire", id="f1"))
        with pytest.raises(UnknownNodeKindError) as exc_info:
            resolve_interruptible_by(node)
        assert exc_info.value.node_id == "f1"

    def test_wrapper_with_wrong_inner_raises(self):
        node = make_state("A", interruptible_by=_wrapped(block("math_number", id="n1", fields={"NUM": 1})))
        with pytest.raises(CompileError) as exc_info:
            resolve_interruptible_by(node)
        assert exc_info.value.node_id == "n1"
