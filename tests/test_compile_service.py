"""Tests for CompileService."""

import pytest

from src.fsm.errors import CompileError
from src.service import CompileResult, CompileService


@pytest.fixture
def service() -> CompileService:
    return CompileService()


def test_compile_returns_program_and_code(service, default_bot_json):
    """A saved workspace compiles to a descriptor plus rendered code."""
    result = service.compile(default_bot_json)

    assert isinstance(result, CompileResult)
    assert result.program.initial_state == "SEARCHING"
    assert result.code is not None
    assert result.code.startswith("const LOW_BATTERY = 15;")
    assert result.duration_ms >= 0


def test_compile_without_code(service, default_bot_json):
    """Rendering is skipped when not requested."""
    result = service.compile(default_bot_json, include_code=False)

    assert result.code is None
    assert len(result.program.states) == 3


def test_compile_error_propagates(service):
    """Malformed workspaces raise CompileError with the offending block."""
    workspace = {
        "blocks": {
            "blocks": [
                {
                    "type": "ai_definition",
                    "id": "root",
                    "fields": {"INITIAL_STATE": "A"},
                    "inputs": {"STATES": {"block": {"type": "fsm_state", "id": "s1"}}},
                }
            ]
        }
    }

    with pytest.raises(CompileError) as exc_info:
        service.compile(workspace)

    assert exc_info.value.node_id == "s1"
    assert exc_info.value.kind == "fsm_state"
