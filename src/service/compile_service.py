"""Compile service - turns a saved editor workspace into a runnable bot program.

This service:
1. Loads the workspace JSON into a Node tree
2. Compiles the tree to a ProgramDescriptor
3. Renders the descriptor to JavaScript (optional)

Data Flow:
    Editor: saves workspace -> Blockly JSON
    Execution: load_workspace() -> Workspace
    Execution: compile_workspace(workspace) -> ProgramDescriptor
    Execution: render_program(program) -> JavaScript function body
    Runtime: new Function(code) -> state machine
"""

import logging
import time
from dataclasses import dataclass
from typing import Any

from src.fsm import (
    ProgramDescriptor,
    compile_workspace,
    load_workspace,
    render_program,
)

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Result of compiling one workspace."""

    program: ProgramDescriptor
    code: str | None = None
    duration_ms: float = 0.0


class CompileService:
    """Compiles saved workspaces. Stateless; safe to share between requests."""

    def compile(self, workspace_json: dict[str, Any], include_code: bool = True) -> CompileResult:
        """Compile a saved workspace.

        Args:
            workspace_json: The editor's saved workspace
            include_code: Also render the JavaScript text

        Returns:
            CompileResult with the descriptor and, if requested, the code

        Raises:
            CompileError: If the workspace cannot be compiled
        """
        started = time.perf_counter()

        workspace = load_workspace(workspace_json)
        logger.debug(f"Loaded workspace with {len(workspace.blocks)} top-level blocks")

        program = compile_workspace(workspace)
        code = render_program(program) if include_code else None

        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Compiled workspace (initial state {program.initial_state!r}) in {duration_ms:.1f}ms"
        )
        return CompileResult(program=program, code=code, duration_ms=duration_ms)
