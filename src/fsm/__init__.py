"""Visual bot program compiler.

Converts the editor's block tree into a finite-state-machine descriptor
(ProgramDescriptor) and renders it to the JavaScript the bot runtime loads.

The compile pipeline:
  1. Saved workspace (Blockly JSON) -> load_workspace -> Node tree
  2. Node tree -> FSMCompiler -> ProgramDescriptor (structured data)
  3. ProgramDescriptor -> render_program -> JavaScript function body
"""

from .emitter import render_program
from .errors import CompileError
from .fsm_compiler import FSMCompiler, compile_program, compile_workspace
from .node import Node
from .program import ProgramDescriptor, StateDescriptor, Tier, TransitionDescriptor
from .workspace import Workspace, dump_workspace, load_workspace

__all__ = [
    "CompileError",
    "FSMCompiler",
    "Node",
    "ProgramDescriptor",
    "StateDescriptor",
    "Tier",
    "TransitionDescriptor",
    "Workspace",
    "compile_program",
    "compile_workspace",
    "dump_workspace",
    "load_workspace",
    "render_program",
]
