"""Compiler package for block tree compilation.

Parts:
1. generator        - value sockets (with parenthesization) and statement chains
2. program_builder  - states, local/global transitions, interruption references

Both accumulate hoisted definitions into CompilationContext.
"""

from src.fsm.compiler.generator import CodeGenerator
from src.fsm.compiler.program_builder import (
    GLOBAL_CONDITION_DEFAULT,
    GLOBAL_TIERS,
    LOCAL_CONDITION_DEFAULT,
    build_global_transition,
    build_local_transition,
    build_state,
    resolve_interruptible_by,
)

__all__ = [
    "CodeGenerator",
    "GLOBAL_CONDITION_DEFAULT",
    "GLOBAL_TIERS",
    "LOCAL_CONDITION_DEFAULT",
    "build_global_transition",
    "build_local_transition",
    "build_state",
    "resolve_interruptible_by",
]
