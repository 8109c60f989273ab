"""Block tree to state-machine compiler.

Compilation Flow:
    Workspace JSON -> load_workspace -> Node tree -> FSMCompiler -> ProgramDescriptor

For one compile:
1. Create a fresh CompilationContext (hoisted definitions live here)
2. Compile top-level definition blocks outside the root, if any
3. Read INITIAL_STATE from the root
4. Build one StateDescriptor per node of the STATES chain, in chain order
5. Classify GLOBAL_TRANSITIONS by kind into tactical and emergency tiers
6. Drain the definition table into the descriptor
"""

from __future__ import annotations

import logging

from .catalog import DEFINITION_KINDS, ROOT_KIND
from .compiler import GLOBAL_TIERS, CodeGenerator, build_global_transition, build_state
from .context import CompilationContext
from .errors import InvalidGlobalTransitionError, UnknownNodeKindError
from .node import Node, collect_chain
from .program import ProgramDescriptor, StateDescriptor, Tier, TransitionDescriptor
from .workspace import Workspace

logger = logging.getLogger(__name__)


class FSMCompiler:
    """Compiles an ai_definition block tree to a ProgramDescriptor.

    Each call to ``compile`` owns its own CompilationContext, so one
    instance can be reused and concurrent compiles never share state.

    Example:
        compiler = FSMCompiler(root)
        program = compiler.compile()
    """

    def __init__(self, root: Node, preamble: list[Node] | None = None) -> None:
        """Initialize compiler.

        Args:
            root: The ai_definition block
            preamble: Top-level blocks outside the root whose definition
                blocks are hoisted before the root compiles
        """
        self.root = root
        self.preamble = preamble or []

    def compile(self) -> ProgramDescriptor:
        """Compile the tree.

        Returns:
            ProgramDescriptor ready for rendering or serialization

        Raises:
            CompileError: If the tree is malformed in any way
        """
        root = self.root
        if root.kind != ROOT_KIND:
            raise UnknownNodeKindError(root.id, root.kind, "program root")

        ctx = CompilationContext()
        gen = CodeGenerator(ctx)

        self._compile_preamble(gen)

        initial_state = str(root.field("INITIAL_STATE"))
        states = self._compile_states(gen)
        tactical, emergency = self._compile_global_transitions(gen)
        definitions = dict(ctx.definitions.drain_all())

        logger.info(
            f"Compiled program {root.describe()}: {len(states)} states, "
            f"{len(tactical)} tactical, {len(emergency)} emergency, "
            f"{len(definitions)} definitions"
        )
        return ProgramDescriptor(
            definitions=definitions,
            initial_state=initial_state,
            states=states,
            tactical_transitions=tactical,
            emergency_transitions=emergency,
        )

    def _compile_preamble(self, gen: CodeGenerator) -> None:
        for top in self.preamble:
            for node in collect_chain(top):
                if node.kind in DEFINITION_KINDS:
                    gen.statement(node)
                else:
                    logger.debug(f"Ignoring stray top-level block {node.describe()}")

    def _compile_states(self, gen: CodeGenerator) -> dict[str, StateDescriptor]:
        states: dict[str, StateDescriptor] = {}
        for node in collect_chain(self.root.statement_head("STATES")):
            state = build_state(node, gen)
            if state.name in states:
                # Keeps the first slot, last body wins
                logger.warning(f"Duplicate state name '{state.name}' at {node.describe()}")
            states[state.name] = state
        return states

    def _compile_global_transitions(
        self, gen: CodeGenerator
    ) -> tuple[list[TransitionDescriptor], list[TransitionDescriptor]]:
        tactical: list[TransitionDescriptor] = []
        emergency: list[TransitionDescriptor] = []
        for node in collect_chain(self.root.statement_head("GLOBAL_TRANSITIONS")):
            tier = GLOBAL_TIERS.get(node.kind)
            if tier is None:
                raise InvalidGlobalTransitionError(node.id, node.kind)
            transition = build_global_transition(node, gen, tier)
            if tier is Tier.TACTICAL:
                tactical.append(transition)
            else:
                emergency.append(transition)
        return tactical, emergency


def compile_program(root: Node) -> ProgramDescriptor:
    """Compile a root node to a ProgramDescriptor."""
    return FSMCompiler(root).compile()


def compile_workspace(workspace: Workspace) -> ProgramDescriptor:
    """Compile a saved editor workspace.

    Definition blocks left at the top level of the workspace are hoisted
    in workspace order before the root compiles.
    """
    root = workspace.root()
    preamble = [b for b in workspace.blocks if b is not root]
    return FSMCompiler(root, preamble=preamble).compile()
