from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .nodes import ChangeCell, Instruction, Loop, MovePointer, Placeholder, wrap_delta

logger = logging.getLogger(__name__)


@dataclass
class _PassState:
    source: Sequence[Instruction]
    index: int = 0
    optimized: List[Instruction] = field(default_factory=list)
    changed: bool = False


def _advance(state: _PassState) -> Optional[List[Instruction]]:
    """Continue a pass; return a loop body that must be optimized before going on."""
    optimized = state.optimized
    while state.index < len(state.source):
        instruction = state.source[state.index]
        state.index += 1
        last = optimized[-1] if optimized else None

        if isinstance(instruction, ChangeCell):
            if instruction.delta == 0:
                continue
            if isinstance(last, ChangeCell):
                optimized[-1] = ChangeCell(wrap_delta(last.delta + instruction.delta))
                state.changed = True
            else:
                optimized.append(instruction)
        elif isinstance(instruction, MovePointer):
            if isinstance(last, MovePointer):
                optimized[-1] = MovePointer(wrap_delta(last.delta + instruction.delta))
                state.changed = True
            else:
                optimized.append(instruction)
        elif isinstance(instruction, Loop):
            # Emptiness is judged on the body as written, not as optimized.
            if instruction.body:
                return instruction.body
        elif isinstance(instruction, Placeholder):
            continue
        else:
            optimized.append(instruction)

    return None


def _optimize(program: Sequence[Instruction], repeat: bool) -> Tuple[List[Instruction], bool]:
    # Each stack entry is a pass over one sequence. Loop bodies are brought to
    # their fixed point before the enclosing pass resumes and appends them.
    stack = [_PassState(program)]
    passes = 1
    while True:
        state = stack[-1]
        body = _advance(state)
        if body is not None:
            stack.append(_PassState(body))
            continue

        outermost = len(stack) == 1
        if outermost and not repeat:
            return state.optimized, state.changed
        if state.changed:
            stack[-1] = _PassState(state.optimized)
            if outermost:
                passes += 1
            continue

        stack.pop()
        if outermost:
            logger.debug("Optimized %d instructions to %d in %d passes", len(program), len(state.optimized), passes)
            return state.optimized, False
        stack[-1].optimized.append(Loop(state.optimized))


def optimize_pass(program: Sequence[Instruction]) -> Tuple[List[Instruction], bool]:
    """Run one peephole pass over ``program``.

    Adjacent ``ChangeCell`` and ``MovePointer`` runs are fused into the last
    emitted instruction. A zero ``ChangeCell`` is only dropped when the pass
    reaches it, so a run fused to zero survives until the next pass. Zero
    ``MovePointer`` deltas are kept. Loop bodies are fully optimized.
    """
    return _optimize(program, repeat=False)


def optimize(program: Sequence[Instruction]) -> List[Instruction]:
    optimized, _ = _optimize(program, repeat=True)
    return optimized


__all__ = ["optimize", "optimize_pass"]
