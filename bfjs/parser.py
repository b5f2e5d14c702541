from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .nodes import ChangeCell, Input, Instruction, Loop, MovePointer, Output, Placeholder

logger = logging.getLogger(__name__)

_SIMPLE_COMMANDS = {
    "+": lambda: ChangeCell(1),
    "-": lambda: ChangeCell(-1),
    ">": lambda: MovePointer(1),
    "<": lambda: MovePointer(-1),
    ".": Output,
    ",": Input,
}


@dataclass
class _Frame:
    # Offset of this frame's text within the full source.
    base: int
    is_top_level: bool
    # Index of the opening "[" in the enclosing frame's text.
    open_index: int = 0
    instructions: List[Instruction] = field(default_factory=list)
    skip_till: int = 0
    index: int = 0


def parse(source: str, is_top_level: bool = True) -> Tuple[List[Instruction], int]:
    """Parse ``source`` into an instruction tree.

    Returns the instructions together with the number of characters a nested
    call consumed, counted so that the caller at ``[`` can skip past the
    matching ``]``. Top-level calls, and nested calls that run off the end of
    the input, report 0.

    Malformed nesting is never rejected: a stray ``]`` at top level is
    ignored, and an unterminated ``[`` reads to the end of the input. In the
    latter case the enclosing scan does not skip what the nested body read,
    so those characters are parsed again after the loop.

    Loop bodies are kept on an explicit stack, so nesting depth is not bound
    by the interpreter's recursion limit.
    """
    frames = [_Frame(base=0, is_top_level=is_top_level)]
    while True:
        frame = frames[-1]
        consumed = _scan(source, frame, frames)
        if consumed is None:
            continue
        frames.pop()
        if not frames:
            return frame.instructions, consumed
        parent = frames[-1]
        parent.skip_till = consumed + frame.open_index
        parent.instructions.append(Loop(frame.instructions))


def _scan(source: str, frame: _Frame, frames: List[_Frame]) -> Optional[int]:
    """Advance ``frame``; return its consumed count, or None after opening a loop."""
    while frame.base + frame.index < len(source):
        index = frame.index
        frame.index += 1
        if index < frame.skip_till:
            continue

        char = source[frame.base + index]
        if char == "[":
            frames.append(_Frame(base=frame.base + index + 1, is_top_level=False, open_index=index))
            return None
        if char == "]":
            if not frame.is_top_level:
                return index + 2
        elif char in _SIMPLE_COMMANDS:
            frame.instructions.append(_SIMPLE_COMMANDS[char]())
        else:
            frame.instructions.append(Placeholder())

    return 0


def parse_program(source: str) -> List[Instruction]:
    program, _ = parse(source, is_top_level=True)
    logger.debug("Parsed %d characters into %d top-level instructions", len(source), len(program))
    return program


__all__ = ["parse", "parse_program"]
