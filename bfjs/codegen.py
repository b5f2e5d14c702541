from __future__ import annotations

from typing import Iterator, List, Sequence

from .nodes import ChangeCell, Input, Instruction, Loop, MovePointer, Output

DEFAULT_TAPE_LENGTH = 128

# === JavaScript Templates ===

PRELUDE = "let d=new Uint8Array({tape_length}), p=0;"
MOVE_POINTER = "p+={delta};"
CHANGE_CELL = "d[p]+={delta};"
LOOP_OPEN = "while(d[p]!=0){"
LOOP_CLOSE = "}"
OUTPUT = "console.log(String.fromCharCode(d[p]));"
INPUT = "d[p]=prompt('Type a char').charCodeAt(0)||0;"


def generate(
    program: Sequence[Instruction],
    is_outermost: bool = True,
    tape_length: int = DEFAULT_TAPE_LENGTH,
) -> str:
    """Render ``program`` as JavaScript.

    The outermost call declares the tape ``d`` and cursor ``p``. Loops whose
    body is empty produce no text at all.
    """
    output: List[str] = []
    if is_outermost:
        output.append(PRELUDE.format(tape_length=tape_length))

    # One iterator per open loop; exhausting a nested one closes its loop.
    pending: List[Iterator[Instruction]] = [iter(program)]
    while pending:
        instruction = next(pending[-1], None)
        if instruction is None:
            pending.pop()
            if pending:
                output.append(LOOP_CLOSE)
        elif isinstance(instruction, MovePointer):
            output.append(MOVE_POINTER.format(delta=instruction.delta))
        elif isinstance(instruction, ChangeCell):
            output.append(CHANGE_CELL.format(delta=instruction.delta))
        elif isinstance(instruction, Loop):
            if instruction.body:
                output.append(LOOP_OPEN)
                pending.append(iter(instruction.body))
        elif isinstance(instruction, Output):
            output.append(OUTPUT)
        elif isinstance(instruction, Input):
            output.append(INPUT)

    return "".join(output)


__all__ = ["DEFAULT_TAPE_LENGTH", "generate"]
