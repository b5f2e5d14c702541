from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, TextIO

from .nodes import ChangeCell, Input, Instruction, Loop, MovePointer, Output

logger = logging.getLogger(__name__)


class StepLimitExceeded(RuntimeError):
    """Raised when execution exceeds the configured step budget."""


class LoopMode(str, Enum):
    # Loop bodies start at cell 0 and their final cursor is discarded.
    RESET = "reset"
    # Cursor persists across loop boundaries and the cell is tested before
    # every iteration.
    CONVENTIONAL = "conventional"


@dataclass
class TreeInterpreter:
    tape_length: int = 256
    cell_max: int = 255
    loop_mode: LoopMode = LoopMode.RESET
    max_steps: Optional[int] = None

    tape: List[int] = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    output_buffer: List[str] = field(init=False, repr=False)
    steps: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.loop_mode = LoopMode(self.loop_mode)
        self._input: Optional[TextIO] = None
        self._output: Optional[TextIO] = None
        self._limit: Optional[int] = self.max_steps
        self.reset()

    def reset(self) -> None:
        self.tape = [0] * self.tape_length
        self.pointer = 0
        self.output_buffer = []
        self.steps = 0

    def run(
        self,
        program: Sequence[Instruction],
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        max_steps: Optional[int] = None,
    ) -> str:
        """Execute ``program`` from a zeroed tape and return its output.

        ``Input`` consumes one line of ``input_stream`` (standard input when
        omitted). Printed characters are collected and, when given, also
        written to ``output_stream`` as they are produced.
        """
        self.reset()
        self._input = input_stream
        self._output = output_stream
        self._limit = max_steps if max_steps is not None else self.max_steps
        try:
            if self.loop_mode is LoopMode.CONVENTIONAL:
                self.pointer = self._execute_conventional(program, 0)
            else:
                self.pointer = self._execute(program, 0, in_loop=False)
        finally:
            self._input = None
            self._output = None
        logger.debug("Executed %d steps, produced %d characters", self.steps, len(self.output_buffer))
        return "".join(self.output_buffer)

    def _execute(self, program: Sequence[Instruction], pointer: int, in_loop: bool) -> int:
        while True:
            for instruction in program:
                if isinstance(instruction, Loop):
                    self._tick()
                    self._execute(instruction.body, 0, in_loop=True)
                else:
                    pointer = self._execute_instruction(instruction, pointer)
            if not in_loop or self.tape[pointer] == 0:
                return pointer
            # The whole sequence repeats, again starting from cell 0.
            self._tick()
            pointer = 0

    def _execute_conventional(self, program: Sequence[Instruction], pointer: int) -> int:
        for instruction in program:
            if isinstance(instruction, Loop):
                self._tick()
                while self.tape[pointer] != 0:
                    pointer = self._execute_conventional(instruction.body, pointer)
                    self._tick()
            else:
                pointer = self._execute_instruction(instruction, pointer)
        return pointer

    def _execute_instruction(self, instruction: Instruction, pointer: int) -> int:
        self._tick()
        if isinstance(instruction, MovePointer):
            pointer = (pointer + instruction.delta) % self.tape_length
        elif isinstance(instruction, ChangeCell):
            self.tape[pointer] = (self.tape[pointer] + instruction.delta) % (self.cell_max + 1)
        elif isinstance(instruction, Output):
            self._emit(chr(self.tape[pointer]))
        elif isinstance(instruction, Input):
            self.tape[pointer] = self._read_cell()
        return pointer

    def _tick(self) -> None:
        if self._limit is not None and self.steps >= self._limit:
            raise StepLimitExceeded("Program exceeded allowed step count")
        self.steps += 1

    def _emit(self, char: str) -> None:
        self.output_buffer.append(char)
        if self._output is not None:
            self._output.write(char)
            self._output.flush()

    def _read_cell(self) -> int:
        stream = self._input if self._input is not None else sys.stdin
        line = stream.readline().rstrip("\r\n")
        if not line:
            return 0
        return ord(line[0]) % (self.cell_max + 1)


def interpret(
    program: Sequence[Instruction],
    loop_mode: LoopMode = LoopMode.RESET,
    max_steps: Optional[int] = None,
) -> None:
    """Run ``program`` against standard input and output.

    In reset mode a loop whose body ends on a nonzero cell repeats in place
    rather than through deeper calls, so a loop that never clears its cell
    (for example ``Loop([])`` entered with a nonzero cell 0) runs forever
    unless ``max_steps`` is given, in which case ``StepLimitExceeded`` is
    raised once the budget is spent.
    """
    interpreter = TreeInterpreter(loop_mode=loop_mode, max_steps=max_steps)
    interpreter.run(program, input_stream=sys.stdin, output_stream=sys.stdout)


__all__ = [
    "LoopMode",
    "StepLimitExceeded",
    "TreeInterpreter",
    "interpret",
]
