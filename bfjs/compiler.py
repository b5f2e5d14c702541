from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .codegen import DEFAULT_TAPE_LENGTH, generate
from .interpreter import LoopMode, TreeInterpreter
from .nodes import Instruction, count_instructions
from .optimizer import optimize
from .parser import parse_program

logger = logging.getLogger(__name__)

DEMO_PROGRAM = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


@dataclass
class CompileResult:
    source: str
    tree: List[Instruction]
    optimized: List[Instruction]
    javascript: str


class Compiler:
    def __init__(self, tape_length: int = DEFAULT_TAPE_LENGTH) -> None:
        self.tape_length = tape_length

    def compile(self, source: str) -> CompileResult:
        tree = parse_program(source)
        optimized = optimize(tree)
        javascript = generate(optimized, is_outermost=True, tape_length=self.tape_length)
        logger.debug(
            "Compiled %d nodes (%d after optimization) into %d characters of JavaScript",
            count_instructions(tree),
            count_instructions(optimized),
            len(javascript),
        )
        return CompileResult(source=source, tree=tree, optimized=optimized, javascript=javascript)

    def run(
        self,
        source: str,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        max_steps: Optional[int] = None,
        loop_mode: LoopMode = LoopMode.RESET,
    ) -> str:
        optimized = optimize(parse_program(source))
        interpreter = TreeInterpreter(loop_mode=loop_mode, max_steps=max_steps)
        return interpreter.run(optimized, input_stream=input_stream, output_stream=output_stream)


__all__ = ["CompileResult", "Compiler", "DEMO_PROGRAM"]
