import logging

from .codegen import generate
from .compiler import CompileResult, Compiler
from .interpreter import LoopMode, StepLimitExceeded, TreeInterpreter, interpret
from .nodes import ChangeCell, Input, Instruction, Loop, MovePointer, Output, Placeholder
from .optimizer import optimize, optimize_pass
from .parser import parse, parse_program

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ChangeCell",
    "CompileResult",
    "Compiler",
    "Input",
    "Instruction",
    "Loop",
    "LoopMode",
    "MovePointer",
    "Output",
    "Placeholder",
    "StepLimitExceeded",
    "TreeInterpreter",
    "generate",
    "interpret",
    "optimize",
    "optimize_pass",
    "parse",
    "parse_program",
]
