from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Sequence, Tuple


# === Instruction Nodes ===


class Instruction:
    pass


@dataclass
class MovePointer(Instruction):
    delta: int


@dataclass
class ChangeCell(Instruction):
    delta: int


@dataclass
class Loop(Instruction):
    body: List[Instruction] = field(default_factory=list)


@dataclass
class Output(Instruction):
    pass


@dataclass
class Input(Instruction):
    pass


@dataclass
class Placeholder(Instruction):
    pass


Program = List[Instruction]


def wrap_delta(value: int) -> int:
    """Reduce ``value`` into the signed 8-bit range [-128, 127]."""
    return ((value + 128) % 256) - 128


def count_instructions(program: Sequence[Instruction]) -> int:
    total = 0
    pending: List[Sequence[Instruction]] = [program]
    while pending:
        for instruction in pending.pop():
            total += 1
            if isinstance(instruction, Loop):
                pending.append(instruction.body)
    return total


def dump_tree(program: Sequence[Instruction], indent: int = 0) -> str:
    if not program and indent == 0:
        return "(empty program)"
    lines: List[str] = []
    pending: List[Tuple[Iterator[Instruction], int]] = [(iter(program), indent)]
    while pending:
        instructions, depth = pending[-1]
        instruction = next(instructions, None)
        if instruction is None:
            pending.pop()
            continue
        pad = "  " * depth
        if isinstance(instruction, (MovePointer, ChangeCell)):
            lines.append(f"{pad}{type(instruction).__name__}({instruction.delta:+d})")
        elif isinstance(instruction, Loop):
            if not instruction.body:
                lines.append(f"{pad}Loop: (empty)")
                continue
            lines.append(f"{pad}Loop:")
            pending.append((iter(instruction.body), depth + 1))
        else:
            lines.append(f"{pad}{type(instruction).__name__}")
    return "\n".join(lines)


def tree_to_dict(program: Sequence[Instruction]) -> List[Dict[str, object]]:
    nodes: List[Dict[str, object]] = []
    pending: List[Tuple[Sequence[Instruction], List[Dict[str, object]]]] = [(program, nodes)]
    while pending:
        instructions, target = pending.pop()
        for instruction in instructions:
            node: Dict[str, object] = {"op": type(instruction).__name__}
            if isinstance(instruction, (MovePointer, ChangeCell)):
                node["delta"] = instruction.delta
            elif isinstance(instruction, Loop):
                body: List[Dict[str, object]] = []
                node["body"] = body
                pending.append((instruction.body, body))
            target.append(node)
    return nodes


__all__ = [
    "ChangeCell",
    "Input",
    "Instruction",
    "Loop",
    "MovePointer",
    "Output",
    "Placeholder",
    "Program",
    "count_instructions",
    "dump_tree",
    "tree_to_dict",
    "wrap_delta",
]
