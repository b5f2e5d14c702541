from __future__ import annotations

import argparse
import io
import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from .compiler import DEMO_PROGRAM, Compiler
from .interpreter import LoopMode, StepLimitExceeded, TreeInterpreter
from .nodes import dump_tree


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8")


def _write_output(path: str, data: str) -> None:
    output_path = Path(path)
    output_path.write_text(data, encoding="utf-8")


def _input_stream(data: Optional[str]) -> TextIO:
    if data is None:
        return sys.stdin
    return io.StringIO(data)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compile tape-language programs to JavaScript or run them")
    parser.add_argument("source", nargs="?", help="Path to the program source file")
    parser.add_argument("-e", "--expression", help="Program text given inline instead of a file")
    parser.add_argument("--demo", action="store_true", help="Use the built-in hello world program")
    parser.add_argument("--show-ast", action="store_true", help="Print the parsed instruction tree")
    parser.add_argument("--show-optimized", action="store_true", help="Print the optimized instruction tree")
    parser.add_argument(
        "-o",
        "--emit",
        help="Destination file for the generated JavaScript (default: print to stdout)",
    )
    parser.add_argument(
        "--run",
        action="store_true",
        help="Interpret the optimized program instead of printing JavaScript",
    )
    parser.add_argument(
        "--input",
        help="Input text for the program when running, one line per read (default: stdin)",
    )
    parser.add_argument("--max-steps", type=int, default=None, help="Abort after this many steps")
    parser.add_argument(
        "--loop-mode",
        choices=[mode.value for mode in LoopMode],
        default=LoopMode.RESET.value,
        help="Loop semantics used by the interpreter (default: reset)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details to stderr")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    given = [args.source is not None, args.expression is not None, args.demo]
    if sum(given) != 1:
        print("Provide exactly one of SOURCE, --expression or --demo", file=sys.stderr)
        return 2

    if args.demo:
        source_text = DEMO_PROGRAM
    elif args.expression is not None:
        source_text = args.expression
    else:
        try:
            source_text = _read_source(args.source)
        except FileNotFoundError as exc:
            print(str(exc), file=sys.stderr)
            return 1

    result = Compiler().compile(source_text)

    if args.show_ast:
        print("AST:")
        print(dump_tree(result.tree))
    if args.show_optimized:
        print("Optimized AST:")
        print(dump_tree(result.optimized))

    if args.run:
        interpreter = TreeInterpreter(loop_mode=LoopMode(args.loop_mode), max_steps=args.max_steps)
        try:
            interpreter.run(
                result.optimized,
                input_stream=_input_stream(args.input),
                output_stream=sys.stdout,
            )
        except StepLimitExceeded as exc:
            sys.stdout.flush()
            print(f"Execution error: {exc}", file=sys.stderr)
            return 1
        return 0

    if args.emit:
        _write_output(args.emit, result.javascript)
    else:
        sys.stdout.write(result.javascript)
        if not result.javascript.endswith("\n"):
            sys.stdout.write("\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
