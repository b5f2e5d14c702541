from contextlib import redirect_stdout
import io
import unittest

from bfjs import (
    ChangeCell,
    Input,
    Loop,
    LoopMode,
    MovePointer,
    Output,
    StepLimitExceeded,
    TreeInterpreter,
    interpret,
    optimize,
    parse_program,
)
from bfjs.compiler import DEMO_PROGRAM


def _compile(source: str):
    return optimize(parse_program(source))


class TreeInterpreterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.interpreter = TreeInterpreter()

    def test_simple_output(self) -> None:
        output = self.interpreter.run(_compile("++."))
        self.assertEqual(output, chr(2))

    def test_decrement_wraps_to_255(self) -> None:
        self.interpreter.run([ChangeCell(-1)])
        self.assertEqual(self.interpreter.tape[0], 255)

    def test_increment_wraps_to_zero(self) -> None:
        self.interpreter.run([ChangeCell(-1), ChangeCell(1)])
        self.assertEqual(self.interpreter.tape[0], 0)

    def test_pointer_wraps_around_tape(self) -> None:
        self.interpreter.run([MovePointer(-1), ChangeCell(1)])
        self.assertEqual(self.interpreter.pointer, 255)
        self.assertEqual(self.interpreter.tape[255], 1)

    def test_loop_terminates_after_single_repetition(self) -> None:
        self.interpreter.run(_compile("+[-]"))
        self.assertEqual(self.interpreter.tape[0], 0)
        self.assertEqual(self.interpreter.steps, 3)

    def test_loop_body_runs_once_on_zero_cell(self) -> None:
        self.interpreter.run(_compile("[>+<]"))
        self.assertEqual(self.interpreter.tape[1], 1)

    def test_loop_body_starts_at_cell_zero(self) -> None:
        self.interpreter.run(_compile(">+[-]"))
        # The body decremented cell 0 until it wrapped back to zero.
        self.assertEqual(self.interpreter.tape[0], 0)
        self.assertEqual(self.interpreter.tape[1], 1)
        self.assertEqual(self.interpreter.pointer, 1)
        self.assertEqual(self.interpreter.steps, 3 + 256 + 255)

    def test_loop_does_not_move_enclosing_cursor(self) -> None:
        output = self.interpreter.run(_compile("+++[>>+<<-]" + "."))
        self.assertEqual(output, chr(0))
        self.assertEqual(self.interpreter.tape[2], 3)

    def test_input_reads_first_character_of_line(self) -> None:
        output = self.interpreter.run([Input(), Output()], input_stream=io.StringIO("Hi\n"))
        self.assertEqual(output, "H")

    def test_input_without_data_stores_zero(self) -> None:
        self.interpreter.run([ChangeCell(5), Input()], input_stream=io.StringIO(""))
        self.assertEqual(self.interpreter.tape[0], 0)

    def test_empty_line_stores_zero(self) -> None:
        self.interpreter.run([ChangeCell(5), Input()], input_stream=io.StringIO("\n"))
        self.assertEqual(self.interpreter.tape[0], 0)

    def test_input_code_point_wraps_to_byte(self) -> None:
        self.interpreter.run([ChangeCell(5), Input()], input_stream=io.StringIO("Ā\n"))
        self.assertEqual(self.interpreter.tape[0], 0)
        self.interpreter.run([Input()], input_stream=io.StringIO("Ł\n"))
        self.assertEqual(self.interpreter.tape[0], 0x41)

    def test_output_stream_receives_characters(self) -> None:
        stream = io.StringIO()
        output = self.interpreter.run(_compile("+" * 66 + "."), output_stream=stream)
        self.assertEqual(stream.getvalue(), "B")
        self.assertEqual(output, "B")

    def test_step_limit_exceeded(self) -> None:
        with self.assertRaises(StepLimitExceeded):
            self.interpreter.run([ChangeCell(1), Loop([])], max_steps=50)

    def test_run_resets_state(self) -> None:
        self.interpreter.run([ChangeCell(3), MovePointer(4)])
        self.interpreter.run([])
        self.assertEqual(self.interpreter.tape[0], 0)
        self.assertEqual(self.interpreter.pointer, 0)
        self.assertEqual(self.interpreter.steps, 0)


class ConventionalLoopTests(unittest.TestCase):
    def setUp(self) -> None:
        self.interpreter = TreeInterpreter(loop_mode=LoopMode.CONVENTIONAL)

    def test_hello_world(self) -> None:
        self.assertEqual(self.interpreter.run(_compile(DEMO_PROGRAM)), "Hello World!\n")

    def test_loop_skipped_on_zero_cell(self) -> None:
        self.interpreter.run(_compile("[>+<]"))
        self.assertEqual(self.interpreter.tape[1], 0)

    def test_cursor_persists_across_loop(self) -> None:
        self.interpreter.run(_compile(">+[-]"))
        self.assertEqual(self.interpreter.tape[1], 0)
        self.assertEqual(self.interpreter.tape[0], 0)

    def test_mode_accepts_string_value(self) -> None:
        interpreter = TreeInterpreter(loop_mode="conventional")
        self.assertIs(interpreter.loop_mode, LoopMode.CONVENTIONAL)

    def test_step_limit_exceeded(self) -> None:
        with self.assertRaises(StepLimitExceeded):
            self.interpreter.run([ChangeCell(1), Loop([])], max_steps=50)


class InterpretFunctionTests(unittest.TestCase):
    def test_interpret_prints_to_stdout(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            result = interpret(_compile("++."))
        self.assertIsNone(result)
        self.assertEqual(buffer.getvalue(), chr(2))

    def test_interpret_bounds_endless_loop_with_step_budget(self) -> None:
        program = _compile("+[+-]")
        self.assertEqual(program, [ChangeCell(1), Loop([])])
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(StepLimitExceeded):
                interpret(program, max_steps=1000)


if __name__ == "__main__":
    unittest.main()
