import io
import sys
import unittest
from contextlib import redirect_stdout
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import main
from extended_precision import MPMathProvider


class MainTests(unittest.TestCase):
    def _run(self, argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main.main(argv)
        return code, out.getvalue().splitlines()

    def test_expressions_from_arguments(self):
        code, lines = self._run(["2+2", "5!"])
        self.assertEqual(code, 0)
        self.assertEqual(lines, ["4", "120"])

    def test_degrees_flag(self):
        _, lines = self._run(["--deg", "sin(90)"])
        self.assertEqual(lines, ["1"])

    def test_failure_prints_error(self):
        code, lines = self._run(["1/0", "3"])
        self.assertEqual(code, 1)
        self.assertEqual(lines, ["Error", "3"])

    def test_extended_engine(self):
        engine = main.build_engine(extended=True, digits=50)
        self.assertIsInstance(engine.provider, MPMathProvider)
        self.assertEqual(main.display(engine, "0.1+0.2"), "0.3")


class ReplTests(unittest.TestCase):
    def test_session(self):
        engine = main.build_engine()
        stream = io.StringIO("2*3\n\n:deg\nsin(90)\n(2+3\n:hist\n:q\n9\n")
        out = io.StringIO()
        main.repl(engine, stream=stream, out=out)
        self.assertEqual(
            out.getvalue().splitlines(),
            ["6", "Modo: DEG", "1", "Error", "sin(90) = 1", "2*3 = 6"],
        )

    def test_unknown_command_prints_help(self):
        out = io.StringIO()
        main.repl(main.build_engine(), stream=io.StringIO(":help\n"), out=out)
        self.assertEqual(out.getvalue().strip(), main.COMMANDS_HELP)


if __name__ == "__main__":
    unittest.main()
