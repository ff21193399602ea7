import sys
import unittest
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from evaluation_errors import EvalErrorKind, format_literal
from extended_precision import MPMathProvider
from formula_evaluator import AngleMode, FormulaEvaluator, evaluate


class MPMathProviderTests(unittest.TestCase):
    def setUp(self):
        self.provider = MPMathProvider(digits=40)

    def test_minimum_digits(self):
        self.assertEqual(MPMathProvider(digits=5).digits, MPMathProvider.MIN_DIGITS)
        self.assertEqual(self.provider.digits, 40)

    def test_result_is_nearest_double(self):
        result = evaluate("0.1+0.2", provider=self.provider)
        self.assertTrue(result.ok)
        self.assertEqual(result.value, 0.3)
        self.assertIsInstance(result.value, float)

    def test_degrees_at_extended_precision(self):
        result = evaluate("sin(180)", AngleMode.DEGREES, provider=self.provider)
        self.assertAlmostEqual(result.value, 0.0, places=30)
        result = evaluate("asin(1)", AngleMode.DEGREES, provider=self.provider)
        self.assertEqual(result.value, 90.0)

    def test_same_grammar(self):
        evaluator = FormulaEvaluator(self.provider)
        self.assertEqual(evaluator.evaluate("5!"), 120.0)
        self.assertEqual(evaluator.evaluate("-2^2"), -4.0)
        self.assertEqual(evaluator.evaluate("50%"), 0.5)
        self.assertAlmostEqual(evaluator.evaluate("√2^2"), 2.0, places=15)

    def test_long_literal_round_trip(self):
        evaluator = FormulaEvaluator(self.provider)
        for value in (evaluate("170!").value, 1e50, 2.0 ** -1000):
            with self.subTest(value=value):
                text = format_literal(value)
                self.assertGreater(len(text), self.provider.digits)
                self.assertEqual(evaluator.evaluate(text), value)

    def test_short_literal_keeps_working_precision(self):
        self.assertEqual(self.provider.number("0.1"), self.provider._ctx.mpf("0.1"))
        self.assertNotEqual(self.provider.number("0.1"), self.provider._ctx.mpf(0.1))

    def test_failures_match_double_backend(self):
        cases = {
            "1/0": EvalErrorKind.NUMERIC,
            "√(-1)": EvalErrorKind.NUMERIC,
            "log(0)": EvalErrorKind.NUMERIC,
            "asin(2)": EvalErrorKind.NUMERIC,
            "(-8)^(1/3)": EvalErrorKind.NUMERIC,
            "10^400": EvalErrorKind.NUMERIC,
            "10^400/10^399": EvalErrorKind.NUMERIC,
            "170!*170!/170!": EvalErrorKind.NUMERIC,
            "3.5!": EvalErrorKind.DOMAIN,
            "-1!": EvalErrorKind.DOMAIN,
            "(2+3": EvalErrorKind.SYNTAX,
        }
        for expression, kind in cases.items():
            with self.subTest(expression=expression):
                self.assertIs(evaluate(expression, provider=self.provider).kind, kind)
                self.assertIs(evaluate(expression).kind, kind)


if __name__ == "__main__":
    unittest.main()
