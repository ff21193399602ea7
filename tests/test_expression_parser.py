import sys
import unittest
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from evaluation_errors import EvalErrorKind, LexError, NumericError, SyntaxFailure
from expression_parser import (
    BinaryKind,
    BinaryOp,
    Constant,
    ConstantKind,
    FunctionCall,
    FunctionKind,
    NumberLiteral,
    Percent,
    TokenKind,
    UnaryKind,
    UnaryOp,
    parse,
    tokenize,
)


def _parse(text):
    return parse(tokenize(text))


class TokenizerTests(unittest.TestCase):
    def test_numbers_and_operators(self):
        tokens = tokenize("12.5+.5**2")
        self.assertEqual(
            [(t.kind, t.text) for t in tokens],
            [
                (TokenKind.NUMBER, "12.5"),
                (TokenKind.OPERATOR, "+"),
                (TokenKind.NUMBER, ".5"),
                (TokenKind.OPERATOR, "**"),
                (TokenKind.NUMBER, "2"),
            ],
        )

    def test_identifier_is_never_split(self):
        tokens = tokenize("asin(1)")
        self.assertEqual(tokens[0].kind, TokenKind.IDENTIFIER)
        self.assertEqual(tokens[0].text, "asin")

    def test_marks_and_comma(self):
        kinds = [t.kind for t in tokenize("(1,2)!%")]
        self.assertEqual(
            kinds,
            [
                TokenKind.LPAREN,
                TokenKind.NUMBER,
                TokenKind.COMMA,
                TokenKind.NUMBER,
                TokenKind.RPAREN,
                TokenKind.FACTORIAL,
                TokenKind.PERCENT,
            ],
        )

    def test_positions(self):
        tokens = tokenize("1 + 22")
        self.assertEqual([t.position for t in tokens], [0, 2, 4])

    def test_unknown_character_is_lex_error(self):
        with self.assertRaises(LexError) as ctx:
            tokenize("2$3")
        self.assertEqual(ctx.exception.kind, EvalErrorKind.LEX)
        self.assertEqual(ctx.exception.position, 1)

    def test_lone_decimal_point_is_lex_error(self):
        with self.assertRaises(LexError):
            tokenize("1+.")


class ParserTests(unittest.TestCase):
    def test_multiplication_binds_tighter(self):
        tree = _parse("1+2*3")
        self.assertEqual(tree.kind, BinaryKind.ADD)
        self.assertEqual(tree.right.kind, BinaryKind.MUL)

    def test_subtraction_is_left_associative(self):
        tree = _parse("8-3-2")
        self.assertEqual(tree.kind, BinaryKind.SUB)
        self.assertIsInstance(tree.left, BinaryOp)
        self.assertEqual(tree.right, NumberLiteral(2.0, "2"))

    def test_power_is_right_associative(self):
        tree = _parse("2**3**2")
        self.assertEqual(tree.kind, BinaryKind.POW)
        self.assertEqual(tree.left, NumberLiteral(2.0, "2"))
        self.assertEqual(tree.right.kind, BinaryKind.POW)

    def test_unary_minus_is_looser_than_power(self):
        tree = _parse("-2**2")
        self.assertIsInstance(tree, UnaryOp)
        self.assertEqual(tree.kind, UnaryKind.NEGATE)
        self.assertEqual(tree.operand.kind, BinaryKind.POW)

    def test_negative_exponent(self):
        tree = _parse("2**-1")
        self.assertEqual(tree.kind, BinaryKind.POW)
        self.assertIsInstance(tree.right, UnaryOp)

    def test_unary_plus_returns_operand(self):
        self.assertEqual(_parse("+3"), NumberLiteral(3.0, "3"))

    def test_constants_and_calls(self):
        tree = _parse("sin(pi)*e")
        self.assertEqual(tree.left, FunctionCall(FunctionKind.SIN, Constant(ConstantKind.PI)))
        self.assertEqual(tree.right, Constant(ConstantKind.E))

    def test_canonical_wrappers(self):
        self.assertEqual(_parse("pct(50)"), Percent(NumberLiteral(50.0, "50")))
        self.assertEqual(_parse("fact(5)"), FunctionCall(FunctionKind.FACT, NumberLiteral(5.0, "5")))

    def test_syntax_failures(self):
        for text in (
            "",
            "(2+3",
            "2+3)",
            "2+",
            "*2",
            "2 3",
            "sin 30",
            "sin()",
            "log(2,3)",
            "foo(1)",
            "pi(2)",
            "(2+3)!",
            "(50)%",
        ):
            with self.subTest(text=text):
                with self.assertRaises(SyntaxFailure):
                    _parse(text)

    def test_oversized_literal_is_numeric_error(self):
        with self.assertRaises(NumericError):
            _parse("9" * 400)


if __name__ == "__main__":
    unittest.main()
