"""
Tokenizador y parser de expresiones canónicas.

Recibe la forma canónica que produce el desazucarado (ver
formula_evaluator.desugar) y construye un árbol sintáctico tipado.
El parser sólo valida la forma: no evalúa nada.

Gramática (de menor a mayor precedencia):

    expression := term (('+' | '-') term)*
    term       := unary (('*' | '/') unary)*
    unary      := ('-' | '+') unary | power
    power      := primary ('**' unary)?
    primary    := NUMBER | CONSTANT | '(' expression ')'
                | NAME '(' expression ')'

El menos unario queda por debajo de la potencia: -2^2 == -(2^2).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from evaluation_errors import LexError, NumericError, SyntaxFailure


# ── Tokens ───────────────────────────────────────────────────────

class TokenKind(Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    FACTORIAL = "!"
    PERCENT = "%"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int


_TOKEN_RE = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<number>\d+\.?\d*|\.\d+)
    | (?P<identifier>[A-Za-z]+)
    | (?P<operator>\*\*|[+\-*/])
    | (?P<lparen>\()
    | (?P<rparen>\))
    | (?P<comma>,)
    | (?P<factorial>!)
    | (?P<percent>%)
    """,
    re.VERBOSE,
)

_GROUP_KINDS = {
    "number": TokenKind.NUMBER,
    "identifier": TokenKind.IDENTIFIER,
    "operator": TokenKind.OPERATOR,
    "lparen": TokenKind.LPAREN,
    "rparen": TokenKind.RPAREN,
    "comma": TokenKind.COMMA,
    "factorial": TokenKind.FACTORIAL,
    "percent": TokenKind.PERCENT,
}


def tokenize(text: str) -> List[Token]:
    """Divide la forma canónica en tokens, de izquierda a derecha.

    Los identificadores se leen completos (``asin`` nunca se parte en
    ``a`` + ``sin``) y ``**`` tiene prioridad sobre ``*``.

    Raises:
        LexError: carácter que no puede iniciar ningún token.
    """
    tokens = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise LexError(f"Carácter no reconocido: {text[pos]!r}", pos)
        group = match.lastgroup
        if group != "space":
            tokens.append(Token(_GROUP_KINDS[group], match.group(), pos))
        pos = match.end()
    return tokens


# ── Árbol sintáctico ─────────────────────────────────────────────

class ConstantKind(Enum):
    PI = "pi"
    E = "e"


class BinaryKind(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "**"


class UnaryKind(Enum):
    NEGATE = "-"


class FunctionKind(Enum):
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    ASIN = "asin"
    ACOS = "acos"
    ATAN = "atan"
    LOG = "log"
    LN = "ln"
    SQRT = "sqrt"
    FACT = "fact"

    @property
    def is_trig(self) -> bool:
        return self in (FunctionKind.SIN, FunctionKind.COS, FunctionKind.TAN)

    @property
    def is_inverse_trig(self) -> bool:
        return self in (FunctionKind.ASIN, FunctionKind.ACOS, FunctionKind.ATAN)


@dataclass(frozen=True)
class NumberLiteral:
    value: float
    text: str


@dataclass(frozen=True)
class Constant:
    kind: ConstantKind


@dataclass(frozen=True)
class BinaryOp:
    kind: BinaryKind
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class UnaryOp:
    kind: UnaryKind
    operand: "Node"


@dataclass(frozen=True)
class FunctionCall:
    name: FunctionKind
    argument: "Node"


@dataclass(frozen=True)
class Percent:
    operand: "Node"


Node = Union[NumberLiteral, Constant, BinaryOp, UnaryOp, FunctionCall, Percent]

PERCENT_CALL = "pct"

_FUNCTIONS = {kind.value: kind for kind in FunctionKind}
_CONSTANTS = {kind.value: kind for kind in ConstantKind}


# ── Parser ───────────────────────────────────────────────────────

class Parser:
    """Parser descendente recursivo sobre una lista de tokens."""

    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._pos = 0

    def parse(self) -> Node:
        if not self._tokens:
            raise SyntaxFailure("Expresión vacía")
        node = self._expression()
        extra = self._peek()
        if extra is not None:
            raise SyntaxFailure(f"Token inesperado: {extra.text!r}", extra.position)
        return node

    # ── Navegación ───────────────────────────────────────────────

    def _peek(self) -> Optional[Token]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise SyntaxFailure("Expresión incompleta")
        self._pos += 1
        return token

    def _accept_operator(self, *symbols: str) -> Optional[Token]:
        token = self._peek()
        if token is not None and token.kind is TokenKind.OPERATOR and token.text in symbols:
            self._pos += 1
            return token
        return None

    def _expect(self, kind: TokenKind, message: str) -> Token:
        token = self._peek()
        if token is None or token.kind is not kind:
            position = None if token is None else token.position
            raise SyntaxFailure(message, position)
        self._pos += 1
        return token

    # ── Reglas ───────────────────────────────────────────────────

    def _expression(self) -> Node:
        node = self._term()
        while True:
            op = self._accept_operator("+", "-")
            if op is None:
                return node
            node = BinaryOp(BinaryKind(op.text), node, self._term())

    def _term(self) -> Node:
        node = self._unary()
        while True:
            op = self._accept_operator("*", "/")
            if op is None:
                return node
            node = BinaryOp(BinaryKind(op.text), node, self._unary())

    def _unary(self) -> Node:
        if self._accept_operator("-"):
            return UnaryOp(UnaryKind.NEGATE, self._unary())
        if self._accept_operator("+"):
            return self._unary()
        return self._power()

    def _power(self) -> Node:
        base = self._primary()
        if self._accept_operator("**"):
            # Asociativa por la derecha: 2^3^2 == 2^(3^2)
            return BinaryOp(BinaryKind.POW, base, self._unary())
        return base

    def _primary(self) -> Node:
        token = self._advance()

        if token.kind is TokenKind.NUMBER:
            value = float(token.text)
            if not math.isfinite(value):
                raise NumericError(f"Número fuera de rango: {token.text}", token.position)
            return NumberLiteral(value, token.text)

        if token.kind is TokenKind.LPAREN:
            node = self._expression()
            self._expect(TokenKind.RPAREN, "Falta ')'")
            return node

        if token.kind is TokenKind.IDENTIFIER:
            return self._named(token)

        raise SyntaxFailure(f"Token inesperado: {token.text!r}", token.position)

    def _named(self, token: Token) -> Node:
        name = token.text
        if name in _CONSTANTS:
            nxt = self._peek()
            if nxt is not None and nxt.kind is TokenKind.LPAREN:
                raise SyntaxFailure(f"{name} no es una función", nxt.position)
            return Constant(_CONSTANTS[name])

        if name != PERCENT_CALL and name not in _FUNCTIONS:
            raise SyntaxFailure(f"Identificador no permitido: {name}", token.position)

        self._expect(TokenKind.LPAREN, f"Falta '(' después de {name}")
        argument = self._expression()
        self._expect(TokenKind.RPAREN, "Falta ')'")
        if name == PERCENT_CALL:
            return Percent(argument)
        return FunctionCall(_FUNCTIONS[name], argument)


def parse(tokens: List[Token]) -> Node:
    return Parser(tokens).parse()
