"""Saneado, desazucarado y evaluación de expresiones de la calculadora."""

from __future__ import annotations

import logging
import math
import re
from enum import Enum

from evaluation_errors import (
    DomainError,
    EvalError,
    EvalResult,
    NumericError,
    classify,
)
from expression_parser import (
    BinaryKind,
    BinaryOp,
    Constant,
    ConstantKind,
    FunctionCall,
    FunctionKind,
    NumberLiteral,
    Percent,
    UnaryOp,
    parse,
    tokenize,
)


logger = logging.getLogger(__name__)

# Mayor n con n! representable en doble precisión.
FACTORIAL_LIMIT = 170


class AngleMode(str, Enum):
    RADIANS = "rad"
    DEGREES = "deg"

    @classmethod
    def coerce(cls, mode) -> "AngleMode":
        if isinstance(mode, cls):
            return mode
        try:
            return cls(mode)
        except ValueError as exc:
            raise ValueError("El modo debe ser 'rad' o 'deg'") from exc


# ── Saneado ──────────────────────────────────────────────────────

_KEYPAD_GLYPHS = str.maketrans({"×": "*", "÷": "/", "−": "-"})
_REJECTED_CHARS = re.compile(r"[^0-9A-Za-z.+\-*/()^!%,π√]")


def sanitize(raw: str) -> str:
    """Deja sólo el alfabeto aceptado; el resto se descarta sin error."""
    return _REJECTED_CHARS.sub("", raw.translate(_KEYPAD_GLYPHS))


# ── Desazucarado ─────────────────────────────────────────────────

_LITERAL = r"(?:\d+\.?\d*|\.\d+)"
_LITERAL_RE = re.compile(_LITERAL)
# El '-' sólo forma parte del operando si está en posición unaria.
_FACTORIAL_RE = re.compile(rf"((?<![^(+\-*/^,])-)?({_LITERAL})!")
_PERCENT_RE = re.compile(rf"({_LITERAL})%")


def desugar(clean: str) -> str:
    """Reescribe la notación abreviada en forma canónica de llamadas.

    ``5!`` pasa a ``fact(5)``, ``50%`` a ``pct(50)``, ``√x`` a
    ``sqrt(x)``, ``^`` a ``**`` y ``π`` a ``pi``. La conversión de
    ángulos no se hace aquí: depende del contexto de evaluación.
    """
    expr = _FACTORIAL_RE.sub(
        lambda m: f"fact({m.group(1) or ''}{m.group(2)})", clean
    )
    expr = _PERCENT_RE.sub(r"pct(\1)", expr)
    expr = _replace_sqrt(expr)
    expr = expr.replace("^", "**")
    return expr.replace("π", "pi")


def _replace_sqrt(expr: str) -> str:
    out = []
    i = 0
    while i < len(expr):
        if expr[i] != "√":
            out.append(expr[i])
            i += 1
            continue

        end = _operand_end(expr, i + 1)
        if end is None:
            # Sin operando válido: el parser rechazará 'sqrt' suelto.
            out.append("sqrt")
            i += 1
            continue

        out.append(f"sqrt({_replace_sqrt(expr[i + 1:end])})")
        i = end

    return "".join(out)


def _operand_end(expr: str, start: int):
    """Fin del operando atómico más largo que empieza en ``start``."""
    if start >= len(expr):
        return None

    ch = expr[start]
    if ch == "(":
        return _closing_paren(expr, start)
    if ch == "√":
        return _operand_end(expr, start + 1)
    if ch.isdigit() or ch == ".":
        match = _LITERAL_RE.match(expr, start)
        return match.end() if match else None
    if ch.isalpha():
        end = start
        while end < len(expr) and expr[end].isalpha():
            end += 1
        if end < len(expr) and expr[end] == "(":
            return _closing_paren(expr, end)
        return end
    return None


def _closing_paren(expr: str, start: int):
    depth = 0
    for j in range(start, len(expr)):
        if expr[j] == "(":
            depth += 1
        elif expr[j] == ")":
            depth -= 1
            if depth == 0:
                return j + 1
    return None


# ── Proveedor matemático ─────────────────────────────────────────

class PythonMathProvider:
    """Funciones y constantes de doble precisión sobre el módulo math."""

    _FUNCTIONS = {
        FunctionKind.SIN: math.sin,
        FunctionKind.COS: math.cos,
        FunctionKind.TAN: math.tan,
        FunctionKind.ASIN: math.asin,
        FunctionKind.ACOS: math.acos,
        FunctionKind.ATAN: math.atan,
        FunctionKind.LOG: math.log10,
        FunctionKind.LN: math.log,
        FunctionKind.SQRT: math.sqrt,
    }

    def number(self, text: str) -> float:
        return float(text)

    def constant(self, kind: ConstantKind) -> float:
        return math.pi if kind is ConstantKind.PI else math.e

    def function(self, kind: FunctionKind):
        return self._FUNCTIONS[kind]

    @staticmethod
    def power(base, exponent):
        return math.pow(base, exponent)

    @staticmethod
    def radians(value):
        return math.radians(value)

    @staticmethod
    def degrees(value):
        return math.degrees(value)

    @staticmethod
    def factorial(n) -> float:
        return float(math.factorial(int(n)))

    @staticmethod
    def is_integral(value) -> bool:
        return float(value).is_integer()

    @staticmethod
    def is_finite(value) -> bool:
        return math.isfinite(value)

    @staticmethod
    def to_float(value) -> float:
        return float(value)


# ── Evaluador ────────────────────────────────────────────────────

class FormulaEvaluator:
    """Transforma expresiones de UI y evalúa su valor numérico.

    La instancia sólo guarda el proveedor matemático; el modo angular
    llega en cada llamada, así que puede compartirse entre hilos.
    """

    def __init__(self, provider=None):
        self._provider = provider if provider is not None else PythonMathProvider()

    @property
    def provider(self):
        return self._provider

    @staticmethod
    def preprocess(expression: str) -> str:
        return desugar(sanitize(expression))

    def evaluate(self, expression: str, angle_mode=AngleMode.RADIANS) -> float:
        """Evalúa la expresión y devuelve un float finito.

        Raises:
            LexError: carácter no reconocido.
            SyntaxFailure: expresión vacía o mal formada.
            DomainError: argumento fuera del dominio (factorial) o
                anidamiento mayor del que admite el evaluador.
            NumericError: resultado NaN o infinito.
        """
        mode = AngleMode.coerce(angle_mode)
        try:
            tree = parse(tokenize(self.preprocess(expression)))
            value = self._eval(tree, mode)
        except RecursionError as exc:
            raise DomainError("Expresión demasiado anidada para evaluarse") from exc
        try:
            return classify(self._provider.to_float(value)).unwrap()
        except OverflowError as exc:
            raise NumericError("Resultado demasiado grande") from exc

    def evaluate_result(self, expression: str, angle_mode=AngleMode.RADIANS) -> EvalResult:
        """Como evaluate(), pero nunca lanza: devuelve un EvalResult."""
        try:
            value = self.evaluate(expression, angle_mode)
        except EvalError as exc:
            logger.debug("Evaluación fallida (%s): %r: %s", exc.kind.value, expression, exc)
            return EvalResult.failure(exc)
        return EvalResult.success(value)

    # ── Recorrido del árbol ──────────────────────────────────────

    def _eval(self, node, mode: AngleMode):
        p = self._provider

        if isinstance(node, NumberLiteral):
            return self._checked(p.number(node.text))

        if isinstance(node, Constant):
            return p.constant(node.kind)

        if isinstance(node, UnaryOp):
            return -self._eval(node.operand, mode)

        if isinstance(node, Percent):
            return self._eval(node.operand, mode) / 100

        if isinstance(node, BinaryOp):
            left = self._eval(node.left, mode)
            right = self._eval(node.right, mode)
            if node.kind is BinaryKind.POW:
                return self._apply(p.power, left, right)
            return self._apply(_BINARY[node.kind], left, right)

        if isinstance(node, FunctionCall):
            return self._call(node.name, self._eval(node.argument, mode), mode)

        raise TypeError(f"Nodo desconocido: {type(node).__name__}")

    def _call(self, kind: FunctionKind, arg, mode: AngleMode):
        p = self._provider
        degrees = mode is AngleMode.DEGREES

        if kind is FunctionKind.FACT:
            return self._factorial(arg)

        if degrees and kind.is_trig:
            arg = p.radians(arg)
        result = self._apply(p.function(kind), arg)
        if degrees and kind.is_inverse_trig:
            result = self._checked(p.degrees(result))
        return result

    def _factorial(self, arg):
        p = self._provider
        if not p.is_integral(arg) or arg < 0:
            raise DomainError("factorial requiere entero no negativo")
        if arg > FACTORIAL_LIMIT:
            raise DomainError(f"factorial admite hasta {FACTORIAL_LIMIT}")
        return p.factorial(arg)

    def _apply(self, fn, *args):
        # ZeroDivisionError y OverflowError son ArithmeticError;
        # math lanza ValueError donde IEEE daría NaN.
        try:
            value = fn(*args)
        except (ArithmeticError, ValueError) as exc:
            raise NumericError("Resultado no finito") from exc
        return self._checked(value)

    def _checked(self, value):
        if not self._provider.is_finite(value):
            raise NumericError("Resultado no finito")
        return value


_BINARY = {
    BinaryKind.ADD: lambda a, b: a + b,
    BinaryKind.SUB: lambda a, b: a - b,
    BinaryKind.MUL: lambda a, b: a * b,
    BinaryKind.DIV: lambda a, b: a / b,
}

_DEFAULT_EVALUATOR = FormulaEvaluator()


def evaluate(expression: str, angle_mode=AngleMode.RADIANS, provider=None) -> EvalResult:
    """Punto de entrada único: expresión + modo angular -> EvalResult."""
    evaluator = _DEFAULT_EVALUATOR if provider is None else FormulaEvaluator(provider)
    return evaluator.evaluate_result(expression, angle_mode)
