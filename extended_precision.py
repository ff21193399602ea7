"""Proveedor matemático con precisión interna extendida (mpmath).

Los cálculos intermedios se hacen con ``digits`` dígitos decimales y
sólo el resultado final se redondea a doble precisión, de modo que el
contrato externo (un float finito o un error tipado) no cambia. Sirve
para que casos como ``sin(180)`` en grados o ``0.1+0.2`` lleguen al
double más cercano al valor exacto.
"""

from __future__ import annotations

import sys

from expression_parser import ConstantKind, FunctionKind

try:
    from mpmath import MPContext
except ImportError as exc:  # pragma: no cover
    raise ImportError(
        "mpmath no está instalado. Instala con: pip install mpmath"
    ) from exc


class MPMathProvider:
    """Proveedor basado en un contexto mpmath propio."""

    MIN_DIGITS = 20

    def __init__(self, digits: int = 40):
        # Contexto propio: no se toca la precisión global de mpmath.
        self._ctx = MPContext()
        self._ctx.dps = max(self.MIN_DIGITS, digits)
        ctx = self._ctx
        self._functions = {
            FunctionKind.SIN: ctx.sin,
            FunctionKind.COS: ctx.cos,
            FunctionKind.TAN: ctx.tan,
            FunctionKind.ASIN: self._real(ctx.asin),
            FunctionKind.ACOS: self._real(ctx.acos),
            FunctionKind.ATAN: ctx.atan,
            FunctionKind.LOG: self._real(ctx.log10),
            FunctionKind.LN: self._real(ctx.log),
            FunctionKind.SQRT: self._real(ctx.sqrt),
        }

    @property
    def digits(self) -> int:
        return self._ctx.dps

    def _real(self, fn):
        ctx = self._ctx

        def wrapped(*args):
            result = fn(*args)
            # Resultado complejo: fuera de los reales, como NaN en IEEE.
            if isinstance(result, ctx.mpc):
                return ctx.nan
            return result

        return wrapped

    def number(self, text: str):
        # Literales más largos que la precisión de trabajo vienen de un
        # double (p. ej. format_literal); se convierten por float.
        if len(text) > self._ctx.dps:
            return self._ctx.mpf(float(text))
        return self._ctx.mpf(text)

    def constant(self, kind: ConstantKind):
        ctx = self._ctx
        return ctx.mpf(ctx.pi) if kind is ConstantKind.PI else ctx.mpf(ctx.e)

    def function(self, kind: FunctionKind):
        return self._functions[kind]

    def power(self, base, exponent):
        return self._real(self._ctx.power)(base, exponent)

    def radians(self, value):
        return self._ctx.radians(value)

    def degrees(self, value):
        return self._ctx.degrees(value)

    def factorial(self, n):
        return self._ctx.factorial(int(n))

    def is_integral(self, value) -> bool:
        return bool(self._ctx.isint(value))

    def is_finite(self, value) -> bool:
        # Rango de doble precisión, igual que PythonMathProvider.
        return bool(self._ctx.isfinite(value)) and abs(value) <= sys.float_info.max

    @staticmethod
    def to_float(value) -> float:
        return float(value)
