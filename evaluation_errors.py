"""
Clasificación de resultados y errores del evaluador.

Toda evaluación termina en un EvalResult: o un número finito, o un
error tipado (léxico, sintáctico, de dominio o numérico). La capa de
interfaz decide cómo mostrar cada caso; aquí sólo se clasifica.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class EvalErrorKind(str, Enum):
    LEX = "lex"
    SYNTAX = "syntax"
    DOMAIN = "domain"
    NUMERIC = "numeric"


class EvalError(ValueError):
    """Fallo de evaluación con su tipo asociado."""

    kind = EvalErrorKind.SYNTAX

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.position = position


class LexError(EvalError):
    kind = EvalErrorKind.LEX


class SyntaxFailure(EvalError):
    kind = EvalErrorKind.SYNTAX


class DomainError(EvalError):
    kind = EvalErrorKind.DOMAIN


class NumericError(EvalError):
    kind = EvalErrorKind.NUMERIC


@dataclass(frozen=True)
class EvalResult:
    value: Optional[float] = None
    error: Optional[EvalError] = None

    @classmethod
    def success(cls, value: float) -> "EvalResult":
        return cls(value=value)

    @classmethod
    def failure(cls, error: EvalError) -> "EvalResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[EvalErrorKind]:
        return None if self.error is None else self.error.kind

    def unwrap(self) -> float:
        """Devuelve el valor o relanza el error almacenado."""
        if self.error is not None:
            raise self.error
        return self.value


def classify(value) -> EvalResult:
    """Convierte el valor final en resultado válido o fallo numérico."""
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return EvalResult.failure(NumericError("Resultado no numérico"))

    if not math.isfinite(number):
        return EvalResult.failure(NumericError("Resultado no finito"))
    return EvalResult.success(number)


def format_literal(value: float) -> str:
    """Escribe un float finito como literal decimal sin exponente.

    El texto usa los mismos dígitos que repr(), así que volver a
    evaluarlo reproduce exactamente el mismo valor.
    """
    if not math.isfinite(value):
        raise NumericError("Resultado no finito")
    return format(Decimal(repr(value)), "f")
