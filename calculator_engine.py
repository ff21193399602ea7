"""
Motor de cálculo para la calculadora científica.

Este módulo provee la clase CalculatorEngine, la fachada de sesión que
usa la interfaz: guarda el modo angular, la última respuesta (Ans), la
memoria y el historial, y delega la evaluación en FormulaEvaluator.
El evaluador no guarda estado; todo lo que cambia entre pulsaciones
vive aquí.

Contrato de interfaz:
    - evaluate(expression: str) -> str
    - evaluate_result(expression: str) -> EvalResult
    - angle_mode: propiedad 'rad' | 'deg'
"""

import logging

from evaluation_errors import EvalResult, format_literal
from formula_evaluator import AngleMode, FormulaEvaluator


logger = logging.getLogger(__name__)

HISTORY_LIMIT = 10


class CalculatorEngine:
    """Evalúa expresiones matemáticas con funciones científicas."""

    def __init__(self, provider=None, history_limit: int = HISTORY_LIMIT):
        self._evaluator = FormulaEvaluator(provider)
        self._angle_mode = AngleMode.RADIANS
        self._history_limit = max(1, history_limit)
        self._history = []
        self._last_answer = 0.0
        self._memory = 0.0

    @property
    def provider(self):
        return self._evaluator.provider

    # ── Propiedad: modo angular ──────────────────────────────────

    @property
    def angle_mode(self) -> str:
        return self._angle_mode.value

    @angle_mode.setter
    def angle_mode(self, mode):
        self._angle_mode = AngleMode.coerce(mode)

    def toggle_angle_mode(self) -> str:
        if self._angle_mode is AngleMode.RADIANS:
            self._angle_mode = AngleMode.DEGREES
        else:
            self._angle_mode = AngleMode.RADIANS
        return self.angle_mode

    # ── Evaluación principal ─────────────────────────────────────

    def evaluate_result(self, expression: str) -> EvalResult:
        result = self._evaluator.evaluate_result(expression, self._angle_mode)
        if result.ok:
            self._last_answer = result.value
            self._history.insert(0, (expression, result.value))
            del self._history[self._history_limit:]
        else:
            logger.debug("Sin resultado para %r (%s)", expression, result.kind.value)
        return result

    def evaluate(self, expression: str) -> str:
        """Evalúa la expresión y devuelve el resultado como cadena.

        Raises:
            LexError: carácter no reconocido.
            SyntaxFailure: expresión vacía o mal formada.
            DomainError: factorial de un valor no admitido.
            NumericError: resultado NaN o infinito.
        """
        return self.format_result(self.evaluate_result(expression).unwrap())

    # ── Ans y memoria ────────────────────────────────────────────

    @property
    def last_answer(self) -> float:
        return self._last_answer

    def ans_text(self) -> str:
        """Literal para insertar la última respuesta en una expresión."""
        return format_literal(self._last_answer)

    @property
    def memory(self) -> float:
        return self._memory

    def memory_clear(self):
        self._memory = 0.0

    def memory_recall(self) -> float:
        return self._memory

    def memory_add(self, value=None):
        self._memory += self._last_answer if value is None else float(value)

    def memory_subtract(self, value=None):
        self._memory -= self._last_answer if value is None else float(value)

    # ── Historial ────────────────────────────────────────────────

    @property
    def history(self) -> tuple:
        return tuple(self._history)

    def clear_history(self):
        self._history.clear()

    # ── Formato del resultado ────────────────────────────────────

    @staticmethod
    def format_result(value: float) -> str:
        if value == int(value) and abs(value) < 1e15:
            return str(int(value))

        magnitude = abs(value)
        if magnitude >= 1e9:
            return f"{value:.4e}"
        if magnitude < 1e-6:
            return f"{value:.6e}"

        return f"{round(value, 10):.10f}".rstrip("0").rstrip(".")
