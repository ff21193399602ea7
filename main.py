"""Punto de entrada de la calculadora científica (terminal)."""

import argparse
import logging
import sys

from calculator_engine import CalculatorEngine


USE_EXTENDED_PRECISION = False
EP_DIGITS = 40

COMMANDS_HELP = ":deg / :rad cambian el modo angular, :hist muestra el historial, :q sale"


def build_engine(extended: bool = USE_EXTENDED_PRECISION, digits: int = EP_DIGITS) -> CalculatorEngine:
    if extended:
        from extended_precision import MPMathProvider

        return CalculatorEngine(provider=MPMathProvider(digits=digits))
    return CalculatorEngine()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calculadora científica")
    parser.add_argument("expressions", nargs="*", help="Expresiones a evaluar; sin ellas se abre el modo interactivo")
    parser.add_argument("--deg", action="store_true", help="Evaluar funciones trigonométricas en grados")
    parser.add_argument("--extended", action="store_true", default=USE_EXTENDED_PRECISION, help="Precisión interna extendida con mpmath")
    parser.add_argument("--digits", type=int, default=EP_DIGITS, help="Dígitos de trabajo con --extended")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Nivel de logging de Python")
    return parser


def display(engine: CalculatorEngine, expression: str) -> str:
    """Texto a mostrar: el resultado formateado o 'Error'."""
    result = engine.evaluate_result(expression)
    if not result.ok:
        return "Error"
    return engine.format_result(result.value)


def handle_command(engine: CalculatorEngine, line: str, out) -> bool:
    """Procesa un comando ':x'. Devuelve False si hay que salir."""
    command = line[1:].strip().lower()
    if command in ("q", "quit"):
        return False
    if command in ("deg", "rad"):
        engine.angle_mode = command
        print(f"Modo: {engine.angle_mode.upper()}", file=out)
    elif command == "hist":
        for expression, value in engine.history:
            print(f"{expression} = {engine.format_result(value)}", file=out)
    else:
        print(COMMANDS_HELP, file=out)
    return True


def repl(engine: CalculatorEngine, stream=sys.stdin, out=sys.stdout):
    for raw in stream:
        line = raw.strip()
        if not line:
            continue
        if line.startswith(":"):
            if not handle_command(engine, line, out):
                break
            continue
        print(display(engine, line), file=out)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    engine = build_engine(args.extended, args.digits)
    if args.deg:
        engine.angle_mode = "deg"

    if args.expressions:
        failed = False
        for expression in args.expressions:
            text = display(engine, expression)
            failed = failed or text == "Error"
            print(text)
        return 1 if failed else 0

    repl(engine)
    return 0


if __name__ == "__main__":
    sys.exit(main())
