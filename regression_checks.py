from evaluation_errors import EvalErrorKind, format_literal
from expression_parser import parse, tokenize
from formula_evaluator import AngleMode, evaluate, sanitize, desugar
import math
import sys


def _outcome(expr: str, mode: AngleMode = AngleMode.RADIANS) -> str:
	result = evaluate(expr, mode)
	if result.ok:
		return repr(result.value)
	return f"<{result.kind.value}>"


def _close(expr: str, expected: float, mode: AngleMode = AngleMode.RADIANS) -> bool:
	result = evaluate(expr, mode)
	return result.ok and math.isclose(result.value, expected, rel_tol=1e-12, abs_tol=1e-12)


def _fails(expr: str, kind: EvalErrorKind, mode: AngleMode = AngleMode.RADIANS) -> bool:
	return evaluate(expr, mode).kind is kind


def inspect_pipeline(expr: str, *, degrees: bool = False) -> None:
	"""Imprime cada etapa del pipeline para una expresión."""
	mode = AngleMode.DEGREES if degrees else AngleMode.RADIANS
	clean = sanitize(expr)
	canonical = desugar(clean)

	print("Pipeline inspection")
	print(f"expr:       {expr}")
	print(f"mode:       {mode.value}")
	print(f"sanitized:  {clean}")
	print(f"canonical:  {canonical}")

	try:
		tokens = tokenize(canonical)
		print("tokens:     " + " ".join(f"{t.kind.name}:{t.text}" for t in tokens))
		print(f"ast:        {parse(tokens)}")
	except ValueError as exc:
		print(f"stopped:    {type(exc).__name__}: {exc}")

	print(f"result:     {_outcome(expr, mode)}")


def run_regressions() -> None:
	checks: list[tuple[str, bool]] = []
	expected_actual: list[tuple[str, str, str]] = []

	checks.append(("precedence of * over +", _close("2+3*4", 14)))
	checks.append(("left associativity of -", _close("10-4-3", 3)))
	checks.append(("left associativity of /", _close("64/4/2", 8)))
	checks.append(("power is right associative", _close("2^3^2", 512)))
	checks.append(("-2^2 is -4 in radians", _close("-2^2", -4)))
	checks.append(("-2^2 is -4 in degrees", _close("-2^2", -4, AngleMode.DEGREES)))

	checks.append(("sin(90) in degrees", _close("sin(90)", 1, AngleMode.DEGREES)))
	checks.append(("sin(90) in radians", _close("sin(90)", math.sin(90))))
	checks.append(("asin(1) in degrees", _close("asin(1)", 90, AngleMode.DEGREES)))
	checks.append(("log and ln", _close("log(1000)+ln(e)", 4)))

	checks.append(("5! is 120", _close("5!", 120)))
	checks.append(("3.5! is a domain failure", _fails("3.5!", EvalErrorKind.DOMAIN)))
	checks.append(("-1! is a domain failure", _fails("-1!", EvalErrorKind.DOMAIN)))
	checks.append(("171! is a domain failure", _fails("171!", EvalErrorKind.DOMAIN)))
	checks.append(("(2+3)! is a syntax failure", _fails("(2+3)!", EvalErrorKind.SYNTAX)))

	checks.append(("50% is 0.5", _close("50%", 0.5)))
	checks.append(("1/0 is a numeric failure", _fails("1/0", EvalErrorKind.NUMERIC)))
	checks.append(("sqrt(-1) is a numeric failure", _fails("√(-1)", EvalErrorKind.NUMERIC)))
	checks.append(("unbalanced parenthesis", _fails("(2+3", EvalErrorKind.SYNTAX)))
	checks.append(("empty expression", _fails("", EvalErrorKind.SYNTAX)))

	for expr in ("1/3", "2^0.5", "170!", "10^-30", "π*e", "sin(1)"):
		result = evaluate(expr)
		if not result.ok:
			continue
		again = evaluate(format_literal(result.value))
		checks.append((f"{expr} round-trips as a literal", again.ok and again.value == result.value))

	for expr, expected in (
		("√16+√(9)", "7.0"),
		("2*π", repr(2 * math.pi)),
		("20%*50", "10.0"),
		("2×3÷4", "1.5"),
		("sin(30", "<syntax>"),
	):
		expected_actual.append((expr, expected, _outcome(expr)))

	failed = [name for name, ok in checks if not ok]
	failed += [label for label, expected, actual in expected_actual if expected != actual]
	for name, ok in checks:
		print(f"{name}: {'OK' if ok else 'FAIL'}")

	print("\nExpected vs Actual:")
	for label, expected, actual in expected_actual:
		status = "OK" if expected == actual else "FAIL"
		print(f"- {label}: {status}")
		print(f"  expected: {expected}")
		print(f"  actual:   {actual}")

	if failed:
		print("\nFAILED CHECKS:")
		for name in failed:
			print(f"- {name}")
		raise SystemExit(1)

	print("\nAll regression checks passed.")


if __name__ == "__main__":
	# Uso rápido:
	#   python regression_checks.py
	#   python regression_checks.py --inspect "√(2^2)+5!"
	#   python regression_checks.py --inspect "sin(90)" --deg
	if "--inspect" in sys.argv:
		try:
			expr = sys.argv[sys.argv.index("--inspect") + 1]
		except (ValueError, IndexError):
			raise SystemExit("Missing expression after --inspect")

		inspect_pipeline(expr, degrees="--deg" in sys.argv)
	else:
		run_regressions()
