from __future__ import annotations

import ast
from dataclasses import dataclass
import logging
import math
import re
from typing import Callable

import numpy as np

from gridplot.errors import AllSamplesFailedError, Diagnostic, DiagnosticKind, EvalError
from gridplot.series import DataPoint, Series, SeriesKind


LOGGER = logging.getLogger(__name__)
DEFAULT_SAMPLES = 200
DEFAULT_DOMAIN = (-10.0, 10.0)

_FUNCTIONS: dict[str, Callable[[float], float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "exp": math.exp,
    "ln": math.log,
    "log": math.log,
    "log10": math.log10,
    "log2": math.log2,
    "sqrt": math.sqrt,
    "abs": abs,
    "floor": math.floor,
    "ceil": math.ceil,
}
_CONSTANTS = {"pi": math.pi, "e": math.e}
_BINARY_OPS = {
    ast.Add: lambda a, b: a + b,
    ast.Sub: lambda a, b: a - b,
    ast.Mult: lambda a, b: a * b,
    ast.Div: lambda a, b: a / b,
    ast.Pow: lambda a, b: a**b,
}

# Checked in order; first match decides.
_DOMAIN_HINTS: tuple[tuple[str, tuple[float, float]], ...] = (
    ("exp", (-5.0, 5.0)),
    ("ln", (0.1, 10.0)),
    ("log", (0.1, 10.0)),
    ("log10", (0.1, 10.0)),
    ("log2", (0.1, 10.0)),
    ("sqrt", (0.0, 10.0)),
    ("tan", (-1.5, 1.5)),
)


@dataclass(frozen=True)
class SampledFunction:
    series: Series
    diagnostics: tuple[Diagnostic, ...] = ()


def sample_function(
    fn: Callable[[float], float],
    domain: tuple[float, float],
    samples: int = DEFAULT_SAMPLES,
    *,
    name: str | None = None,
) -> SampledFunction:
    """Evaluate ``fn`` at ``samples`` evenly spaced x values across ``domain``.

    A sample that raises ``EvalError`` or ``ArithmeticError``, or returns a
    non-finite value, is skipped and counted into one EVAL_FAILURE diagnostic.
    """
    lo, hi = float(domain[0]), float(domain[1])
    if not (math.isfinite(lo) and math.isfinite(hi)) or lo >= hi:
        raise ValueError(f"domain must be finite with min < max (got {lo}, {hi})")
    if samples < 2:
        raise ValueError("samples must be >= 2")

    points: list[DataPoint] = []
    failed = 0
    for x in np.linspace(lo, hi, samples).tolist():
        try:
            y = float(fn(x))
        except (EvalError, ArithmeticError, ValueError):
            failed += 1
            continue
        if not math.isfinite(y):
            failed += 1
            continue
        points.append(DataPoint(x=x, y=y))

    if not points:
        raise AllSamplesFailedError(f"all {samples} samples of {name or 'function'} failed to evaluate")
    diagnostics: tuple[Diagnostic, ...] = ()
    if failed:
        LOGGER.warning("skipped %d of %d samples that failed to evaluate", failed, samples)
        diagnostics = (
            Diagnostic(
                kind=DiagnosticKind.EVAL_FAILURE,
                message=f"skipped {failed} of {samples} samples that failed to evaluate",
                count=failed,
            ),
        )
    series = Series(points=tuple(points), kind=SeriesKind.NUMERIC, name=name, x_name="x")
    return SampledFunction(series=series, diagnostics=diagnostics)


def compile_expression(expression: str) -> Callable[[float], float]:
    """Compile ``expression`` in ``x`` into a callable.

    Evaluation errors (domain errors, division by zero, overflow) surface as
    ``EvalError`` so ``sample_function`` can skip the sample.
    """
    source = expression.strip().replace("^", "**")
    if not source:
        raise EvalError("empty expression")
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as exc:
        raise EvalError(f"invalid expression: {expression}") from exc
    _validate(tree.body, expression)
    body = tree.body

    def evaluate(x: float) -> float:
        try:
            return float(_eval(body, float(x)))
        except (ArithmeticError, ValueError, TypeError) as exc:
            raise EvalError(f"{expression} failed at x={x:g}: {exc}") from exc

    return evaluate


def default_domain(expression: str) -> tuple[float, float]:
    names = set(re.findall(r"[A-Za-z_][A-Za-z0-9_]*", expression))
    for fn_name, domain in _DOMAIN_HINTS:
        if fn_name in names:
            return domain
    return DEFAULT_DOMAIN


def _validate(node: ast.AST, expression: str) -> None:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise EvalError(f"unsupported literal in {expression}")
    elif isinstance(node, ast.Name):
        if node.id != "x" and node.id not in _CONSTANTS:
            raise EvalError(f"unknown name '{node.id}' in {expression}")
    elif isinstance(node, ast.UnaryOp):
        if not isinstance(node.op, (ast.USub, ast.UAdd)):
            raise EvalError(f"unsupported operator in {expression}")
        _validate(node.operand, expression)
    elif isinstance(node, ast.BinOp):
        if type(node.op) not in _BINARY_OPS:
            raise EvalError(f"unsupported operator in {expression}")
        _validate(node.left, expression)
        _validate(node.right, expression)
    elif isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.func.id not in _FUNCTIONS:
            raise EvalError(f"unknown function in {expression}")
        if len(node.args) != 1 or node.keywords:
            raise EvalError(f"{node.func.id} takes exactly one argument")
        _validate(node.args[0], expression)
    else:
        raise EvalError(f"unsupported syntax in {expression}")


def _eval(node: ast.AST, x: float) -> float:
    if isinstance(node, ast.Constant):
        return float(node.value)
    if isinstance(node, ast.Name):
        return x if node.id == "x" else _CONSTANTS[node.id]
    if isinstance(node, ast.UnaryOp):
        value = _eval(node.operand, x)
        return -value if isinstance(node.op, ast.USub) else value
    if isinstance(node, ast.BinOp):
        result = _BINARY_OPS[type(node.op)](_eval(node.left, x), _eval(node.right, x))
        if isinstance(result, complex):
            raise ValueError("complex result")
        return result
    if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
        return _FUNCTIONS[node.func.id](_eval(node.args[0], x))
    raise EvalError(f"cannot evaluate {type(node).__name__} node")
