from __future__ import annotations

import math
import unittest

from gridplot.adapters.function import compile_expression, default_domain, sample_function
from gridplot.errors import AllSamplesFailedError, DiagnosticKind, EvalError


class CompileExpressionTests(unittest.TestCase):
    def test_arithmetic_and_caret_power(self) -> None:
        self.assertEqual(compile_expression("x^2")(3.0), 9.0)
        self.assertEqual(compile_expression("x**3")(2.0), 8.0)
        self.assertEqual(compile_expression("2*x + 1")(4.0), 9.0)
        self.assertEqual(compile_expression("-x")(2.0), -2.0)
        self.assertEqual(compile_expression("(x - 1) / 2")(5.0), 2.0)

    def test_functions_and_constants(self) -> None:
        self.assertAlmostEqual(compile_expression("sin(pi/2)")(0.0), 1.0)
        self.assertAlmostEqual(compile_expression("ln(e)")(0.0), 1.0)
        self.assertAlmostEqual(compile_expression("log10(x)")(1000.0), 3.0)
        self.assertEqual(compile_expression("abs(x)")(-4.0), 4.0)
        self.assertEqual(compile_expression("floor(x)")(2.7), 2.0)
        self.assertAlmostEqual(compile_expression("sqrt(x)")(2.0), math.sqrt(2.0))

    def test_unknown_names_are_rejected(self) -> None:
        for expr in ("y + 1", "__import__('os')", "foo(x)", "x if x else 1", "[x]"):
            with self.assertRaises(EvalError, msg=expr):
                compile_expression(expr)

    def test_syntax_errors_are_eval_errors(self) -> None:
        with self.assertRaises(EvalError):
            compile_expression("x +")
        with self.assertRaises(EvalError):
            compile_expression("   ")

    def test_domain_errors_surface_as_eval_errors(self) -> None:
        fn = compile_expression("ln(x)")
        with self.assertRaises(EvalError):
            fn(-1.0)
        with self.assertRaises(EvalError):
            compile_expression("1/x")(0.0)
        with self.assertRaises(EvalError):
            compile_expression("x^0.5")(-4.0)


class SampleFunctionTests(unittest.TestCase):
    def test_default_sample_count(self) -> None:
        sampled = sample_function(lambda x: x, (0.0, 1.0))
        self.assertEqual(len(sampled.series), 200)
        self.assertEqual(sampled.series.xs()[0], 0.0)
        self.assertEqual(sampled.series.xs()[-1], 1.0)
        self.assertEqual(sampled.diagnostics, ())

    def test_failed_samples_are_skipped_and_counted(self) -> None:
        with self.assertLogs("gridplot.adapters.function", level="WARNING"):
            sampled = sample_function(compile_expression("1/x"), (-1.0, 1.0), samples=3)
        self.assertEqual(sampled.series.xs().tolist(), [-1.0, 1.0])
        self.assertEqual(len(sampled.diagnostics), 1)
        self.assertEqual(sampled.diagnostics[0].kind, DiagnosticKind.EVAL_FAILURE)
        self.assertEqual(sampled.diagnostics[0].count, 1)

    def test_non_finite_results_are_failures(self) -> None:
        sampled = sample_function(lambda x: float("nan") if x < 0 else x, (-1.0, 1.0), samples=5)
        self.assertEqual(len(sampled.series), 3)
        self.assertEqual(sampled.diagnostics[0].count, 2)

    def test_all_samples_failing_is_fatal(self) -> None:
        with self.assertRaises(AllSamplesFailedError):
            sample_function(compile_expression("ln(x)"), (-5.0, -1.0), samples=10)

    def test_invalid_domain(self) -> None:
        with self.assertRaises(ValueError):
            sample_function(lambda x: x, (1.0, 1.0))
        with self.assertRaises(ValueError):
            sample_function(lambda x: x, (0.0, 1.0), samples=1)


class DefaultDomainTests(unittest.TestCase):
    def test_domain_hints(self) -> None:
        self.assertEqual(default_domain("exp(x)"), (-5.0, 5.0))
        self.assertEqual(default_domain("ln(x)"), (0.1, 10.0))
        self.assertEqual(default_domain("log10(x) + 1"), (0.1, 10.0))
        self.assertEqual(default_domain("sqrt(x)"), (0.0, 10.0))
        self.assertEqual(default_domain("tan(x)"), (-1.5, 1.5))
        self.assertEqual(default_domain("x^2"), (-10.0, 10.0))

    def test_hint_matches_whole_names_only(self) -> None:
        self.assertEqual(default_domain("atan(x)"), (-10.0, 10.0))


if __name__ == "__main__":
    unittest.main()
