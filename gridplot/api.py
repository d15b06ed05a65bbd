from __future__ import annotations

from typing import Any, Callable, Sequence

from gridplot.adapters.aggregate import DEFAULT_DENSITY_POINTS, count_values, histogram, kernel_density
from gridplot.adapters.classify import (
    ColumnValues,
    MultiClassification,
    classify_columns,
    classify_dataframe,
    column_values,
    numeric_values,
    split_delimited,
)
from gridplot.adapters.function import DEFAULT_SAMPLES, compile_expression, default_domain, sample_function
from gridplot.config import BarOptions, LineOptions, PlotOptions, ScatterOptions
from gridplot.errors import Diagnostic, EmptyDatasetError
from gridplot.figure import PlotResult
from gridplot.plots import render_bar, render_line, render_scatter
from gridplot.series import Series


def render(
    options: PlotOptions,
    series: Series | Sequence[Series],
    *,
    diagnostics: Sequence[Diagnostic] = (),
) -> PlotResult:
    if isinstance(options, LineOptions):
        return render_line(options, series, diagnostics=diagnostics)
    if isinstance(options, ScatterOptions):
        return render_scatter(options, series, diagnostics=diagnostics)
    if isinstance(options, BarOptions):
        return render_bar(options, series, diagnostics=diagnostics)
    raise TypeError(f"unsupported options type: {type(options).__name__}")


def plot_csv(
    text: str,
    options: PlotOptions,
    *,
    label_column: int = 0,
    value_columns: Sequence[int] | None = None,
    has_header: bool | None = None,
    delimiter: str | None = None,
) -> PlotResult:
    rows = _rows(text, delimiter)
    if value_columns is None and isinstance(options, BarOptions):
        value_columns = (1 if label_column != 1 else 0,)
    result = classify_columns(rows, label_column=label_column, value_columns=value_columns, has_header=has_header)
    return _render_classified(options, result)


def plot_dataframe(frame: Any, options: PlotOptions, *, x: str | None = None, y: Sequence[str] | str | None = None) -> PlotResult:
    return _render_classified(options, classify_dataframe(frame, x=x, y=y))


def plot_function(
    function: str | Callable[[float], float] | Sequence[str],
    options: PlotOptions,
    *,
    domain: tuple[float, float] | None = None,
    samples: int = DEFAULT_SAMPLES,
) -> PlotResult:
    """Sample one or more functions of ``x`` and plot them.

    Expressions are compiled with ``compile_expression``; without an explicit
    domain the first expression picks one via ``default_domain``.
    """
    if isinstance(function, str) or callable(function):
        functions = [function]
    else:
        functions = list(function)
    if not functions:
        raise EmptyDatasetError("no functions to plot")
    if domain is None:
        first = functions[0]
        domain = default_domain(first) if isinstance(first, str) else default_domain("")

    series: list[Series] = []
    diagnostics: list[Diagnostic] = []
    for fn in functions:
        if isinstance(fn, str):
            sampled = sample_function(compile_expression(fn), domain, samples, name=fn)
        else:
            sampled = sample_function(fn, domain, samples, name=getattr(fn, "__name__", None))
        series.append(sampled.series)
        diagnostics.extend(sampled.diagnostics)
    return render(options, series, diagnostics=diagnostics)


def plot_histogram(
    text: str,
    options: BarOptions,
    *,
    column: int = 0,
    bins: int | None = None,
    bin_width: float | None = None,
    normalize: bool = False,
    has_header: bool | None = None,
    delimiter: str | None = None,
) -> PlotResult:
    """Bin one numeric column and draw the bins as bars."""
    values = column_values(_rows(text, delimiter), column, has_header=has_header)
    numbers, diagnostics = numeric_values(values)
    binned = histogram(numbers, bins=bins, bin_width=bin_width, normalize=normalize, name=values.name)
    return render_bar(options, binned.series, diagnostics=diagnostics + binned.diagnostics)


def plot_counts(
    text: str,
    options: BarOptions,
    *,
    column: int = 0,
    has_header: bool | None = None,
    delimiter: str | None = None,
) -> PlotResult:
    """One bar per distinct value of a column, as tall as its number of occurrences."""
    values: ColumnValues = column_values(_rows(text, delimiter), column, has_header=has_header)
    return render_bar(options, count_values(values.values, name=values.name), diagnostics=values.diagnostics)


def plot_density(
    text: str,
    options: LineOptions,
    *,
    column: int = 0,
    bandwidth: float | None = None,
    points: int = DEFAULT_DENSITY_POINTS,
    has_header: bool | None = None,
    delimiter: str | None = None,
) -> PlotResult:
    """Kernel density estimate of one numeric column, drawn as a line."""
    values = column_values(_rows(text, delimiter), column, has_header=has_header)
    numbers, diagnostics = numeric_values(values)
    series = kernel_density(numbers, bandwidth=bandwidth, points=points, name=values.name)
    return render_line(options, series, diagnostics=diagnostics)


def _rows(text: str, delimiter: str | None) -> list[list[str]]:
    rows = split_delimited(text, delimiter)
    if not rows:
        raise EmptyDatasetError("input has no rows")
    return rows


def _render_classified(options: PlotOptions, result: MultiClassification) -> PlotResult:
    return render(options, result.series, diagnostics=result.diagnostics)
