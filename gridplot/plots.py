from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Sequence

import numpy as np

from gridplot.adapters.classify import reorder_categories
from gridplot.config import BarOptions, LineOptions, PlotConfig, ScatterOptions
from gridplot.errors import Diagnostic, DiagnosticKind, EmptyDatasetError, PlotDataError
from gridplot.figure import PlotResult, Tick, category_ticks, compose, numeric_ticks
from gridplot.layout import ElementKind, layout_elements
from gridplot.raster.canvas import CellPoint, CellWrite, LayeredCanvas, RenderPriority, draw_hline
from gridplot.raster.draw_lines import polyline_writes
from gridplot.raster.draw_markers import draw_markers
from gridplot.raster.draw_text import draw_text, fit_text, text_size
from gridplot.scales import AxisRange, format_tick, infer_range, map_to_cells, to_cell
from gridplot.series import Series


LOGGER = logging.getLogger(__name__)

PALETTE = ("blue", "red", "green", "yellow", "magenta", "cyan")
GRID_CHAR = "⋅"
ZERO_LINE_CHAR = "┄"
FRAME_COLOR = "bright_black"


@dataclass(frozen=True)
class _Axes:
    x_range: AxisRange
    y_range: AxisRange
    x_ticks: list[Tick]
    y_ticks: list[Tick]


def render_line(
    options: LineOptions,
    series: Series | Sequence[Series],
    *,
    diagnostics: Sequence[Diagnostic] = (),
) -> PlotResult:
    """Draw each series as a polyline in insertion order, markers on top.

    A point omitted for lying outside an explicit range breaks the path, so
    no stroke is drawn through it.
    """
    config = options.config
    style = options.style
    all_series = _as_series_tuple(series)
    diags = list(diagnostics)
    axes = _resolve_axes(config, all_series, diags)
    canvas = LayeredCanvas(config.width, config.height)
    _draw_background(canvas, config, axes)

    colors = series_colors(config.color, len(all_series))
    strokes: list[list[CellWrite]] = []
    markers: list[list[CellPoint]] = []
    omitted = 0
    for s, color in zip(all_series, colors):
        mapping = map_to_cells(s.xs(), s.ys(), axes.x_range, axes.y_range, config.width, config.height)
        omitted += mapping.omitted
        writes: list[CellWrite] = []
        kept: list[CellPoint] = []
        for start, stop in _contiguous_true_runs(mapping.keep):
            vertices = [CellPoint(int(c), int(r)) for c, r in zip(mapping.cols[start:stop], mapping.rows[start:stop])]
            kept.extend(vertices)
            if not style.show_lines:
                continue
            if len(vertices) == 1:
                writes.append(CellWrite(vertices[0].col, vertices[0].row, style.line_char, RenderPriority.LINE, color))
            else:
                writes.extend(polyline_writes(vertices, style.line_char, color))
        strokes.append(writes)
        markers.append(kept)

    for writes in strokes:
        canvas.apply(writes)
    if style.show_points:
        for kept, color in zip(markers, colors):
            draw_markers(canvas, kept, style.point_char, color)

    _report_omitted(omitted, diags)
    if config.show_legend and len(all_series) > 1:
        glyph = style.point_char if style.show_points else style.line_char
        draw_legend(canvas, [(glyph, _series_title(s, i), c) for i, (s, c) in enumerate(zip(all_series, colors))])
    return _finish(canvas, config, axes, diags)


def render_scatter(
    options: ScatterOptions,
    series: Series | Sequence[Series],
    *,
    diagnostics: Sequence[Diagnostic] = (),
) -> PlotResult:
    config = options.config
    all_series = _as_series_tuple(series)
    diags = list(diagnostics)
    axes = _resolve_axes(config, all_series, diags)
    canvas = LayeredCanvas(config.width, config.height)
    _draw_background(canvas, config, axes)

    colors = series_colors(config.color, len(all_series))
    omitted = 0
    for s, color in zip(all_series, colors):
        mapping = map_to_cells(s.xs(), s.ys(), axes.x_range, axes.y_range, config.width, config.height)
        omitted += mapping.omitted
        idx = np.flatnonzero(mapping.keep)
        cells = [CellPoint(int(mapping.cols[i]), int(mapping.rows[i])) for i in idx]
        draw_markers(canvas, cells, options.point_char, color)

    _report_omitted(omitted, diags)
    if config.show_legend and len(all_series) > 1:
        draw_legend(canvas, [(options.point_char, _series_title(s, i), c) for i, (s, c) in enumerate(zip(all_series, colors))])
    return _finish(canvas, config, axes, diags)


def render_bar(
    options: BarOptions,
    series: Series | Sequence[Series],
    *,
    diagnostics: Sequence[Diagnostic] = (),
) -> PlotResult:
    """One bar per point, placed left to right by the layout engine.

    Bars grow from 0 when the y range includes it, otherwise from the range
    edge nearest 0.
    """
    config = options.config
    if isinstance(series, Sequence):
        if len(series) != 1:
            raise PlotDataError(f"bar plots take exactly one series, got {len(series)}")
        series = series[0]
    if len(series) == 0:
        raise EmptyDatasetError("nothing to plot")
    if options.category_order:
        series = reorder_categories(series, options.category_order)
    diags = list(diagnostics)

    layout = layout_elements(config.width, len(series), ElementKind.BAR, overflow_policy=options.overflow)
    if layout.truncated:
        LOGGER.warning("showing %d of %d bars; %d did not fit", layout.displayed, len(series), layout.truncated)
        diags.append(
            Diagnostic(
                kind=DiagnosticKind.LAYOUT_OVERFLOW,
                message=f"showing {layout.displayed} of {len(series)} bars; {layout.truncated} did not fit",
                count=layout.truncated,
            )
        )
    points = series.points[: layout.displayed]
    ys = np.asarray([p.y for p in points], dtype=np.float64)
    y_range = _infer_axis(ys, config.y_range, config.padding, "y", diags, include=0.0)
    baseline = bar_baseline(y_range)
    base_row = to_cell(baseline, y_range, config.height, vertical=True)

    canvas = LayeredCanvas(config.width, config.height)
    y_ticks = numeric_ticks(y_range, config.height, vertical=True)
    if config.show_grid:
        for tick in y_ticks:
            _dotted_row(canvas, tick.position)
    if y_range.min < 0.0 < y_range.max:
        draw_hline(canvas, 0, config.width - 1, base_row, ZERO_LINE_CHAR, RenderPriority.BACKGROUND, FRAME_COLOR)

    color = config.color
    ticks: list[Tick] = []
    omitted = 0
    for i, point in enumerate(points):
        col0 = layout.position(i)
        label = point.label if point.label is not None else format_tick(point.x)
        ticks.append(Tick(position=layout.center(i), label=label))
        if y_range.explicit and not y_range.contains(point.y):
            omitted += 1
            continue
        top_row = to_cell(point.y, y_range, config.height, vertical=True)
        writes = [
            CellWrite(col, row, options.bar_char, RenderPriority.LINE, color)
            for col in range(col0, col0 + layout.element_width)
            for row in range(min(top_row, base_row), max(top_row, base_row) + 1)
        ]
        canvas.apply(writes)
        if options.show_values:
            _draw_bar_value(canvas, point.y, col0, layout.element_width, top_row, above=point.y >= baseline, color=color)

    _report_omitted(omitted, diags)
    x_range = AxisRange(min=0.0, max=float(max(config.width - 1, 1)))
    axes = _Axes(x_range=x_range, y_range=y_range, x_ticks=ticks, y_ticks=y_ticks)
    return _finish(canvas, config, axes, diags)


def bar_baseline(y_range: AxisRange) -> float:
    if y_range.min <= 0.0 <= y_range.max:
        return 0.0
    return y_range.min if y_range.min > 0.0 else y_range.max


def series_colors(color: str | None, count: int) -> list[str | None]:
    if count <= 1:
        return [color]
    palette = [color] + [c for c in PALETTE if c != color] if color else list(PALETTE)
    return [palette[i % len(palette)] for i in range(count)]


def draw_legend(canvas: LayeredCanvas, entries: Sequence[tuple[str, str, str | None]]) -> None:
    """Right-aligned ``<glyph> <name>`` rows in the top-right corner, one per series."""
    if not entries:
        return
    room = max(canvas.width - 2, 1)
    texts = [fit_text(name, room) for _, name, _ in entries]
    box_w = min(canvas.width, max(text_size(t) for t in texts) + 2)
    col = canvas.width - box_w
    for row, ((glyph, _, color), text) in enumerate(zip(entries, texts)):
        if row >= canvas.height:
            break
        # Blank the box first so strokes underneath do not show through.
        draw_text(canvas, col, row, " " * box_w)
        canvas.set(col, row, glyph, RenderPriority.LABEL, color)
        draw_text(canvas, col + 2, row, text)


def _as_series_tuple(series: Series | Sequence[Series]) -> tuple[Series, ...]:
    out = (series,) if isinstance(series, Series) else tuple(series)
    if not out or all(len(s) == 0 for s in out):
        raise EmptyDatasetError("nothing to plot")
    if len({s.kind for s in out}) > 1:
        raise PlotDataError("cannot mix numeric and categorical series in one plot")
    return out


def _series_title(series: Series, index: int) -> str:
    return series.name if series.name else f"series {index + 1}"


def _resolve_axes(config: PlotConfig, all_series: tuple[Series, ...], diags: list[Diagnostic]) -> _Axes:
    xs = np.concatenate([s.xs() for s in all_series])
    ys = np.concatenate([s.ys() for s in all_series])
    x_range = _infer_axis(xs, config.x_range, config.padding, "x", diags)
    y_range = _infer_axis(ys, config.y_range, config.padding, "y", diags)

    if all_series[0].is_categorical:
        # Categories sit at their shared ordinal, named by whichever series has them.
        names: dict[float, str] = {}
        for s in all_series:
            for point in s.points:
                names.setdefault(point.x, point.label)
        inside = [(x, names[x]) for x in sorted(names) if x_range.contains(x)]
        positions = [to_cell(x, x_range, config.width) for x, _ in inside]
        x_ticks = category_ticks([n for _, n in inside], positions)
    else:
        x_ticks = numeric_ticks(x_range, config.width)
    y_ticks = numeric_ticks(y_range, config.height, vertical=True)
    return _Axes(x_range=x_range, y_range=y_range, x_ticks=x_ticks, y_ticks=y_ticks)


def _infer_axis(
    values: np.ndarray,
    explicit: AxisRange | None,
    padding: float,
    axis: str,
    diags: list[Diagnostic],
    *,
    include: float | None = None,
) -> AxisRange:
    axis_range = infer_range(values, padding=padding, explicit=explicit, include=include)
    if axis_range.synthesized:
        center = (axis_range.min + axis_range.max) / 2
        LOGGER.warning("%s values collapse to %g; widened to %g..%g", axis, center, axis_range.min, axis_range.max)
        diags.append(
            Diagnostic(
                kind=DiagnosticKind.RANGE_DEGENERATE,
                message=(
                    f"all {axis} values equal {format_tick(center)}; "
                    f"range widened to {format_tick(axis_range.min)}..{format_tick(axis_range.max)}"
                ),
            )
        )
    return axis_range


def _draw_background(canvas: LayeredCanvas, config: PlotConfig, axes: _Axes) -> None:
    if config.show_grid:
        for tick in axes.y_ticks:
            _dotted_row(canvas, tick.position)
        for tick in axes.x_ticks:
            for row in range(0, canvas.height, 2):
                canvas.set(tick.position, row, GRID_CHAR, RenderPriority.BACKGROUND, FRAME_COLOR)
    if axes.y_range.min < 0.0 < axes.y_range.max:
        row = to_cell(0.0, axes.y_range, canvas.height, vertical=True)
        draw_hline(canvas, 0, canvas.width - 1, row, ZERO_LINE_CHAR, RenderPriority.BACKGROUND, FRAME_COLOR)


def _dotted_row(canvas: LayeredCanvas, row: int) -> None:
    for col in range(0, canvas.width, 2):
        canvas.set(col, row, GRID_CHAR, RenderPriority.BACKGROUND, FRAME_COLOR)


def _draw_bar_value(
    canvas: LayeredCanvas,
    value: float,
    col0: int,
    bar_width: int,
    top_row: int,
    *,
    above: bool,
    color: str | None,
) -> None:
    text = format_tick(value, step=_label_step(value))
    row = top_row - 1 if above else top_row + 1
    row = min(max(row, 0), canvas.height - 1)
    size = text_size(text)
    col = col0 + (bar_width - size) // 2
    col = min(max(col, 0), max(canvas.width - size, 0))
    draw_text(canvas, col, row, text, color)


def _label_step(value: float) -> float:
    return 1.0 if float(value).is_integer() else 0.01


def _report_omitted(omitted: int, diags: list[Diagnostic]) -> None:
    if not omitted:
        return
    LOGGER.warning("omitted %d point(s) outside the explicit axis range", omitted)
    diags.append(
        Diagnostic(
            kind=DiagnosticKind.OUT_OF_RANGE,
            message=f"omitted {omitted} point(s) outside the explicit axis range",
            count=omitted,
        )
    )


def _finish(canvas: LayeredCanvas, config: PlotConfig, axes: _Axes, diags: list[Diagnostic]) -> PlotResult:
    return compose(
        canvas.flatten(),
        x_ticks=axes.x_ticks,
        y_ticks=axes.y_ticks,
        title=config.title,
        x_label=config.x_label,
        y_label=config.y_label,
        diagnostics=diags,
        axis_color=FRAME_COLOR if config.color else None,
    )


def _contiguous_true_runs(mask: np.ndarray) -> list[tuple[int, int]]:
    idx = np.flatnonzero(mask)
    if idx.size == 0:
        return []
    runs: list[tuple[int, int]] = []
    start = int(idx[0])
    prev = int(idx[0])
    for v in idx[1:]:
        iv = int(v)
        if iv == prev + 1:
            prev = iv
            continue
        runs.append((start, prev + 1))
        start = iv
        prev = iv
    runs.append((start, prev + 1))
    return runs
