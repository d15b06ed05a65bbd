from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from gridplot.errors import Diagnostic
from gridplot.raster.canvas import FlatGrid
from gridplot.raster.draw_text import fit_text, text_size
from gridplot.scales import AxisRange, format_ticks_for_axis, generate_nice_ticks, to_cell


Span = tuple[str, str | None]
StyledLine = tuple[Span, ...]

Y_TICK_GLYPH = "┤"
Y_AXIS_GLYPH = "│"
X_TICK_GLYPH = "┬"
X_AXIS_GLYPH = "─"
CORNER_GLYPH = "└"
LABEL_GAP = 1


@dataclass(frozen=True)
class Tick:
    position: int
    label: str


@dataclass(frozen=True)
class PlotResult:
    lines: tuple[StyledLine, ...]
    grid: FlatGrid
    diagnostics: tuple[Diagnostic, ...] = ()

    def plain_lines(self) -> list[str]:
        return ["".join(text for text, _ in line) for line in self.lines]

    @property
    def text(self) -> str:
        out = self.plain_lines()
        out.extend(d.render() for d in self.diagnostics)
        return "\n".join(out)


def tick_target(extent: int, *, cells_per_tick: int) -> int:
    return max(2, extent // cells_per_tick + 1)


def numeric_ticks(axis_range: AxisRange, extent: int, *, vertical: bool = False, target: int | None = None) -> list[Tick]:
    """Nice tick values inside ``axis_range`` mapped to cells; later ticks landing on a used cell are dropped."""
    if target is None:
        target = tick_target(extent, cells_per_tick=3 if vertical else 10)
    values = generate_nice_ticks(axis_range.min, axis_range.max, target)
    labels = format_ticks_for_axis(values)
    out: list[Tick] = []
    used: set[int] = set()
    for value, label in zip(values.tolist(), labels):
        cell = to_cell(value, axis_range, extent, vertical=vertical)
        if cell in used:
            continue
        used.add(cell)
        out.append(Tick(position=cell, label=label))
    return out


def category_ticks(labels: Sequence[str], positions: Sequence[int]) -> list[Tick]:
    if len(labels) != len(positions):
        raise ValueError("labels and positions must have the same length")
    return [Tick(position=int(p), label=str(lbl)) for lbl, p in zip(labels, positions)]


def place_tick_labels(ticks: Sequence[Tick], width: int) -> list[tuple[int, str]]:
    """Center each label under its tick, shifted inside ``[0, width)``.

    A label that would touch or overlap the previously placed one is dropped,
    as is any label wider than the row.
    """
    placed: list[tuple[int, str]] = []
    prev_end = -LABEL_GAP - 1
    for tick in sorted(ticks, key=lambda t: t.position):
        size = text_size(tick.label)
        if size == 0 or size > width:
            continue
        start = tick.position - (size - 1) // 2
        start = min(max(start, 0), width - size)
        if start < prev_end + LABEL_GAP + 1:
            continue
        placed.append((start, fit_text(tick.label, size)))
        prev_end = start + size - 1
    return placed


def compose(
    grid: FlatGrid,
    *,
    x_ticks: Sequence[Tick] = (),
    y_ticks: Sequence[Tick] = (),
    title: str = "",
    x_label: str | None = None,
    y_label: str | None = None,
    diagnostics: Sequence[Diagnostic] = (),
    axis_color: str | None = None,
) -> PlotResult:
    """Wrap the flattened grid with the axis frame and captions.

    Layout, top to bottom: title, y caption, one line per grid row prefixed
    by the tick label column and the y rule, the x rule, the x tick label
    row, the x caption. Diagnostics stay out of ``lines``.
    """
    y_by_row: dict[int, str] = {}
    for tick in y_ticks:
        y_by_row.setdefault(tick.position, tick.label)
    label_width = max([text_size(lbl) for lbl in y_by_row.values()] + [1])
    gutter = label_width + 1
    x_tick_cols = {t.position for t in x_ticks if 0 <= t.position < grid.width}

    lines: list[StyledLine] = []
    if title:
        lines.append((((" " * gutter + _center(fit_text(title, grid.width), grid.width)).rstrip(), None),))
    if y_label:
        lines.append(((fit_text(y_label, gutter + grid.width), None),))

    for row in range(grid.height):
        label = y_by_row.get(row, "")
        glyph = Y_TICK_GLYPH if row in y_by_row else Y_AXIS_GLYPH
        prefix: Span = (" " * (label_width - text_size(label)) + label, None)
        spans = [prefix, (glyph, axis_color)]
        spans.extend(_row_spans(grid, row))
        lines.append(tuple(spans))

    rule = "".join(X_TICK_GLYPH if col in x_tick_cols else X_AXIS_GLYPH for col in range(grid.width))
    lines.append(((" " * label_width, None), (CORNER_GLYPH + rule, axis_color)))

    placed = place_tick_labels(x_ticks, grid.width)
    if placed:
        cells = [" "] * grid.width
        for start, label in placed:
            for i, ch in enumerate(label):
                cells[start + i] = ch
        lines.append((((" " * gutter + "".join(cells)).rstrip(), None),))
    if x_label:
        lines.append((((" " * gutter + _center(fit_text(x_label, grid.width), grid.width)).rstrip(), None),))
    return PlotResult(lines=tuple(lines), grid=grid, diagnostics=tuple(diagnostics))


def _row_spans(grid: FlatGrid, row: int) -> list[Span]:
    # Merge runs of equally colored cells into one span.
    text = grid.rows[row]
    colors = grid.colors[row]
    spans: list[Span] = []
    start = 0
    for col in range(1, len(text) + 1):
        if col == len(text) or colors[col] != colors[start]:
            spans.append((text[start:col], colors[start]))
            start = col
    return spans


def _center(text: str, width: int) -> str:
    pad = max(0, width - text_size(text))
    return " " * (pad // 2) + text

