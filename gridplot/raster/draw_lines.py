from __future__ import annotations

from typing import Sequence

from gridplot.raster.canvas import CellPoint, CellWrite, LayeredCanvas, RenderPriority


def rasterize_line(start: CellPoint, end: CellPoint) -> list[CellPoint]:
    """Return the 8-connected cells from ``start`` to ``end``, both included.

    The walk always runs from the lexicographically smaller endpoint, so a
    segment and its reverse cover the same cells. On an exactly balanced
    error term only the major axis advances.
    """
    if (end.col, end.row) < (start.col, start.row):
        return rasterize_line(end, start)[::-1]

    dx = end.col - start.col
    dy = end.row - start.row
    sx = 1 if dx > 0 else -1
    sy = 1 if dy > 0 else -1
    adx = abs(dx)
    ady = abs(dy)
    steps = max(adx, ady)
    if steps == 0:
        return [start]

    x_major = adx >= ady
    minor_delta = ady if x_major else adx
    col = start.col
    row = start.row
    err = 0
    cells = [CellPoint(col, row)]
    for _ in range(steps):
        err += 2 * minor_delta
        step_minor = err > steps
        if step_minor:
            err -= 2 * steps
        if x_major:
            col += sx
            if step_minor:
                row += sy
        else:
            row += sy
            if step_minor:
                col += sx
        cells.append(CellPoint(col, row))
    return cells


def polyline_writes(
    vertices: Sequence[CellPoint],
    char: str,
    color: str | None = None,
    priority: RenderPriority = RenderPriority.LINE,
) -> list[CellWrite]:
    writes: list[CellWrite] = []
    for a, b in zip(vertices, vertices[1:]):
        for cell in rasterize_line(a, b):
            writes.append(CellWrite(col=cell.col, row=cell.row, char=char, priority=priority, color=color))
    return writes


def draw_polyline(
    canvas: LayeredCanvas,
    vertices: Sequence[CellPoint],
    char: str,
    color: str | None = None,
) -> int:
    if len(vertices) < 2:
        return 0
    return canvas.apply(polyline_writes(vertices, char, color))
