from __future__ import annotations

from typing import Iterable

from gridplot.raster.canvas import CellPoint, LayeredCanvas, RenderPriority


def draw_markers(
    canvas: LayeredCanvas,
    cells: Iterable[CellPoint],
    char: str,
    color: str | None = None,
    priority: RenderPriority = RenderPriority.POINT,
) -> int:
    drawn = 0
    for cell in cells:
        if canvas.set(cell.col, cell.row, char, priority, color):
            drawn += 1
    return drawn
