from __future__ import annotations

import unicodedata

from gridplot.raster.canvas import LayeredCanvas, RenderPriority


def draw_text(
    canvas: LayeredCanvas,
    col: int,
    row: int,
    text: str,
    color: str | None = None,
    *,
    priority: RenderPriority = RenderPriority.LABEL,
) -> int:
    """Write ``text`` left to right from ``(col, row)``; cells past the right edge are dropped."""
    drawn = 0
    for i, ch in enumerate(_single_cell_chars(text)):
        if canvas.set(col + i, row, ch, priority, color):
            drawn += 1
    return drawn


def text_size(text: str) -> int:
    return len(_single_cell_chars(text))


def fit_text(text: str, width: int) -> str:
    chars = _single_cell_chars(text)
    if width <= 0:
        return ""
    if len(chars) <= width:
        return "".join(chars)
    if width == 1:
        return chars[0]
    return "".join(chars[: width - 1]) + "…"


def _single_cell_chars(text: str) -> list[str]:
    # Combining marks and zero-width characters have no cell of their own.
    return [ch for ch in text if unicodedata.category(ch) not in {"Mn", "Me", "Cf", "Cc"}]
