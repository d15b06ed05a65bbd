from .canvas import CellPoint, CellWrite, FlatGrid, LayeredCanvas, RenderPriority, draw_hline, draw_vline
from .draw_lines import draw_polyline, polyline_writes, rasterize_line
from .draw_markers import draw_markers
from .draw_text import draw_text, fit_text, text_size

__all__ = [
    "CellPoint",
    "CellWrite",
    "FlatGrid",
    "LayeredCanvas",
    "RenderPriority",
    "draw_hline",
    "draw_vline",
    "draw_markers",
    "draw_polyline",
    "draw_text",
    "fit_text",
    "polyline_writes",
    "rasterize_line",
    "text_size",
]
