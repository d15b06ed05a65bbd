from __future__ import annotations

import unittest

from gridplot.raster.canvas import CellPoint, CellWrite, LayeredCanvas, RenderPriority, draw_hline, draw_vline
from gridplot.raster.draw_lines import draw_polyline, polyline_writes, rasterize_line
from gridplot.raster.draw_markers import draw_markers
from gridplot.raster.draw_text import draw_text, fit_text, text_size


class RasterizeLineTests(unittest.TestCase):
    def test_horizontal_line_covers_every_column(self) -> None:
        cells = rasterize_line(CellPoint(0, 0), CellPoint(5, 0))
        self.assertEqual(cells, [CellPoint(c, 0) for c in range(6)])

    def test_degenerate_segment_is_one_cell(self) -> None:
        self.assertEqual(rasterize_line(CellPoint(3, 4), CellPoint(3, 4)), [CellPoint(3, 4)])

    def test_reverse_segment_covers_same_cells(self) -> None:
        forward = rasterize_line(CellPoint(0, 0), CellPoint(5, 3))
        backward = rasterize_line(CellPoint(5, 3), CellPoint(0, 0))
        self.assertEqual(forward, backward[::-1])

    def test_paths_are_gap_free_for_all_slopes(self) -> None:
        start = CellPoint(6, 6)
        for col in range(0, 13):
            for row in range(0, 13):
                end = CellPoint(col, row)
                cells = rasterize_line(start, end)
                self.assertEqual(cells[0], start)
                self.assertEqual(cells[-1], end)
                self.assertEqual(len(cells), max(abs(col - 6), abs(row - 6)) + 1)
                for a, b in zip(cells, cells[1:]):
                    self.assertEqual(max(abs(a.col - b.col), abs(a.row - b.row)), 1)

    def test_balanced_error_advances_major_axis_only(self) -> None:
        cells = rasterize_line(CellPoint(0, 0), CellPoint(2, 1))
        self.assertEqual(cells, [CellPoint(0, 0), CellPoint(1, 0), CellPoint(2, 1)])

    def test_steep_line_steps_rows(self) -> None:
        cells = rasterize_line(CellPoint(0, 0), CellPoint(1, 4))
        self.assertEqual([c.row for c in cells], [0, 1, 2, 3, 4])


class LayeredCanvasTests(unittest.TestCase):
    def test_lower_priority_never_overwrites(self) -> None:
        canvas = LayeredCanvas(4, 2)
        self.assertTrue(canvas.set(1, 1, "·", RenderPriority.LINE))
        self.assertFalse(canvas.set(1, 1, "┄", RenderPriority.BACKGROUND))
        self.assertTrue(canvas.set(1, 1, "●", RenderPriority.POINT))
        self.assertEqual(canvas.priority_at(1, 1), RenderPriority.POINT)
        self.assertEqual(canvas.flatten().char_at(1, 1), "●")

    def test_equal_priority_latest_write_wins(self) -> None:
        canvas = LayeredCanvas(2, 1)
        canvas.set(0, 0, "a", RenderPriority.LINE, "red")
        canvas.set(0, 0, "b", RenderPriority.LINE, "blue")
        grid = canvas.flatten()
        self.assertEqual(grid.char_at(0, 0), "b")
        self.assertEqual(grid.color_at(0, 0), "blue")

    def test_out_of_bounds_writes_are_ignored(self) -> None:
        canvas = LayeredCanvas(3, 3)
        self.assertFalse(canvas.set(-1, 0, "x", RenderPriority.LABEL))
        self.assertFalse(canvas.set(0, 3, "x", RenderPriority.LABEL))
        self.assertEqual(canvas.flatten().rows, ("   ", "   ", "   "))

    def test_flatten_seals_canvas(self) -> None:
        canvas = LayeredCanvas(2, 2)
        canvas.flatten()
        with self.assertRaises(RuntimeError):
            canvas.set(0, 0, "x", RenderPriority.LINE)

    def test_multi_character_content_rejected(self) -> None:
        canvas = LayeredCanvas(2, 2)
        with self.assertRaises(ValueError):
            canvas.set(0, 0, "ab", RenderPriority.LINE)

    def test_apply_merges_batches_in_order(self) -> None:
        canvas = LayeredCanvas(3, 1)
        written = canvas.apply(
            [
                CellWrite(0, 0, "a", RenderPriority.POINT),
                CellWrite(0, 0, "b", RenderPriority.LINE),
                CellWrite(1, 0, "c", RenderPriority.LINE),
                CellWrite(5, 0, "d", RenderPriority.LINE),
            ]
        )
        self.assertEqual(written, 2)
        self.assertEqual(canvas.flatten().rows, ("ac ",))

    def test_invalid_dimensions(self) -> None:
        with self.assertRaises(ValueError):
            LayeredCanvas(0, 3)

    def test_hline_and_vline_clip(self) -> None:
        canvas = LayeredCanvas(4, 3)
        draw_hline(canvas, -2, 10, 1, "-", RenderPriority.BACKGROUND)
        draw_vline(canvas, 0, -5, 5, "|", RenderPriority.LINE)
        self.assertEqual(canvas.flatten().rows, ("|   ", "|---", "|   "))


class PrimitiveTests(unittest.TestCase):
    def test_polyline_does_not_cover_markers(self) -> None:
        canvas = LayeredCanvas(6, 1)
        draw_markers(canvas, [CellPoint(2, 0)], "●")
        draw_polyline(canvas, [CellPoint(0, 0), CellPoint(5, 0)], "·")
        self.assertEqual(canvas.flatten().rows, ("··●···",))

    def test_polyline_writes_share_vertices(self) -> None:
        writes = polyline_writes([CellPoint(0, 0), CellPoint(2, 0), CellPoint(2, 2)], "·")
        self.assertEqual(len(writes), 6)
        self.assertTrue(all(w.priority is RenderPriority.LINE for w in writes))

    def test_single_vertex_polyline_draws_nothing(self) -> None:
        canvas = LayeredCanvas(2, 2)
        self.assertEqual(draw_polyline(canvas, [CellPoint(0, 0)], "·"), 0)

    def test_text_is_clipped_at_right_edge(self) -> None:
        canvas = LayeredCanvas(5, 1)
        self.assertEqual(draw_text(canvas, 3, 0, "hello"), 2)
        self.assertEqual(canvas.flatten().rows, ("   he",))

    def test_text_fitting(self) -> None:
        self.assertEqual(fit_text("abcdef", 4), "abc…")
        self.assertEqual(fit_text("abc", 4), "abc")
        self.assertEqual(fit_text("abc", 0), "")
        self.assertEqual(text_size("é"), 1)


if __name__ == "__main__":
    unittest.main()
