from __future__ import annotations

import unittest

from gridplot.adapters.classify import (
    ColumnValues,
    classify_columns,
    classify_dataframe,
    classify_rows,
    column_values,
    detect_delimiter,
    numeric_values,
    reorder_categories,
    split_delimited,
)
from gridplot.errors import DiagnosticKind, EmptyDatasetError, MalformedRowError, PlotDataError
from gridplot.series import DataPoint, Series, SeriesKind


class ClassifyRowsTests(unittest.TestCase):
    def test_one_text_label_makes_whole_column_categorical(self) -> None:
        result = classify_rows([["1", "2"], ["a", "3"]])
        series = result.series
        self.assertEqual(series.kind, SeriesKind.CATEGORICAL)
        self.assertEqual(series.labels, ("1", "a"))
        self.assertEqual(series.xs().tolist(), [0.0, 1.0])
        self.assertEqual(series.ys().tolist(), [2.0, 3.0])

    def test_numeric_labels_keep_their_values_and_order(self) -> None:
        result = classify_rows([["3", "1"], ["0", "2"], ["1.5", "4"]])
        self.assertEqual(result.series.kind, SeriesKind.NUMERIC)
        self.assertEqual(result.series.xs().tolist(), [3.0, 0.0, 1.5])
        self.assertEqual(result.diagnostics, ())

    def test_header_is_detected_from_non_numeric_value_field(self) -> None:
        result = classify_rows([["x", "y"], ["1", "2"]])
        self.assertEqual(result.series.name, "y")
        self.assertEqual(result.series.x_name, "x")
        self.assertEqual(len(result.series), 1)

    def test_explicit_no_header_keeps_first_row_as_data(self) -> None:
        with self.assertRaises(EmptyDatasetError):
            classify_rows([["1", "x"], ["2", "y"]], has_header=False)

    def test_name_overrides_header(self) -> None:
        result = classify_rows([["x", "y"], ["1", "2"]], name="sales")
        self.assertEqual(result.series.name, "sales")

    def test_malformed_rows_are_skipped_and_counted(self) -> None:
        rows = [["1", "2"], ["2", "oops"], ["3"], ["4", "5"]]
        with self.assertLogs("gridplot.adapters.classify", level="WARNING"):
            result = classify_rows(rows)
        self.assertEqual(result.series.xs().tolist(), [1.0, 4.0])
        self.assertEqual(len(result.diagnostics), 1)
        diag = result.diagnostics[0]
        self.assertEqual(diag.kind, DiagnosticKind.MALFORMED_ROW)
        self.assertEqual(diag.count, 2)

    def test_non_finite_values_are_malformed(self) -> None:
        result = classify_rows([["1", "nan"], ["2", "3"]], has_header=False)
        self.assertEqual(len(result.series), 1)
        self.assertEqual(result.diagnostics[0].count, 1)

    def test_missing_value_column_everywhere_is_fatal(self) -> None:
        with self.assertRaises(MalformedRowError):
            classify_rows([["1"], ["2"]])

    def test_no_rows_is_empty_dataset(self) -> None:
        with self.assertRaises(EmptyDatasetError):
            classify_rows([])

    def test_numeric_looking_labels_stay_labels_in_categorical_column(self) -> None:
        result = classify_rows([["2020", "1"], ["Q1", "2"], ["2021", "3"]])
        self.assertEqual(result.series.labels, ("2020", "Q1", "2021"))
        self.assertTrue(all(p.label is not None for p in result.series.points))


class ClassifyColumnsTests(unittest.TestCase):
    def test_one_series_per_value_column(self) -> None:
        rows = [["x", "a", "b"], ["1", "2", "3"], ["2", "4", "6"]]
        result = classify_columns(rows)
        self.assertEqual([s.name for s in result.series], ["a", "b"])
        self.assertEqual(result.series[1].ys().tolist(), [3.0, 6.0])

    def test_label_column_cannot_be_value_column(self) -> None:
        with self.assertRaises(ValueError):
            classify_columns([["1", "2"]], label_column=1, value_columns=(1,))

    def test_non_dataframe_input_raises_plot_data_error(self) -> None:
        with self.assertRaises(PlotDataError):
            classify_dataframe(object())

    def test_dataframe_columns_feed_the_classifier(self) -> None:
        try:
            import pandas as pd
        except Exception:
            self.skipTest("pandas is not installed")
        frame = pd.DataFrame({"city": ["a", "b"], "temp": [1.5, None], "rain": [3, 4]})
        result = classify_dataframe(frame, x="city")
        self.assertEqual([s.name for s in result.series], ["temp", "rain"])
        self.assertEqual(result.series[0].labels, ("a",))
        self.assertEqual(result.series[1].labels, ("a", "b"))

    def test_ragged_row_does_not_invent_a_column(self) -> None:
        result = classify_columns([["x", "y"], ["0", "0"], ["1", "1"], ["2", "4", ""]])
        self.assertEqual([s.name for s in result.series], ["y"])
        self.assertEqual(result.series[0].ys().tolist(), [0.0, 1.0, 4.0])
        self.assertEqual(result.diagnostics, ())

    def test_without_header_the_usual_row_width_decides(self) -> None:
        result = classify_columns([["0", "0"], ["1", "1"], ["2", "4", "9"]])
        self.assertEqual(len(result.series), 1)

    def test_column_without_valid_rows_is_dropped_and_reported(self) -> None:
        rows = [["x", "a", "b"], ["1", "2", ""], ["2", "3", "n/a"]]
        with self.assertLogs("gridplot.adapters.classify", level="WARNING"):
            result = classify_columns(rows)
        self.assertEqual([s.name for s in result.series], ["a"])
        self.assertEqual(len(result.diagnostics), 1)
        self.assertEqual(result.diagnostics[0].kind, DiagnosticKind.MALFORMED_ROW)
        self.assertIn("dropped column 'b'", result.diagnostics[0].message)
        self.assertEqual(result.diagnostics[0].count, 2)

    def test_every_column_empty_is_fatal(self) -> None:
        with self.assertRaises(EmptyDatasetError):
            classify_columns([["x", "a", "b"], ["1", "", ""], ["2", "-", ""]])

    def test_category_ordinals_are_shared_across_columns(self) -> None:
        rows = [["k", "a", "b"], ["x", "1", "1"], ["y", "2", ""], ["z", "3", "3"]]
        result = classify_columns(rows)
        a, b = result.series
        self.assertEqual(a.xs().tolist(), [0.0, 1.0, 2.0])
        self.assertEqual(b.xs().tolist(), [0.0, 2.0])
        self.assertEqual(b.labels, ("x", "z"))

    def test_repeated_category_keeps_its_first_ordinal(self) -> None:
        result = classify_rows([["a", "1"], ["b", "2"], ["a", "3"]])
        self.assertEqual(result.series.xs().tolist(), [0.0, 1.0, 0.0])

    def test_category_without_any_value_gets_no_slot(self) -> None:
        result = classify_rows([["a", "1"], ["b", ""], ["c", "3"]])
        self.assertEqual(result.series.xs().tolist(), [0.0, 1.0])
        self.assertEqual(result.series.labels, ("a", "c"))


class ColumnValuesTests(unittest.TestCase):
    def test_text_column_keeps_first_row_unless_told(self) -> None:
        rows = [["fruit"], ["apple"], ["pear"], ["apple"]]
        self.assertEqual(column_values(rows).values, ("fruit", "apple", "pear", "apple"))
        named = column_values(rows, has_header=True)
        self.assertEqual(named.name, "fruit")
        self.assertEqual(named.values, ("apple", "pear", "apple"))

    def test_numeric_column_header_is_detected(self) -> None:
        result = column_values([["h"], ["1"], [""], ["2"]])
        self.assertEqual(result.name, "h")
        self.assertEqual(result.values, ("1", "2"))
        self.assertEqual(result.diagnostics[0].count, 1)

    def test_second_column(self) -> None:
        result = column_values([["a", "1"], ["b", "2"]], 1)
        self.assertEqual(result.values, ("1", "2"))

    def test_missing_column_is_malformed(self) -> None:
        with self.assertRaises(MalformedRowError):
            column_values([["1"], ["2"]], 3)

    def test_numeric_values_skip_text(self) -> None:
        numbers, diagnostics = numeric_values(ColumnValues(values=("1", "x", "2"), name="v"))
        self.assertEqual(numbers.tolist(), [1.0, 2.0])
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0].count, 1)
        with self.assertRaises(EmptyDatasetError):
            numeric_values(ColumnValues(values=("x",)))


class SplitDelimitedTests(unittest.TestCase):
    def test_comma_separated(self) -> None:
        self.assertEqual(split_delimited("x,y\n0,0\n1,1\n"), [["x", "y"], ["0", "0"], ["1", "1"]])

    def test_whitespace_separated(self) -> None:
        self.assertEqual(split_delimited("1 2\n3   4\n"), [["1", "2"], ["3", "4"]])

    def test_quoted_fields_keep_commas(self) -> None:
        rows = split_delimited('name,value\n"a, b",3\n')
        self.assertEqual(rows[1], ["a, b", "3"])

    def test_delimiter_detection(self) -> None:
        self.assertEqual(detect_delimiter("a\tb"), "\t")
        self.assertEqual(detect_delimiter("a;b"), ";")
        self.assertEqual(detect_delimiter("a b"), " ")
        self.assertEqual(detect_delimiter("ab"), ",")

    def test_blank_text_has_no_rows(self) -> None:
        self.assertEqual(split_delimited("\n  \n"), [])


class ReorderCategoriesTests(unittest.TestCase):
    def test_named_categories_move_first(self) -> None:
        series = Series.from_labels([("a", 1), ("b", 2), ("c", 3)])
        reordered = reorder_categories(series, ["c"])
        self.assertEqual(reordered.labels, ("c", "a", "b"))
        self.assertEqual(reordered.xs().tolist(), [0.0, 1.0, 2.0])
        self.assertEqual(reordered.ys().tolist(), [3.0, 1.0, 2.0])

    def test_unknown_category_raises(self) -> None:
        series = Series.from_labels([("a", 1)])
        with self.assertRaises(PlotDataError):
            reorder_categories(series, ["z"])

    def test_numeric_series_cannot_be_reordered(self) -> None:
        with self.assertRaises(PlotDataError):
            reorder_categories(Series.from_xy([(0, 1)]), ["0"])


class SeriesTests(unittest.TestCase):
    def test_mixed_point_kinds_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Series(points=(DataPoint(0.0, 1.0), DataPoint(1.0, 2.0, label="b")), kind=SeriesKind.NUMERIC)


if __name__ == "__main__":
    unittest.main()
