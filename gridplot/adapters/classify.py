from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
import csv
from dataclasses import dataclass, replace
import logging
import math
from typing import Any

import numpy as np

from gridplot.errors import Diagnostic, DiagnosticKind, EmptyDatasetError, MalformedRowError, PlotDataError
from gridplot.series import DataPoint, Series, SeriesKind


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


LOGGER = logging.getLogger(__name__)
DELIMITER_CANDIDATES = (",", "\t", ";", "|")


@dataclass(frozen=True)
class Classification:
    series: Series
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class MultiClassification:
    series: tuple[Series, ...]
    diagnostics: tuple[Diagnostic, ...] = ()


def classify_rows(
    rows: Sequence[Sequence[str]],
    *,
    label_column: int = 0,
    value_column: int = 1,
    has_header: bool | None = None,
    name: str | None = None,
) -> Classification:
    result = classify_columns(
        rows,
        label_column=label_column,
        value_columns=(value_column,),
        has_header=has_header,
    )
    series = result.series[0]
    if name is not None:
        series = replace(series, name=name)
    return Classification(series=series, diagnostics=result.diagnostics)


def classify_columns(
    rows: Sequence[Sequence[str]],
    *,
    label_column: int = 0,
    value_columns: Sequence[int] | None = None,
    has_header: bool | None = None,
) -> MultiClassification:
    """Classify the label column once, then parse every value column against that decision.

    Pass 1 looks at every label in the dataset: a single label that is not a
    finite number makes the whole column categorical, and each category gets
    one ordinal, in order of first appearance, shared by every value column.
    Pass 2 builds one Series per value column; rows with a missing field or an
    unparseable value are skipped and reported as one MALFORMED_ROW diagnostic
    per column. A column left with no valid rows is dropped the same way.
    """
    table = [[str(field).strip() for field in row] for row in rows]
    if not table:
        raise EmptyDatasetError("no rows to classify")
    if label_column < 0:
        raise ValueError("label_column must be >= 0")
    if value_columns is not None:
        value_columns = tuple(value_columns)
        if not value_columns:
            raise MalformedRowError("data needs a label column and at least one value column")
        if label_column in value_columns:
            raise ValueError("label_column cannot also be a value column")
        if any(col < 0 for col in value_columns):
            raise ValueError("value columns must be >= 0")
        sample_column = value_columns[0]
    else:
        sample_column = 1 if label_column == 0 else 0

    header, body, first_line = _split_header(table, sample_column, has_header)
    if not body:
        raise EmptyDatasetError("no data rows after the header")
    if value_columns is None:
        # A ragged row must not invent a column; the header or the usual row width decides.
        width = len(header) if header is not None else _modal_width(body)
        value_columns = tuple(col for col in range(width) if col != label_column)
        if not value_columns:
            raise MalformedRowError("data needs a label column and at least one value column")
    if not any(len(row) > label_column and any(len(row) > col for col in value_columns) for row in body):
        raise MalformedRowError(
            f"no row has both column {label_column} and a value column {list(value_columns)}"
        )

    categorical = any(_is_text_label(_field(row, label_column)) for row in body)
    kind = SeriesKind.CATEGORICAL if categorical else SeriesKind.NUMERIC
    ordinals: dict[str, float] = {}
    if categorical:
        for row in body:
            label = _field(row, label_column)
            if label and label not in ordinals and any(_parse_number(_field(row, col)) is not None for col in value_columns):
                ordinals[label] = float(len(ordinals))
    LOGGER.debug("label column %d classified as %s over %d rows", label_column, kind.value, len(body))

    x_name = _column_name(header, label_column)
    out: list[Series] = []
    diagnostics: list[Diagnostic] = []
    for col in value_columns:
        name = _column_name(header, col) or f"col_{col}"
        points: list[DataPoint] = []
        skipped = 0
        for offset, row in enumerate(body):
            label = _field(row, label_column)
            raw_y = _field(row, col)
            y = _parse_number(raw_y) if raw_y else None
            x = ordinals.get(label) if categorical else _parse_number(label)
            if not label or y is None or x is None:
                skipped += 1
                LOGGER.debug("skipping line %d for %s: label=%r value=%r", first_line + offset, name, label, raw_y)
                continue
            points.append(DataPoint(x=x, y=y, label=label if categorical else None))
        if not points:
            LOGGER.warning("dropping column %s: none of its %d row(s) is usable", name, len(body))
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MALFORMED_ROW,
                    message=f"dropped column '{name}': no valid rows",
                    count=skipped,
                )
            )
            continue
        if skipped:
            LOGGER.warning("skipped %d malformed row(s) in column %s", skipped, name)
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MALFORMED_ROW,
                    message=f"skipped {skipped} malformed row(s) in column '{name}'",
                    count=skipped,
                )
            )
        out.append(Series(points=tuple(points), kind=kind, name=name, x_name=x_name))
    if not out:
        raise EmptyDatasetError("no value column has a valid row")
    return MultiClassification(series=tuple(out), diagnostics=tuple(diagnostics))


@dataclass(frozen=True)
class ColumnValues:
    values: tuple[str, ...]
    name: str | None = None
    diagnostics: tuple[Diagnostic, ...] = ()


def column_values(
    rows: Sequence[Sequence[str]],
    column: int = 0,
    *,
    has_header: bool | None = None,
) -> ColumnValues:
    """Collect the non-empty fields of one column, in row order.

    With ``has_header=None`` the first row is a header when its field is not
    a number but some later field is; an all-text column keeps its first row
    unless told otherwise.
    """
    if column < 0:
        raise ValueError("column must be >= 0")
    table = [[str(field).strip() for field in row] for row in rows]
    if not table:
        raise EmptyDatasetError("no rows to read")
    if not any(len(row) > column for row in table):
        raise MalformedRowError(f"no row has column {column}")
    if has_header is None:
        first = _field(table[0], column)
        has_header = _is_text_label(first) and any(_parse_number(_field(row, column)) is not None for row in table[1:])
    header = table[0] if has_header else None
    body = table[1:] if has_header else table

    values = tuple(_field(row, column) for row in body if _field(row, column))
    name = _column_name(header, column)
    diagnostics: tuple[Diagnostic, ...] = ()
    missing = len(body) - len(values)
    if missing:
        LOGGER.warning("skipped %d row(s) with an empty column %d", missing, column)
        diagnostics = (
            Diagnostic(
                kind=DiagnosticKind.MALFORMED_ROW,
                message=f"skipped {missing} row(s) with no value in column '{name or column}'",
                count=missing,
            ),
        )
    if not values:
        raise EmptyDatasetError(f"column {column} has no values")
    return ColumnValues(values=values, name=name, diagnostics=diagnostics)


def numeric_values(column: ColumnValues) -> tuple[np.ndarray, tuple[Diagnostic, ...]]:
    """Parse a column as finite numbers; the rest are skipped and counted."""
    parsed = [_parse_number(value) for value in column.values]
    numbers = [value for value in parsed if value is not None]
    diagnostics = list(column.diagnostics)
    bad = len(parsed) - len(numbers)
    if bad:
        LOGGER.warning("skipped %d non-numeric value(s) in column %s", bad, column.name)
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.MALFORMED_ROW,
                message=f"skipped {bad} non-numeric value(s) in column '{column.name or 'values'}'",
                count=bad,
            )
        )
    if not numbers:
        raise EmptyDatasetError("column has no numeric values")
    return np.asarray(numbers, dtype=np.float64), tuple(diagnostics)


def split_delimited(text: str, delimiter: str | None = None) -> list[list[str]]:
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return []
    if delimiter is None:
        delimiter = detect_delimiter(lines[0])
    if delimiter.isspace():
        return [line.split() for line in lines]
    reader = csv.reader(lines, delimiter=delimiter)
    return [[field.strip() for field in row] for row in reader]


def detect_delimiter(line: str) -> str:
    for candidate in DELIMITER_CANDIDATES:
        if candidate in line:
            return candidate
    if any(ch.isspace() for ch in line.strip()):
        return " "
    return ","


def classify_dataframe(frame: Any, *, x: str | None = None, y: Sequence[str] | str | None = None) -> MultiClassification:
    if pd is None:
        raise PlotDataError("pandas is required for DataFrame input")
    if not isinstance(frame, pd.DataFrame):
        raise PlotDataError("frame must be a pandas DataFrame")
    columns = [str(c) for c in frame.columns]
    if len(columns) < 2:
        raise MalformedRowError("DataFrame input needs at least two columns")
    x_col = columns[0] if x is None else str(x)
    if x_col not in columns:
        raise PlotDataError(f"column not found: {x_col}")
    if y is None:
        y_cols = [c for c in columns if c != x_col]
    elif isinstance(y, str):
        y_cols = [y]
    else:
        y_cols = [str(c) for c in y]
    for col in y_cols:
        if col not in columns:
            raise PlotDataError(f"column not found: {col}")

    ordered = [x_col] + y_cols
    rows: list[list[str]] = [ordered]
    for record in frame[ordered].itertuples(index=False, name=None):
        rows.append(["" if pd.isna(value) else str(value) for value in record])
    return classify_columns(rows, label_column=0, value_columns=tuple(range(1, len(ordered))), has_header=True)


def reorder_categories(series: Series, order: Sequence[str]) -> Series:
    if not series.is_categorical:
        raise PlotDataError("category order only applies to categorical data")
    known = set(series.labels)
    unknown = [name for name in order if name not in known]
    if unknown:
        raise PlotDataError(f"unknown categories in order: {', '.join(unknown)}")
    rank = {name: i for i, name in enumerate(order)}
    ranked = sorted(
        enumerate(series.points),
        key=lambda item: (rank.get(item[1].label, len(rank)), item[0]),
    )
    points = tuple(
        DataPoint(x=float(i), y=point.y, label=point.label) for i, (_, point) in enumerate(ranked)
    )
    return Series(points=points, kind=series.kind, name=series.name, x_name=series.x_name)


def _split_header(
    table: list[list[str]],
    sample_column: int,
    has_header: bool | None,
) -> tuple[list[str] | None, list[list[str]], int]:
    if has_header is None:
        first = _field(table[0], sample_column)
        has_header = bool(first) and _parse_number(first) is None
    if has_header:
        return table[0], table[1:], 2
    return None, table, 1


def _column_name(header: list[str] | None, col: int) -> str | None:
    if header is None or col >= len(header) or not header[col]:
        return None
    return header[col]


def _field(row: Sequence[str], col: int) -> str:
    if col >= len(row):
        return ""
    return row[col]


def _is_text_label(text: str) -> bool:
    return bool(text) and _parse_number(text) is None


def _parse_number(text: str) -> float | None:
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def _modal_width(body: list[list[str]]) -> int:
    # Most common row width; ties go to the wider one.
    counts = Counter(len(row) for row in body)
    return max(counts, key=lambda width: (counts[width], width))
