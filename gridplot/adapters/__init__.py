from gridplot.adapters.aggregate import Histogram, count_values, histogram, kernel_density
from gridplot.adapters.classify import (
    Classification,
    ColumnValues,
    MultiClassification,
    classify_columns,
    classify_rows,
    column_values,
    numeric_values,
    split_delimited,
)
from gridplot.adapters.function import SampledFunction, compile_expression, default_domain, sample_function

__all__ = [
    "Classification",
    "ColumnValues",
    "Histogram",
    "MultiClassification",
    "SampledFunction",
    "classify_columns",
    "classify_rows",
    "column_values",
    "compile_expression",
    "count_values",
    "default_domain",
    "histogram",
    "kernel_density",
    "numeric_values",
    "sample_function",
    "split_delimited",
]
