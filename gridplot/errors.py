from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PlotDataError(ValueError):
    """Base class for data problems that stop a plot from rendering."""


class MalformedRowError(PlotDataError):
    pass


class EmptyDatasetError(PlotDataError):
    pass


class EvalError(PlotDataError):
    pass


class AllSamplesFailedError(PlotDataError):
    pass


class LayoutOverflowError(PlotDataError):
    def __init__(self, message: str, *, truncated: int) -> None:
        super().__init__(message)
        self.truncated = truncated


class DiagnosticKind(str, Enum):
    MALFORMED_ROW = "malformed_row"
    RANGE_DEGENERATE = "range_degenerate"
    EVAL_FAILURE = "eval_failure"
    LAYOUT_OVERFLOW = "layout_overflow"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    count: int = 1

    def render(self) -> str:
        return f"warning: {self.message}"
