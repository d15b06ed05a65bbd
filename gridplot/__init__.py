from gridplot.api import plot_counts, plot_csv, plot_dataframe, plot_density, plot_function, plot_histogram, render
from gridplot.config import BarOptions, LineOptions, LineStyle, PlotConfig, ScatterOptions, line_style, load_config
from gridplot.errors import Diagnostic, DiagnosticKind, PlotDataError
from gridplot.figure import PlotResult
from gridplot.plots import render_bar, render_line, render_scatter
from gridplot.scales import AxisRange
from gridplot.series import DataPoint, Series, SeriesKind

__all__ = [
    "AxisRange",
    "BarOptions",
    "DataPoint",
    "Diagnostic",
    "DiagnosticKind",
    "LineOptions",
    "LineStyle",
    "PlotConfig",
    "PlotDataError",
    "PlotResult",
    "ScatterOptions",
    "Series",
    "SeriesKind",
    "line_style",
    "load_config",
    "plot_counts",
    "plot_csv",
    "plot_dataframe",
    "plot_density",
    "plot_function",
    "plot_histogram",
    "render",
    "render_bar",
    "render_line",
    "render_scatter",
]
