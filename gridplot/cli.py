from __future__ import annotations

import argparse
from dataclasses import replace
import logging
from pathlib import Path
import sys
from typing import Sequence, TextIO

from gridplot.api import plot_counts, plot_csv, plot_density, plot_function, plot_histogram
from gridplot.config import (
    BarOptions,
    ConfigFile,
    LineOptions,
    PlotConfig,
    PlotOptions,
    LINE_STYLE_PRESETS,
    ScatterOptions,
    config_from_mapping,
    line_style,
    load_config,
    parse_range,
)
from gridplot.errors import PlotDataError
from gridplot.figure import PlotResult
from gridplot.layout import OverflowPolicy
from gridplot.output import write_result


LOGGER = logging.getLogger(__name__)
FUNCTION_PREFIX = "function:"
BAR_KINDS = ("bar", "hist", "count")
LINE_KINDS = ("line", "density")
FUNCTION_KINDS = ("line", "scatter", "bar")


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("source", help="Input file, '-' for stdin, or function:<expr> (e.g. 'function:sin(x)').")
    common.add_argument("--config", type=Path, default=None, help="TOML file with [plot], [line], [scatter], [bar] tables.")
    common.add_argument("-t", "--title", default=None)
    common.add_argument("-w", "--width", type=int, default=None, help="Plot area width in characters.")
    common.add_argument("--height", type=int, default=None, help="Plot area height in characters.")
    common.add_argument("-c", "--color", default=None, help="Named color (red, bright_blue, ...) or #RRGGBB.")
    common.add_argument("--xlim", type=_range_arg, default=None, help="Explicit x range as min:max (use --xlim=-5:5 for a negative minimum).")
    common.add_argument("--ylim", type=_range_arg, default=None, help="Explicit y range as min:max.")
    common.add_argument("--xlabel", default=None)
    common.add_argument("--ylabel", default=None)
    common.add_argument("--padding", type=float, default=None, help="Fraction of the data range added as margin.")
    common.add_argument("--grid", action="store_true", default=None, help="Draw background grid dots.")
    common.add_argument("--no-legend", action="store_true", help="Hide the multi-series legend.")
    common.add_argument("-d", "--delimiter", default=None, help="Field delimiter. Default: detected from the first line.")
    header = common.add_mutually_exclusive_group()
    header.add_argument("-H", "--header", dest="has_header", action="store_const", const=True, default=None)
    header.add_argument("--no-header", dest="has_header", action="store_const", const=False)
    common.add_argument("-o", "--output", type=Path, default=None, help="Write the plot to a file instead of stdout.")
    common.add_argument("--no-color", action="store_true")
    common.add_argument("-v", "--verbose", action="store_true")

    # Column selection for plots of paired values.
    paired = argparse.ArgumentParser(add_help=False)
    paired.add_argument("--label-column", type=_count_arg(0), default=0)
    paired.add_argument("--value-columns", type=_columns_arg, default=None, help="Comma-separated value columns.")
    paired.add_argument("--domain", type=_range_arg, default=None, help="x domain for function: sources, as min:max.")
    paired.add_argument("--samples", type=_count_arg(2), default=200, help="Samples per function: source.")

    # Plots built from a single column of values.
    single = argparse.ArgumentParser(add_help=False)
    single.add_argument("--column", type=_count_arg(0), default=0, help="Column holding the values.")

    line_flags = argparse.ArgumentParser(add_help=False)
    line_flags.add_argument("--style", choices=sorted(LINE_STYLE_PRESETS), default=None)
    line_flags.add_argument("--point-char", default=None)
    line_flags.add_argument("--line-char", default=None)
    only = line_flags.add_mutually_exclusive_group()
    only.add_argument("--points-only", action="store_true")
    only.add_argument("--lines-only", action="store_true")

    bar_flags = argparse.ArgumentParser(add_help=False)
    bar_flags.add_argument("--symbol", default=None, help="Bar fill character.")
    bar_flags.add_argument("--show-values", action="store_true", default=None)
    bar_flags.add_argument("--order", type=_names_arg, default=None, help="Comma-separated category order.")
    bar_flags.add_argument("--overflow", choices=[p.value for p in OverflowPolicy], default=None, help="What to do when bars do not fit.")

    parser = argparse.ArgumentParser(prog="gridplot", description="Plot data as text in the terminal.")
    sub = parser.add_subparsers(dest="kind", required=True)
    sub.add_parser("line", parents=[common, paired, line_flags], help="Line plot.")
    scatter = sub.add_parser("scatter", parents=[common, paired], help="Scatter plot.")
    scatter.add_argument("--symbol", default=None, help="Marker character.")
    sub.add_parser("bar", parents=[common, paired, bar_flags], help="Bar chart.")

    hist = sub.add_parser("hist", parents=[common, single, bar_flags], help="Histogram of one numeric column.")
    bins = hist.add_mutually_exclusive_group()
    bins.add_argument("--bins", type=_count_arg(1), default=None, help="Number of bins. Default: Sturges' rule.")
    bins.add_argument("--bin-width", type=_positive_arg, default=None)
    hist.add_argument("--normalize", action="store_true", help="Show fractions of the total instead of counts.")

    sub.add_parser("count", parents=[common, single, bar_flags], help="Occurrences of each distinct value in a column.")

    density = sub.add_parser("density", parents=[common, single, line_flags], help="Kernel density estimate of one numeric column.")
    density.add_argument("--bandwidth", type=_positive_arg, default=None, help="Kernel bandwidth. Default: Scott's rule.")
    return parser


def main(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None, stdout: TextIO | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    try:
        base = load_config(args.config) if args.config is not None else config_from_mapping({})
        options = options_from_args(args, base)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))
    value_columns = getattr(args, "value_columns", None)
    if value_columns is not None and args.label_column in value_columns:
        parser.error("--label-column cannot also be one of --value-columns")
    if args.source.startswith(FUNCTION_PREFIX) and args.kind not in FUNCTION_KINDS:
        parser.error(f"function: sources work with {', '.join(FUNCTION_KINDS)} plots, not {args.kind}")

    try:
        result = _plot(parser, args, options, stdin)
    except PlotDataError as exc:
        LOGGER.debug("plot failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        parser.error(str(exc))

    if args.output is not None:
        with args.output.open("w", encoding="utf-8") as f:
            write_result(result, f, color=False)
    else:
        write_result(result, stdout, color=not args.no_color)
    return 0


def _plot(parser: argparse.ArgumentParser, args: argparse.Namespace, options: PlotOptions, stdin: TextIO) -> PlotResult:
    if args.source.startswith(FUNCTION_PREFIX):
        expression = args.source[len(FUNCTION_PREFIX) :]
        domain = (args.domain.min, args.domain.max) if args.domain is not None else None
        return plot_function(expression, options, domain=domain, samples=args.samples)

    text = _read_source(parser, args.source, stdin)
    read = {"has_header": args.has_header, "delimiter": args.delimiter}
    if args.kind == "hist":
        return plot_histogram(text, options, column=args.column, bins=args.bins, bin_width=args.bin_width, normalize=args.normalize, **read)
    if args.kind == "count":
        return plot_counts(text, options, column=args.column, **read)
    if args.kind == "density":
        return plot_density(text, options, column=args.column, bandwidth=args.bandwidth, **read)
    return plot_csv(text, options, label_column=args.label_column, value_columns=args.value_columns, **read)


def options_from_args(args: argparse.Namespace, base: ConfigFile) -> PlotOptions:
    overrides = {
        "title": args.title,
        "width": args.width,
        "height": args.height,
        "color": args.color,
        "x_range": args.xlim,
        "y_range": args.ylim,
        "x_label": args.xlabel,
        "y_label": args.ylabel,
        "padding": args.padding,
        "show_grid": args.grid,
    }
    plot: PlotConfig = replace(base.plot, **{k: v for k, v in overrides.items() if v is not None})
    if args.no_legend:
        plot = replace(plot, show_legend=False)

    if args.kind in LINE_KINDS:
        style = base.line.style
        customized = args.style is not None or args.point_char or args.line_char or args.points_only or args.lines_only
        if customized:
            preset = args.style or "default"
            style = line_style(
                preset,
                point_char=args.point_char,
                line_char=args.line_char,
                points_only=args.points_only,
                lines_only=args.lines_only,
            )
        elif args.kind == "density" and style.show_lines:
            # A density curve is sampled densely; markers on every sample only add noise.
            style = replace(style, show_points=False)
        return LineOptions(config=plot, style=style)
    if args.kind == "scatter":
        scatter: ScatterOptions = replace(base.scatter, config=plot)
        if args.symbol:
            scatter = replace(scatter, point_char=args.symbol)
        return scatter
    bar: BarOptions = replace(base.bar, config=plot)
    if args.symbol:
        bar = replace(bar, bar_char=args.symbol)
    if args.show_values:
        bar = replace(bar, show_values=True)
    if args.order is not None:
        bar = replace(bar, category_order=args.order)
    if args.overflow is not None:
        bar = replace(bar, overflow=OverflowPolicy(args.overflow))
    return bar


def _read_source(parser: argparse.ArgumentParser, source: str, stdin: TextIO) -> str:
    if source == "-":
        return stdin.read()
    path = Path(source)
    if not path.is_file():
        parser.error(f"input file not found: {source}")
    return path.read_text(encoding="utf-8")


def _range_arg(text: str):
    try:
        return parse_range(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _count_arg(minimum: int):
    def parse(text: str) -> int:
        try:
            value = int(text)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}") from exc
        if value < minimum:
            raise argparse.ArgumentTypeError(f"must be >= {minimum}, got {value}")
        return value

    return parse


def _positive_arg(text: str) -> float:
    try:
        value = float(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a number, got {text!r}") from exc
    if not value > 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {text}")
    return value


def _columns_arg(text: str) -> tuple[int, ...]:
    try:
        cols = tuple(int(part) for part in text.split(",") if part.strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"columns must be integers, got {text!r}") from exc
    if not cols or any(c < 0 for c in cols):
        raise argparse.ArgumentTypeError("columns must be non-negative integers")
    return cols


def _names_arg(text: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in text.split(",") if part.strip())
