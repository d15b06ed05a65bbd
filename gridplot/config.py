from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib
from typing import Any, Mapping

from gridplot.layout import OverflowPolicy
from gridplot.output import normalize_color
from gridplot.scales import DEFAULT_PADDING_FRACTION, AxisRange


DEFAULT_WIDTH = 60
DEFAULT_HEIGHT = 15
MIN_WIDTH = 2
MIN_HEIGHT = 2


def _require_cell_char(value: str, name: str) -> None:
    if not isinstance(value, str) or len(value) != 1:
        raise ValueError(f"{name} must be a single character")


@dataclass(frozen=True)
class LineStyle:
    point_char: str = "●"
    line_char: str = "·"
    show_points: bool = True
    show_lines: bool = True

    def __post_init__(self) -> None:
        _require_cell_char(self.point_char, "point_char")
        _require_cell_char(self.line_char, "line_char")
        if not (self.show_points or self.show_lines):
            raise ValueError("line style must show points, lines, or both")


LINE_STYLE_PRESETS: dict[str, LineStyle] = {
    "default": LineStyle(),
    "ascii": LineStyle(point_char="o", line_char="."),
    "smooth": LineStyle(point_char="◆", line_char="─"),
    "dashed": LineStyle(point_char="◆", line_char="╌"),
}


def line_style(
    preset: str = "default",
    *,
    point_char: str | None = None,
    line_char: str | None = None,
    points_only: bool = False,
    lines_only: bool = False,
) -> LineStyle:
    if preset not in LINE_STYLE_PRESETS:
        raise ValueError(f"unknown line style: {preset}")
    if points_only and lines_only:
        raise ValueError("points_only and lines_only are mutually exclusive")
    base = LINE_STYLE_PRESETS[preset]
    return replace(
        base,
        point_char=point_char or base.point_char,
        line_char=line_char or base.line_char,
        show_lines=not points_only,
        show_points=not lines_only,
    )


@dataclass(frozen=True)
class PlotConfig:
    """Parameters shared by every plot kind.

    ``width`` and ``height`` size the data grid itself; the axis label column,
    axis rules, and title are laid out around it.
    """

    title: str = ""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    color: str | None = None
    x_range: AxisRange | None = None
    y_range: AxisRange | None = None
    x_label: str | None = None
    y_label: str | None = None
    padding: float = DEFAULT_PADDING_FRACTION
    show_grid: bool = False
    show_legend: bool = True

    def __post_init__(self) -> None:
        if self.width < MIN_WIDTH:
            raise ValueError(f"width must be >= {MIN_WIDTH}")
        if self.height < MIN_HEIGHT:
            raise ValueError(f"height must be >= {MIN_HEIGHT}")
        if self.padding < 0:
            raise ValueError("padding must be >= 0")
        if self.color is not None:
            object.__setattr__(self, "color", normalize_color(self.color))
        for name in ("x_range", "y_range"):
            value = getattr(self, name)
            if value is not None and not value.explicit:
                object.__setattr__(self, name, AxisRange.user(value.min, value.max))


@dataclass(frozen=True)
class LineOptions:
    config: PlotConfig = field(default_factory=PlotConfig)
    style: LineStyle = field(default_factory=LineStyle)


@dataclass(frozen=True)
class ScatterOptions:
    config: PlotConfig = field(default_factory=PlotConfig)
    point_char: str = "●"

    def __post_init__(self) -> None:
        _require_cell_char(self.point_char, "point_char")


@dataclass(frozen=True)
class BarOptions:
    config: PlotConfig = field(default_factory=PlotConfig)
    bar_char: str = "█"
    show_values: bool = False
    category_order: tuple[str, ...] | None = None
    overflow: OverflowPolicy = OverflowPolicy.WARN_AND_TRUNCATE

    def __post_init__(self) -> None:
        _require_cell_char(self.bar_char, "bar_char")
        object.__setattr__(self, "overflow", OverflowPolicy(self.overflow))
        if self.category_order is not None:
            object.__setattr__(self, "category_order", tuple(str(c) for c in self.category_order))


PlotOptions = LineOptions | ScatterOptions | BarOptions


@dataclass(frozen=True)
class ConfigFile:
    plot: PlotConfig
    line: LineOptions
    scatter: ScatterOptions
    bar: BarOptions


def load_config(path: str | Path) -> ConfigFile:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")
    with config_path.open("rb") as f:
        raw = tomllib.load(f)
    return config_from_mapping(raw)


def config_from_mapping(raw: Mapping[str, Any]) -> ConfigFile:
    unknown = set(raw) - {"plot", "line", "scatter", "bar"}
    if unknown:
        raise ValueError(f"unknown config sections: {', '.join(sorted(unknown))}")
    plot = plot_config_from_mapping(_coerce_table(raw.get("plot", {}), "plot"))

    line_raw = dict(_coerce_table(raw.get("line", {}), "line"))
    _reject_unknown(line_raw, {"style", "point_char", "line_char", "points_only", "lines_only"}, "line")
    style = line_style(
        _coerce_str(line_raw.get("style", "default"), "line.style"),
        point_char=_coerce_optional_str(line_raw.get("point_char"), "line.point_char"),
        line_char=_coerce_optional_str(line_raw.get("line_char"), "line.line_char"),
        points_only=_coerce_bool(line_raw.get("points_only", False), "line.points_only"),
        lines_only=_coerce_bool(line_raw.get("lines_only", False), "line.lines_only"),
    )

    scatter_raw = dict(_coerce_table(raw.get("scatter", {}), "scatter"))
    _reject_unknown(scatter_raw, {"point_char"}, "scatter")
    scatter = ScatterOptions(config=plot, point_char=_coerce_str(scatter_raw.get("point_char", "●"), "scatter.point_char"))

    bar_raw = dict(_coerce_table(raw.get("bar", {}), "bar"))
    _reject_unknown(bar_raw, {"bar_char", "show_values", "category_order", "overflow"}, "bar")
    order = bar_raw.get("category_order")
    if order is not None and (not isinstance(order, list) or not all(isinstance(v, str) for v in order)):
        raise ValueError("bar.category_order must be a list of strings")
    bar = BarOptions(
        config=plot,
        bar_char=_coerce_str(bar_raw.get("bar_char", "█"), "bar.bar_char"),
        show_values=_coerce_bool(bar_raw.get("show_values", False), "bar.show_values"),
        category_order=tuple(order) if order is not None else None,
        overflow=_coerce_overflow(bar_raw.get("overflow", OverflowPolicy.WARN_AND_TRUNCATE.value)),
    )
    return ConfigFile(plot=plot, line=LineOptions(config=plot, style=style), scatter=scatter, bar=bar)


def plot_config_from_mapping(raw: Mapping[str, Any]) -> PlotConfig:
    known = {f.name for f in fields(PlotConfig)}
    _reject_unknown(raw, known, "plot")
    values: dict[str, Any] = {}
    for key, value in raw.items():
        if key in {"x_range", "y_range"}:
            values[key] = _coerce_range(value, f"plot.{key}")
        elif key in {"width", "height"}:
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"plot.{key} must be an integer")
            values[key] = value
        elif key == "padding":
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ValueError("plot.padding must be a number")
            values[key] = float(value)
        elif key in {"show_grid", "show_legend"}:
            values[key] = _coerce_bool(value, f"plot.{key}")
        elif key == "title":
            values[key] = _coerce_str(value, "plot.title")
        else:
            values[key] = _coerce_optional_str(value, f"plot.{key}")
    return PlotConfig(**values)


def parse_range(text: str) -> AxisRange:
    """Parse ``"min:max"`` (or ``"min,max"``) into an explicit range."""
    sep = ":" if ":" in text.strip().lstrip("-") else ","
    parts = text.split(sep) if sep == "," else _split_colon(text)
    if len(parts) != 2:
        raise ValueError(f"range must look like min:max, got {text!r}")
    try:
        lo, hi = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise ValueError(f"range bounds must be numbers, got {text!r}") from exc
    return AxisRange.user(lo, hi)


def _split_colon(text: str) -> list[str]:
    # Keep a leading minus on the lower bound ("-5:5").
    idx = text.find(":", 1)
    if idx < 0:
        return [text]
    return [text[:idx], text[idx + 1 :]]


def _reject_unknown(raw: Mapping[str, Any], known: set[str], section: str) -> None:
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"unknown keys in [{section}]: {', '.join(sorted(unknown))}")


def _coerce_table(value: object, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"[{name}] must be a table")
    return value


def _coerce_range(value: object, name: str) -> AxisRange:
    if isinstance(value, str):
        return parse_range(value)
    if isinstance(value, list) and len(value) == 2 and all(isinstance(v, (int, float)) for v in value):
        return AxisRange.user(value[0], value[1])
    raise ValueError(f"{name} must be \"min:max\" or a two-number list")


def _coerce_bool(value: object, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean")
    return value


def _coerce_str(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def _coerce_optional_str(value: object, name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string if provided")
    return value


def _coerce_overflow(value: object) -> OverflowPolicy:
    if not isinstance(value, str):
        raise ValueError("bar.overflow must be a string")
    try:
        return OverflowPolicy(value)
    except ValueError as exc:
        choices = ", ".join(p.value for p in OverflowPolicy)
        raise ValueError(f"bar.overflow must be one of: {choices}") from exc
