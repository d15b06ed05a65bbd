from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import logging

import numpy as np


LOGGER = logging.getLogger(__name__)
DEFAULT_PADDING_FRACTION = 0.1


@dataclass(frozen=True)
class AxisRange:
    min: float
    max: float
    explicit: bool = False
    synthesized: bool = False

    def __post_init__(self) -> None:
        if not (np.isfinite(self.min) and np.isfinite(self.max)):
            raise ValueError("axis range bounds must be finite")
        if not self.min < self.max:
            raise ValueError(f"axis range min must be < max (got {self.min}, {self.max})")

    @property
    def span(self) -> float:
        return self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    @classmethod
    def user(cls, lo: float, hi: float) -> "AxisRange":
        return cls(min=float(lo), max=float(hi), explicit=True)


@dataclass(frozen=True)
class CellMapping:
    cols: np.ndarray
    rows: np.ndarray
    keep: np.ndarray

    @property
    def omitted(self) -> int:
        return int(np.count_nonzero(~self.keep))


def infer_range(
    values: np.ndarray,
    *,
    padding: float = DEFAULT_PADDING_FRACTION,
    explicit: AxisRange | None = None,
    include: float | None = None,
) -> AxisRange:
    """Resolve the axis range for ``values``; an explicit range always wins and is never padded."""
    if explicit is not None:
        if explicit.explicit:
            return explicit
        return AxisRange(min=explicit.min, max=explicit.max, explicit=True)
    if padding < 0:
        raise ValueError("padding must be >= 0")

    vals = np.asarray(values, dtype=np.float64)
    vals = vals[np.isfinite(vals)]
    if vals.size == 0:
        raise ValueError("cannot infer a range from zero finite values")
    vmin = float(np.min(vals))
    vmax = float(np.max(vals))
    if include is not None:
        vmin = min(vmin, include)
        vmax = max(vmax, include)

    if vmin == vmax:
        delta = max(1.0, abs(vmin) * padding)
        LOGGER.debug("degenerate range at %g, synthesizing +/-%g", vmin, delta)
        return AxisRange(min=vmin - delta, max=vmax + delta, synthesized=True)

    pad = (vmax - vmin) * padding
    return AxisRange(min=vmin - pad, max=vmax + pad)


def to_cell(value: float, axis_range: AxisRange, cell_extent: int, *, vertical: bool = False) -> int:
    if cell_extent <= 0:
        raise ValueError("cell_extent must be > 0")
    normalized = (float(value) - axis_range.min) / axis_range.span
    if vertical:
        normalized = 1.0 - normalized
    cell = int(np.rint(normalized * (cell_extent - 1)))
    return min(max(cell, 0), cell_extent - 1)


def map_to_cells(
    xs: np.ndarray,
    ys: np.ndarray,
    x_range: AxisRange,
    y_range: AxisRange,
    width: int,
    height: int,
) -> CellMapping:
    """Vectorised ``to_cell`` for a whole series.

    Values outside an explicit range are flagged in ``keep`` so the caller can
    omit and count them; values outside an inferred range clamp to the edge.
    """
    if width <= 0 or height <= 0:
        raise ValueError("cell grid width/height must be > 0")
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    keep = np.isfinite(x) & np.isfinite(y)
    if x_range.explicit:
        keep &= (x >= x_range.min) & (x <= x_range.max)
    if y_range.explicit:
        keep &= (y >= y_range.min) & (y <= y_range.max)

    with np.errstate(invalid="ignore"):
        nx = np.nan_to_num((x - x_range.min) / x_range.span)
        ny = np.nan_to_num((y - y_range.min) / y_range.span)
    cols = np.rint(nx * (width - 1)).astype(np.int32)
    rows = np.rint((1.0 - ny) * (height - 1)).astype(np.int32)
    np.clip(cols, 0, width - 1, out=cols)
    np.clip(rows, 0, height - 1, out=rows)
    return CellMapping(cols=cols, rows=rows, keep=keep)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)

    span = _nice_number(vmax - vmin, round_result=False)
    step = _nice_number(span / max(target - 1, 1), round_result=True)
    tick_min = np.ceil(vmin / step) * step
    tick_max = np.floor(vmax / step) * step
    if tick_max < tick_min:
        return np.asarray([(vmin + vmax) * 0.5], dtype=np.float64)

    ticks = np.arange(tick_min, tick_max + 0.5 * step, step, dtype=np.float64)
    # Snap floating-point drift so values like -4.44e-16 become 0.
    ticks = np.rint(ticks / step) * step
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=step * 1e-9)] = 0.0
    return ticks


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.2e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim trailing zeros after a decimal point (keep 30, 40).
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def _nice_number(value: float, *, round_result: bool) -> float:
    exp = np.floor(np.log10(value))
    frac = value / (10**exp)

    if round_result:
        if frac < 1.5:
            nice_frac = 1.0
        elif frac < 3.0:
            nice_frac = 2.0
        elif frac < 7.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0
    else:
        if frac <= 1.0:
            nice_frac = 1.0
        elif frac <= 2.0:
            nice_frac = 2.0
        elif frac <= 5.0:
            nice_frac = 5.0
        else:
            nice_frac = 10.0

    return float(nice_frac * (10**exp))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
