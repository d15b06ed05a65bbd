from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
import logging
import math

import numpy as np

from gridplot.errors import Diagnostic, DiagnosticKind, EmptyDatasetError, PlotDataError
from gridplot.scales import format_tick, format_ticks_for_axis
from gridplot.series import DataPoint, Series, SeriesKind


LOGGER = logging.getLogger(__name__)
DEFAULT_DENSITY_POINTS = 200
DENSITY_EXTENSION = 0.1


@dataclass(frozen=True)
class Histogram:
    series: Series
    edges: np.ndarray
    diagnostics: tuple[Diagnostic, ...] = ()


def sturges_bins(count: int) -> int:
    if count <= 0:
        raise ValueError("count must be > 0")
    return max(1, math.ceil(1.0 + math.log2(count)))


def histogram(
    values: Sequence[float] | np.ndarray,
    *,
    bins: int | None = None,
    bin_width: float | None = None,
    normalize: bool = False,
    name: str | None = None,
) -> Histogram:
    """Bin ``values`` into a categorical series of counts, one point per bin.

    ``bin_width`` wins over ``bins``; with neither, Sturges' rule picks the
    bin count. The maximum value lands in the last bin. Each bin is labelled
    with its left edge. ``normalize`` turns counts into fractions of the total.
    """
    if bins is not None and bins < 1:
        raise ValueError("bins must be >= 1")
    if bin_width is not None and not (math.isfinite(bin_width) and bin_width > 0):
        raise ValueError("bin_width must be a positive number")
    data = np.asarray(values, dtype=np.float64)
    data = data[np.isfinite(data)]
    if data.size == 0:
        raise EmptyDatasetError("no values to bin")

    lo = float(data.min())
    hi = float(data.max())
    diagnostics: tuple[Diagnostic, ...] = ()
    if lo == hi:
        LOGGER.warning("all %d values equal %g; using a single bin", data.size, lo)
        diagnostics = (
            Diagnostic(
                kind=DiagnosticKind.RANGE_DEGENERATE,
                message=f"all values equal {format_tick(lo)}; histogram has a single bin",
            ),
        )
        edges = np.asarray([lo, lo + (bin_width or 1.0)], dtype=np.float64)
    elif bin_width is not None:
        count = max(1, math.ceil((hi - lo) / bin_width))
        edges = lo + bin_width * np.arange(count + 1, dtype=np.float64)
        edges[-1] = max(float(edges[-1]), hi)
    else:
        edges = np.linspace(lo, hi, (bins or sturges_bins(data.size)) + 1)

    # np.histogram closes the last bin on the right, so the maximum is counted.
    counts, edges = np.histogram(data, bins=edges)
    heights = counts / data.size if normalize else counts.astype(np.float64)
    labels = format_ticks_for_axis(edges[:-1])
    points = tuple(
        DataPoint(x=float(i), y=float(h), label=label) for i, (label, h) in enumerate(zip(labels, heights.tolist()))
    )
    LOGGER.debug("binned %d values into %d bins from %g to %g", data.size, len(points), edges[0], edges[-1])
    series = Series(points=points, kind=SeriesKind.CATEGORICAL, name=name, x_name=name)
    return Histogram(series=series, edges=edges, diagnostics=diagnostics)


def count_values(values: Sequence[str], *, name: str | None = None) -> Series:
    """Occurrences of each distinct value, in order of first appearance."""
    counts = Counter(str(v) for v in values if str(v))
    if not counts:
        raise EmptyDatasetError("no values to count")
    return Series.from_labels(list(counts.items()), name="count", x_name=name)


def scott_bandwidth(data: np.ndarray) -> float:
    return 1.06 * float(np.std(data)) * data.size ** (-1.0 / 5.0)


def kernel_density(
    values: Sequence[float] | np.ndarray,
    *,
    bandwidth: float | None = None,
    points: int = DEFAULT_DENSITY_POINTS,
    name: str | None = None,
) -> Series:
    """Gaussian kernel density estimate sampled at ``points`` evenly spaced x values.

    The evaluation range is the data range widened by 10% on each side.
    Without a ``bandwidth`` Scott's rule picks one.
    """
    if points < 2:
        raise ValueError("points must be >= 2")
    if bandwidth is not None and not (math.isfinite(bandwidth) and bandwidth > 0):
        raise ValueError("bandwidth must be a positive number")
    data = np.asarray(values, dtype=np.float64)
    data = data[np.isfinite(data)]
    if data.size == 0:
        raise EmptyDatasetError("no values for a density estimate")
    lo = float(data.min())
    hi = float(data.max())
    if lo == hi:
        raise PlotDataError("density needs at least two distinct values")

    h = bandwidth if bandwidth is not None else scott_bandwidth(data)
    ext = (hi - lo) * DENSITY_EXTENSION
    xs = np.linspace(lo - ext, hi + ext, points)
    u = (xs[:, None] - data[None, :]) / h
    density = np.exp(-0.5 * u * u).sum(axis=1) / (data.size * h * math.sqrt(2.0 * math.pi))
    LOGGER.debug("density over %d values with bandwidth %g", data.size, h)
    return Series.from_xy(zip(xs.tolist(), density.tolist()), name=name or "density", x_name=name)
