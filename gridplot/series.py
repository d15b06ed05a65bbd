from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np


class SeriesKind(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class DataPoint:
    """One plotted pair; categorical points keep their label next to the ordinal x."""

    x: float
    y: float
    label: str | None = None

    @property
    def kind(self) -> SeriesKind:
        return SeriesKind.NUMERIC if self.label is None else SeriesKind.CATEGORICAL


@dataclass(frozen=True)
class Series:
    points: tuple[DataPoint, ...]
    kind: SeriesKind = SeriesKind.NUMERIC
    name: str | None = None
    x_name: str | None = None

    def __post_init__(self) -> None:
        for i, point in enumerate(self.points):
            if point.kind is not self.kind:
                raise ValueError(f"point {i} is {point.kind.value} in a {self.kind.value} series")

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_categorical(self) -> bool:
        return self.kind is SeriesKind.CATEGORICAL

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(p.label for p in self.points if p.label is not None)

    def xs(self) -> np.ndarray:
        return np.asarray([p.x for p in self.points], dtype=np.float64)

    def ys(self) -> np.ndarray:
        return np.asarray([p.y for p in self.points], dtype=np.float64)

    @classmethod
    def from_xy(cls, pairs, *, name: str | None = None, x_name: str | None = None) -> "Series":
        points = tuple(DataPoint(x=float(x), y=float(y)) for x, y in pairs)
        return cls(points=points, kind=SeriesKind.NUMERIC, name=name, x_name=x_name)

    @classmethod
    def from_labels(cls, pairs, *, name: str | None = None, x_name: str | None = None) -> "Series":
        points = tuple(DataPoint(x=float(i), y=float(y), label=str(label)) for i, (label, y) in enumerate(pairs))
        return cls(points=points, kind=SeriesKind.CATEGORICAL, name=name, x_name=x_name)
