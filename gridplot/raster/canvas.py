from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

import numpy as np


class RenderPriority(IntEnum):
    BACKGROUND = 0
    LINE = 1
    POINT = 2
    LABEL = 3


_EMPTY = -1


@dataclass(frozen=True)
class CellPoint:
    col: int
    row: int


@dataclass(frozen=True)
class CellWrite:
    col: int
    row: int
    char: str
    priority: RenderPriority
    color: str | None = None


@dataclass(frozen=True)
class FlatGrid:
    rows: tuple[str, ...]
    colors: tuple[tuple[str | None, ...], ...]

    @property
    def width(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def height(self) -> int:
        return len(self.rows)

    def char_at(self, col: int, row: int) -> str:
        return self.rows[row][col]

    def color_at(self, col: int, row: int) -> str | None:
        return self.colors[row][col]


class LayeredCanvas:
    """Fixed character grid where each cell keeps the highest-priority write.

    A write replaces the current cell only when its priority is >= the stored
    one, so equal-priority writes resolve to the latest submission.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("canvas width/height must be > 0")
        self._width = width
        self._height = height
        self._chars = np.full((height, width), " ", dtype="<U1")
        self._priority = np.full((height, width), _EMPTY, dtype=np.int8)
        self._colors: list[list[str | None]] = [[None] * width for _ in range(height)]
        self._sealed = False

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self._width and 0 <= row < self._height

    def set(
        self,
        col: int,
        row: int,
        char: str,
        priority: RenderPriority,
        color: str | None = None,
    ) -> bool:
        if self._sealed:
            raise RuntimeError("canvas was already flattened")
        if len(char) != 1:
            raise ValueError("cell content must be exactly one character")
        if not self.in_bounds(col, row):
            return False
        if int(priority) < int(self._priority[row, col]):
            return False
        self._chars[row, col] = char
        self._priority[row, col] = int(priority)
        self._colors[row][col] = color
        return True

    def apply(self, writes: Iterable[CellWrite]) -> int:
        written = 0
        for w in writes:
            if self.set(w.col, w.row, w.char, w.priority, w.color):
                written += 1
        return written

    def priority_at(self, col: int, row: int) -> RenderPriority | None:
        value = int(self._priority[row, col])
        return None if value == _EMPTY else RenderPriority(value)

    def flatten(self) -> FlatGrid:
        self._sealed = True
        rows = tuple("".join(line) for line in self._chars.tolist())
        colors = tuple(tuple(line) for line in self._colors)
        return FlatGrid(rows=rows, colors=colors)


def draw_hline(canvas: LayeredCanvas, col0: int, col1: int, row: int, char: str, priority: RenderPriority, color: str | None = None) -> None:
    if row < 0 or row >= canvas.height:
        return
    left = max(0, min(col0, col1))
    right = min(canvas.width - 1, max(col0, col1))
    for col in range(left, right + 1):
        canvas.set(col, row, char, priority, color)


def draw_vline(canvas: LayeredCanvas, col: int, row0: int, row1: int, char: str, priority: RenderPriority, color: str | None = None) -> None:
    if col < 0 or col >= canvas.width:
        return
    top = max(0, min(row0, row1))
    bottom = min(canvas.height - 1, max(row0, row1))
    for row in range(top, bottom + 1):
        canvas.set(col, row, char, priority, color)
