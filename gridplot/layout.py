from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from gridplot.errors import LayoutOverflowError


LOGGER = logging.getLogger(__name__)

MIN_SPACING = 1
MAX_EXTRA_SPACING = 1
MAX_CENTER_OFFSET = 3


class ElementKind(str, Enum):
    BAR = "bar"
    TICK = "tick"
    POINT = "point"


class OverflowPolicy(str, Enum):
    WARN_AND_TRUNCATE = "warn_and_truncate"
    RAISE = "raise"


# Widest first; the engine picks the first width that fits.
ALLOWED_WIDTHS: dict[ElementKind, tuple[int, ...]] = {
    ElementKind.BAR: (2, 1),
    ElementKind.TICK: (1,),
    ElementKind.POINT: (1,),
}


@dataclass(frozen=True)
class ElementLayout:
    element_width: int
    spacing: int
    offset: int
    overflow_policy: OverflowPolicy = OverflowPolicy.WARN_AND_TRUNCATE
    displayed: int = 0
    truncated: int = 0

    @property
    def stride(self) -> int:
        return self.element_width + self.spacing

    @property
    def total_span(self) -> int:
        if self.displayed == 0:
            return 0
        return self.displayed * self.stride - self.spacing

    @property
    def end(self) -> int:
        return self.offset + self.total_span

    def position(self, index: int) -> int:
        if index < 0 or index >= self.displayed:
            raise IndexError(f"element {index} is not displayed")
        return self.offset + index * self.stride

    def positions(self) -> list[int]:
        return [self.offset + i * self.stride for i in range(self.displayed)]

    def center(self, index: int) -> int:
        return self.position(index) + (self.element_width - 1) // 2


def span_for(count: int, element_width: int, spacing: int) -> int:
    if count <= 0:
        return 0
    return count * (element_width + spacing) - spacing


def max_fitting(available_width: int, element_width: int, spacing: int = MIN_SPACING) -> int:
    if available_width < element_width:
        return 0
    return (available_width + spacing) // (element_width + spacing)


def layout_elements(
    available_width: int,
    element_count: int,
    kind: ElementKind = ElementKind.BAR,
    *,
    overflow_policy: OverflowPolicy = OverflowPolicy.WARN_AND_TRUNCATE,
) -> ElementLayout:
    """Distribute ``element_count`` elements of ``kind`` across ``available_width`` cells.

    The widest allowed element width that fits every element with one cell
    of spacing wins. When nothing fits, the narrowest width is used and the
    overflow policy decides between truncating and raising. Spare width
    first widens the gaps (by at most ``MAX_EXTRA_SPACING``) and then shifts
    the block right, never by more than ``MAX_CENTER_OFFSET``.
    """
    if available_width < 0:
        raise ValueError("available_width must be >= 0")
    if element_count < 0:
        raise ValueError("element_count must be >= 0")
    widths = ALLOWED_WIDTHS[kind]
    if element_count == 0:
        return ElementLayout(element_width=widths[0], spacing=MIN_SPACING, offset=0, overflow_policy=overflow_policy)

    chosen = None
    for width in widths:
        if span_for(element_count, width, MIN_SPACING) <= available_width:
            chosen = width
            break

    displayed = element_count
    if chosen is None:
        chosen = widths[-1]
        displayed = max_fitting(available_width, chosen, MIN_SPACING)
        truncated = element_count - displayed
        if overflow_policy is OverflowPolicy.RAISE:
            raise LayoutOverflowError(
                f"{element_count} {kind.value}s do not fit in {available_width} cells",
                truncated=truncated,
            )
        LOGGER.debug("%s layout truncated %d of %d elements", kind.value, truncated, element_count)

    leftover = available_width - span_for(displayed, chosen, MIN_SPACING)
    gaps = displayed - 1
    extra = min(leftover // gaps, MAX_EXTRA_SPACING) if gaps > 0 else 0
    leftover -= extra * gaps
    offset = min(leftover // 2, MAX_CENTER_OFFSET)
    return ElementLayout(
        element_width=chosen,
        spacing=MIN_SPACING + extra,
        offset=offset,
        overflow_policy=overflow_policy,
        displayed=displayed,
        truncated=element_count - displayed,
    )
