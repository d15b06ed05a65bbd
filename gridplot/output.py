from __future__ import annotations

import re
from typing import TextIO

from gridplot.figure import PlotResult, StyledLine


RESET = "\x1b[0m"
WARNING_COLOR = "yellow"

NAMED_COLORS: dict[str, int] = {
    "black": 30,
    "red": 31,
    "green": 32,
    "yellow": 33,
    "blue": 34,
    "magenta": 35,
    "cyan": 36,
    "white": 37,
    "bright_black": 90,
    "bright_red": 91,
    "bright_green": 92,
    "bright_yellow": 93,
    "bright_blue": 94,
    "bright_magenta": 95,
    "bright_cyan": 96,
    "bright_white": 97,
}
COLOR_ALIASES = {"purple": "magenta", "bright_purple": "bright_magenta", "gray": "bright_black", "grey": "bright_black"}
_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def normalize_color(tag: str) -> str:
    """Return the canonical form of a color tag, or raise ``ValueError``."""
    name = tag.strip().lower()
    name = COLOR_ALIASES.get(name, name)
    if name in NAMED_COLORS or _HEX_COLOR.match(name):
        return name
    raise ValueError(f"unknown color: {tag}")


def ansi_prefix(tag: str) -> str:
    name = normalize_color(tag)
    if name.startswith("#"):
        r, g, b = (int(name[i : i + 2], 16) for i in (1, 3, 5))
        return f"\x1b[38;2;{r};{g};{b}m"
    return f"\x1b[{NAMED_COLORS[name]}m"


def to_ansi(line: StyledLine) -> str:
    out: list[str] = []
    for text, color in line:
        if color is None or not text.strip():
            out.append(text)
        else:
            out.append(ansi_prefix(color) + text + RESET)
    return "".join(out)


def format_result(result: PlotResult, *, color: bool = True) -> str:
    if color:
        lines = [to_ansi(line) for line in result.lines]
        lines.extend(ansi_prefix(WARNING_COLOR) + d.render() + RESET for d in result.diagnostics)
        return "\n".join(lines)
    return result.text


def write_result(result: PlotResult, stream: TextIO, *, color: bool = True) -> None:
    stream.write(format_result(result, color=color))
    stream.write("\n")
