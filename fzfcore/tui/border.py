"""Border shapes and the characters used to draw them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class BorderShape(IntEnum):
    """Which sides of a window carry a border."""

    NONE = 0
    ROUNDED = 1
    SHARP = 2
    BOLD = 3
    BLOCK = 4
    THIN_BLOCK = 5
    DOUBLE = 6
    HORIZONTAL = 7
    VERTICAL = 8
    TOP = 9
    BOTTOM = 10
    LEFT = 11
    RIGHT = 12

    def has_right(self) -> bool:
        return self not in (
            BorderShape.NONE,
            BorderShape.LEFT,
            BorderShape.TOP,
            BorderShape.BOTTOM,
            BorderShape.HORIZONTAL,
        )

    def has_top(self) -> bool:
        return self not in (
            BorderShape.NONE,
            BorderShape.LEFT,
            BorderShape.RIGHT,
            BorderShape.BOTTOM,
            BorderShape.VERTICAL,
        )


@dataclass(frozen=True)
class BorderStyle:
    """A border shape with the character for each edge and corner."""

    shape: BorderShape
    top: str
    bottom: str
    left: str
    right: str
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str


_UNICODE_CHARS = {
    BorderShape.SHARP: "──││┌┐└┘",
    BorderShape.BOLD: "━━┃┃┏┓┗┛",
    BorderShape.BLOCK: "▀▄▌▐▛▜▙▟",
    BorderShape.THIN_BLOCK: "▔▁▏▕🭽🭾🭼🭿",
    BorderShape.DOUBLE: "══║║╔╗╚╝",
}
_ROUNDED_CHARS = "──││╭╮╰╯"
_ASCII_CHARS = "--||++++"


def make_border_style(shape: BorderShape, unicode: bool) -> BorderStyle:
    """Return the border style for shape, using box-drawing characters if unicode."""
    if not unicode:
        chars = _ASCII_CHARS
    else:
        chars = _UNICODE_CHARS.get(shape, _ROUNDED_CHARS)
    return BorderStyle(shape, *chars)


def make_transparent_border() -> BorderStyle:
    """Return a rounded border drawn entirely with spaces."""
    return BorderStyle(BorderShape.ROUNDED, *(" " * 8))