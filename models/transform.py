"""
Coordinate transform between screen and logical canvas space.

Section positions are stored in logical units, independent of zoom.
Everything drawn on the canvas or read from the pointer lives in
screen units (relative to the canvas origin):

    screen  = logical * zoom
    logical = screen / zoom

Both the drag math and the render placement go through these two
functions so a section is always drawn at exactly ``logical * zoom``.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Position:
    """2D point on the canvas (logical or screen, depending on context)."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Position") -> "Position":
        return Position(self.x - other.x, self.y - other.y)

    def scaled(self, factor: float) -> "Position":
        return Position(self.x * factor, self.y * factor)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def to_screen(logical: Position, zoom: float) -> Position:
    """Map a logical position onto the zoomed canvas."""
    return Position(logical.x * zoom, logical.y * zoom)


def to_logical(screen: Position, zoom: float) -> Position:
    """
    Map a canvas (screen) position back to logical units.

    ``zoom`` is assumed positive; the zoom controller never produces
    anything below its minimum.
    """
    return Position(screen.x / zoom, screen.y / zoom)
