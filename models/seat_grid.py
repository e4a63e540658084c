"""
Seat grid geometry.

Pure layout of a section's seats for a given zoom, in the section's
local (unrotated) screen coordinates. The graphics item in
``views.section_item`` paints whatever this returns.

Rows are stacked top to bottom with ``gap`` spacing. A labeled row
starts with a label column one seat wide. Empty cells (None or "")
take up a seat's width but produce no seat.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .layout import SectionDocument


# Seats are three times wider than they are tall
SEAT_ASPECT_RATIO = 3


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.right and self.y <= py <= self.bottom


@dataclass(frozen=True)
class SeatCell:
    seat_id: str
    row: int
    column: int
    rect: Rect


@dataclass(frozen=True)
class RowLabelCell:
    text: str
    row: int
    rect: Rect


@dataclass
class SeatGrid:
    """Positioned seats and row labels of one section."""
    seats: List[SeatCell] = field(default_factory=list)
    labels: List[RowLabelCell] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0
    seat_width: float = 0.0
    seat_height: float = 0.0

    def seat_at(self, px: float, py: float) -> Optional[SeatCell]:
        for cell in self.seats:
            if cell.rect.contains(px, py):
                return cell
        return None


@dataclass
class SeatDecoration:
    """
    Per-seat rendering hints supplied by the editor.

    Any field left as None falls back to the renderer's default.
    """
    color: Optional[str] = None
    tooltip: Optional[str] = None
    content: Optional[str] = None
    on_click: Optional[Callable[[], Any]] = None
    cursor: Optional[str] = None


SeatDecorator = Callable[[str], Optional[SeatDecoration]]


def compute_seat_grid(section: SectionDocument, zoom: float = 1.0) -> SeatGrid:
    """Lay out a section's seats at the given zoom."""
    gap = section.effective_gap_size * zoom
    seat_height = section.effective_seat_size * zoom
    seat_width = seat_height * SEAT_ASPECT_RATIO

    grid = SeatGrid(seat_width=seat_width, seat_height=seat_height)

    y = 0.0
    for row_index, row in enumerate(section.grid):
        x = 0.0
        label = section.row_label(row_index)
        items = 0
        if label:
            grid.labels.append(RowLabelCell(str(label), row_index, Rect(x, y, seat_width, seat_height)))
            x += seat_width + gap
            items += 1

        for column, seat_id in enumerate(row):
            if seat_id:
                grid.seats.append(SeatCell(str(seat_id), row_index, column, Rect(x, y, seat_width, seat_height)))
            x += seat_width + gap
            items += 1

        if items:
            grid.width = max(grid.width, x - gap)
        y += seat_height + gap

    if section.grid:
        grid.height = y - gap

    return grid
