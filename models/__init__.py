"""
Models package.

This package contains the data models for the arena layout editor.

- Layout documents (LayoutDocument, SectionDocument)
- Live section geometry (SectionState, SectionLayoutState)
- Coordinate transform (Position, to_screen, to_logical)
- Seat grid geometry (compute_seat_grid, SeatGrid, SeatDecoration)
"""

from .transform import (
    Position,
    to_screen,
    to_logical,
)
from .layout import (
    LayoutFormatError,
    SectionDocument,
    LayoutDocument,
    DEFAULT_SEAT_SIZE,
    DEFAULT_GAP_SIZE,
)
from .layout_state import (
    SectionState,
    SectionLayoutState,
    SECTION_STATE_DEFAULTS,
    hydrate_section_state,
    normalize_rotation,
)
from .seat_grid import (
    Rect,
    SeatCell,
    RowLabelCell,
    SeatGrid,
    SeatDecoration,
    SEAT_ASPECT_RATIO,
    compute_seat_grid,
)


__all__ = [
    # Transform
    "Position",
    "to_screen",
    "to_logical",
    # Documents
    "LayoutFormatError",
    "SectionDocument",
    "LayoutDocument",
    "DEFAULT_SEAT_SIZE",
    "DEFAULT_GAP_SIZE",
    # Layout state
    "SectionState",
    "SectionLayoutState",
    "SECTION_STATE_DEFAULTS",
    "hydrate_section_state",
    "normalize_rotation",
    # Seat grid
    "Rect",
    "SeatCell",
    "RowLabelCell",
    "SeatGrid",
    "SeatDecoration",
    "SEAT_ASPECT_RATIO",
    "compute_seat_grid",
]
