"""
Section layout state.

The editor's live geometry for every section of the active layout:
logical x/y and a rotation in degrees. It is hydrated once from each
section's ``meta`` when a layout is selected and only written back to
the documents on an explicit save or export.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from .layout import LayoutDocument, SectionDocument
from .transform import Position


# Hydration rules for sections that carry no persisted geometry.
# Missing x/y cascade diagonally so new sections don't stack up.
SECTION_STATE_DEFAULTS = {
    "origin": 50.0,
    "cascade_step": 20.0,
    "rotation": 0.0,
}


def normalize_rotation(degrees: float) -> float:
    """Wrap an angle into [0, 360)."""
    value = math.fmod(degrees, 360.0)
    if value < 0:
        value += 360.0
    # fmod(-1e-15, 360) + 360 rounds to 360.0
    if value >= 360.0:
        value = 0.0
    return value


def _number(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


@dataclass
class SectionState:
    """Live geometry of one section, in logical units."""
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0

    @property
    def position(self) -> Position:
        return Position(self.x, self.y)

    def copy(self) -> "SectionState":
        return SectionState(self.x, self.y, self.rotation)


def hydrate_section_state(section: SectionDocument, index: int) -> SectionState:
    """
    Build the live state of a section from its persisted ``meta``.

    Non-numeric values count as missing.
    """
    cascade = SECTION_STATE_DEFAULTS["origin"] + SECTION_STATE_DEFAULTS["cascade_step"] * index
    meta = section.meta or {}

    x = _number(meta.get("x"))
    y = _number(meta.get("y"))
    rotation = _number(meta.get("rotation"))

    return SectionState(
        x=cascade if x is None else x,
        y=cascade if y is None else y,
        rotation=normalize_rotation(
            SECTION_STATE_DEFAULTS["rotation"] if rotation is None else rotation
        ),
    )


class SectionLayoutState:
    """Mapping of section id -> SectionState for the active layout."""

    def __init__(self, states: Optional[Dict[str, SectionState]] = None):
        self._states: Dict[str, SectionState] = dict(states or {})

    @classmethod
    def from_layout(cls, layout: Optional[LayoutDocument]) -> "SectionLayoutState":
        if layout is None:
            return cls()
        return cls({
            section.id: hydrate_section_state(section, index)
            for index, section in enumerate(layout.sections)
        })

    def __contains__(self, section_id: str) -> bool:
        return section_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def get(self, section_id: str) -> Optional[SectionState]:
        return self._states.get(section_id)

    def set_position(self, section_id: str, position: Position) -> bool:
        state = self._states.get(section_id)
        if state is None:
            return False
        state.x = position.x
        state.y = position.y
        return True

    def rotate(self, section_id: str, delta: float) -> Optional[float]:
        """Add ``delta`` degrees to a section's rotation; returns the new value."""
        state = self._states.get(section_id)
        if state is None:
            return None
        state.rotation = normalize_rotation(state.rotation + delta)
        return state.rotation

    def snapshot(self) -> Dict[str, SectionState]:
        """Detached copy for readers (persistence) that must not mutate."""
        return {section_id: state.copy() for section_id, state in self._states.items()}
