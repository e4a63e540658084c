"""
Arena layout document models.

A layout document is the persisted unit: a named, ordered collection
of sections. Each section holds a (possibly ragged) grid of seat ids
plus free-form ``meta`` where the editor keeps its x/y/rotation.

The JSON form uses camelCase keys (``rowLabels``, ``seatSize``,
``gapSize``). Keys this module does not know about are kept in
``extra`` and written back unchanged, so documents produced by other
tools survive a round trip through the editor.
"""

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


DEFAULT_SEAT_SIZE = 36
DEFAULT_GAP_SIZE = 8

_SECTION_KEYS = ("id", "title", "grid", "rowLabels", "seatSize", "gapSize", "meta")
_LAYOUT_KEYS = ("id", "name", "sections")


class LayoutFormatError(ValueError):
    """Raised when a layout or section document has an invalid shape."""


def _optional_size(section_id: str, key: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise LayoutFormatError(f"Section '{section_id}' {key} must be a number")
    return value


@dataclass
class SectionDocument:
    """A block of seats arranged in a grid."""
    id: str
    title: Optional[str] = None
    grid: List[List[Optional[str]]] = field(default_factory=list)
    row_labels: Optional[List[Optional[str]]] = None
    seat_size: Optional[float] = None
    gap_size: Optional[float] = None
    meta: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def display_name(self) -> str:
        return self.title or self.id

    @property
    def effective_seat_size(self) -> float:
        return DEFAULT_SEAT_SIZE if self.seat_size is None else self.seat_size

    @property
    def effective_gap_size(self) -> float:
        return DEFAULT_GAP_SIZE if self.gap_size is None else self.gap_size

    @property
    def seat_count(self) -> int:
        """Number of real seats (gaps excluded)."""
        return sum(1 for row in self.grid for seat in row if seat)

    def row_label(self, row_index: int) -> Optional[str]:
        """Label for a grid row, or None when unlabeled."""
        if not self.row_labels or row_index >= len(self.row_labels):
            return None
        return self.row_labels[row_index] or None

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        data = {"id": self.id}
        if self.title is not None:
            data["title"] = self.title
        data["grid"] = [list(row) for row in self.grid]
        if self.row_labels is not None:
            data["rowLabels"] = list(self.row_labels)
        if self.seat_size is not None:
            data["seatSize"] = self.seat_size
        if self.gap_size is not None:
            data["gapSize"] = self.gap_size
        data["meta"] = copy.deepcopy(self.meta)
        for key, value in self.extra.items():
            data[key] = copy.deepcopy(value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "SectionDocument":
        """Create from dictionary, validating the parts the editor relies on."""
        if not isinstance(data, dict):
            raise LayoutFormatError(f"Section must be an object, got {type(data).__name__}")

        section_id = data.get("id")
        if not isinstance(section_id, str) or not section_id:
            raise LayoutFormatError("Section is missing a string 'id'")

        grid = data.get("grid", [])
        if not isinstance(grid, list) or not all(isinstance(row, list) for row in grid):
            raise LayoutFormatError(f"Section '{section_id}' grid must be a list of rows")

        meta = data.get("meta")
        if meta is None:
            meta = {}
        elif not isinstance(meta, dict):
            raise LayoutFormatError(f"Section '{section_id}' meta must be an object")

        row_labels = data.get("rowLabels")
        if row_labels is not None and not isinstance(row_labels, list):
            raise LayoutFormatError(f"Section '{section_id}' rowLabels must be a list")

        title = data.get("title")
        if title is not None and not isinstance(title, str):
            raise LayoutFormatError(f"Section '{section_id}' title must be a string")

        return cls(
            id=section_id,
            title=title,
            grid=[list(row) for row in grid],
            row_labels=list(row_labels) if row_labels is not None else None,
            seat_size=_optional_size(section_id, "seatSize", data.get("seatSize")),
            gap_size=_optional_size(section_id, "gapSize", data.get("gapSize")),
            meta=copy.deepcopy(meta),
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in _SECTION_KEYS},
        )


@dataclass
class LayoutDocument:
    """A named collection of sections."""
    id: str
    # None when the document has no name; it is then left out of to_dict()
    name: Optional[str] = None
    sections: List[SectionDocument] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def get_section(self, section_id: str) -> Optional[SectionDocument]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def to_dict(self) -> dict:
        data = {"id": self.id}
        if self.name is not None:
            data["name"] = self.name
        data["sections"] = [section.to_dict() for section in self.sections]
        for key, value in self.extra.items():
            data[key] = copy.deepcopy(value)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "LayoutDocument":
        """
        Create from dictionary.

        Raises:
            LayoutFormatError: if the shape is wrong or two sections
                share an id.
        """
        if not isinstance(data, dict):
            raise LayoutFormatError(f"Layout must be an object, got {type(data).__name__}")

        layout_id = data.get("id")
        if not isinstance(layout_id, str) or not layout_id:
            raise LayoutFormatError("Layout is missing a string 'id'")

        raw_sections = data.get("sections", [])
        if not isinstance(raw_sections, list):
            raise LayoutFormatError(f"Layout '{layout_id}' sections must be a list")

        sections = [SectionDocument.from_dict(item) for item in raw_sections]

        seen = set()
        for section in sections:
            if section.id in seen:
                raise LayoutFormatError(
                    f"Layout '{layout_id}' has duplicate section id '{section.id}'"
                )
            seen.add(section.id)

        name = data.get("name")
        if name is not None and not isinstance(name, str):
            raise LayoutFormatError(f"Layout '{layout_id}' name must be a string")

        return cls(
            id=layout_id,
            name=name,
            sections=sections,
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in _LAYOUT_KEYS},
        )
