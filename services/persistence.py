"""
Persistence Bridge.

Moves layouts between the key-value store, the editor and exported
files. The store holds the whole layout collection as one JSON array
under LAYOUTS_KEY and the last selected layout id under
SELECTED_LAYOUT_KEY.

Live section geometry is only folded back into the documents here, on
an explicit save or export. Nothing in this module raises on bad
input: failures are logged and reported through the ``notice`` signal.
"""

import copy
import json
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional
from PyQt6.QtCore import QObject, pyqtSignal

from models.layout import LayoutDocument, LayoutFormatError
from models.layout_state import SectionLayoutState, SectionState
from services.interaction import InteractionStateMachine
from services.layout_store import KeyValueStore, LAYOUTS_KEY, SELECTED_LAYOUT_KEY

logger = logging.getLogger(__name__)


DEFAULT_EXPORT_NAME = "arena-layout"


class NoticeLevel(Enum):
    """Severity of a user-facing notice."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


def parse_layouts(raw: Optional[str]) -> List[LayoutDocument]:
    """
    Parse the stored collection.

    Anything that is not a JSON array yields an empty list; entries
    that fail validation are skipped. Never raises.
    """
    if not raw:
        return []

    try:
        parsed = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Failed to parse stored arena layouts: {e}")
        return []

    if not isinstance(parsed, list):
        logger.warning(f"Stored arena layouts are not an array ({type(parsed).__name__}), ignoring")
        return []

    layouts = []
    for index, item in enumerate(parsed):
        try:
            layouts.append(LayoutDocument.from_dict(item))
        except LayoutFormatError as e:
            logger.warning(f"Skipping stored layout #{index}: {e}")
    return layouts


def serialize_layouts(layouts: List[LayoutDocument]) -> str:
    """Serialize the collection for the store (deterministic)."""
    return json.dumps([layout.to_dict() for layout in layouts], ensure_ascii=False)


def serialize_layout(layout: LayoutDocument) -> str:
    """Serialize a single layout for export."""
    return json.dumps(layout.to_dict(), indent=2, ensure_ascii=False)


def export_filename(layout: LayoutDocument) -> str:
    """File name for an exported layout: display name with whitespace runs as '_'."""
    base = layout.name or layout.id or DEFAULT_EXPORT_NAME
    return re.sub(r"\s+", "_", base) + ".json"


def fold_section_states(layout: LayoutDocument, states: Dict[str, SectionState]) -> LayoutDocument:
    """
    Copy of ``layout`` with each section's meta x/y/rotation taken from
    ``states``. Sections without live state get zeros.
    """
    updated = copy.deepcopy(layout)
    for section in updated.sections:
        state = states.get(section.id)
        meta = dict(section.meta)
        meta["x"] = state.x if state else 0
        meta["y"] = state.y if state else 0
        meta["rotation"] = state.rotation if state else 0
        section.meta = meta
    return updated


class PersistenceBridge(QObject):
    """
    Loads, selects, saves, exports and imports arena layouts.

    Selecting a layout hydrates a fresh SectionLayoutState and hands it
    to the interaction state machine, which resets the session.
    """

    # Signals
    notice = pyqtSignal(object, str, str)    # NoticeLevel, title, message
    layouts_changed = pyqtSignal()
    active_layout_changed = pyqtSignal(object)  # LayoutDocument or None

    def __init__(
        self,
        store: KeyValueStore,
        interaction: InteractionStateMachine,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._store = store
        self._interaction = interaction
        self._layouts: List[LayoutDocument] = []
        self._active_id: Optional[str] = None

    @property
    def layouts(self) -> List[LayoutDocument]:
        return list(self._layouts)

    @property
    def active_layout_id(self) -> Optional[str]:
        return self._active_id

    @property
    def active_layout(self) -> Optional[LayoutDocument]:
        return self._find(self._active_id)

    def load(self) -> List[LayoutDocument]:
        """Read the collection from the store and restore the last selection."""
        self._layouts = parse_layouts(self._store.get(LAYOUTS_KEY))
        logger.info(f"Loaded {len(self._layouts)} arena layout(s)")
        self.layouts_changed.emit()

        remembered = self._store.get(SELECTED_LAYOUT_KEY)
        self.select_layout(remembered if self._find(remembered) else None, remember=False)
        return self.layouts

    def select_layout(self, layout_id: Optional[str], remember: bool = True) -> bool:
        """
        Make ``layout_id`` the active layout and rebuild the live state.

        Returns False (and leaves no layout active) when the id is unknown.
        """
        layout = self._find(layout_id)
        self._active_id = layout.id if layout else None

        self._interaction.reset(SectionLayoutState.from_layout(layout))

        if layout is not None and remember:
            try:
                self._store.set(SELECTED_LAYOUT_KEY, layout.id)
            except OSError as e:
                # Only the remembered selection is lost
                logger.warning(f"Could not remember selected layout {layout.id}: {e}")

        self.active_layout_changed.emit(layout)
        return layout is not None

    def build_updated_layout(self) -> Optional[LayoutDocument]:
        """Active layout with live geometry folded in, or None."""
        layout = self.active_layout
        if layout is None:
            return None
        return fold_section_states(layout, self._interaction.layout_state.snapshot())

    def save(self) -> bool:
        """Fold live geometry into the active layout and write the whole collection."""
        updated = self.build_updated_layout()
        if updated is None:
            self.notice.emit(NoticeLevel.WARNING, "No layout", "Select a layout before saving")
            return False

        layouts = [updated if layout.id == updated.id else layout for layout in self._layouts]
        try:
            self._store.set(LAYOUTS_KEY, serialize_layouts(layouts))
        except OSError as e:
            logger.error(f"Error saving layout {updated.id}: {e}")
            self.notice.emit(NoticeLevel.ERROR, "Save failed", str(e))
            return False

        self._layouts = layouts
        logger.info(f"Saved layout {updated.id}")
        self.notice.emit(NoticeLevel.SUCCESS, "Saved", "Layout positions saved")
        return True

    def export_layout(self, destination: Path) -> Optional[Path]:
        """
        Write the active layout (with live geometry) as a JSON file.

        ``destination`` may be a directory, in which case the file is
        named after the layout. The store is not touched.
        """
        updated = self.build_updated_layout()
        if updated is None:
            self.notice.emit(NoticeLevel.WARNING, "No layout", "Select a layout before downloading")
            return None

        destination = Path(destination)
        if destination.is_dir():
            destination = destination / export_filename(updated)

        try:
            with open(destination, "w", encoding="utf-8") as f:
                f.write(serialize_layout(updated))
        except OSError as e:
            logger.error(f"Error exporting layout {updated.id}: {e}")
            self.notice.emit(NoticeLevel.ERROR, "Export failed", str(e))
            return None

        logger.info(f"Exported layout {updated.id} to {destination}")
        self.notice.emit(NoticeLevel.SUCCESS, "Downloaded", f"Layout JSON written to {destination.name}")
        return destination

    def import_layout(self, path: Path) -> Optional[LayoutDocument]:
        """
        Add a layout document from a JSON file to the collection.

        A layout with the same id is replaced in place; otherwise the
        new one is appended. The collection is written to the store.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                layout = LayoutDocument.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            # LayoutFormatError and JSONDecodeError are both ValueErrors
            logger.warning(f"Could not import layout from {path}: {e}")
            self.notice.emit(NoticeLevel.ERROR, "Import failed", str(e))
            return None

        if self._find(layout.id) is not None:
            layouts = [layout if item.id == layout.id else item for item in self._layouts]
        else:
            layouts = self._layouts + [layout]

        try:
            self._store.set(LAYOUTS_KEY, serialize_layouts(layouts))
        except OSError as e:
            logger.error(f"Error storing imported layout {layout.id}: {e}")
            self.notice.emit(NoticeLevel.ERROR, "Import failed", str(e))
            return None

        self._layouts = layouts
        logger.info(f"Imported layout {layout.id} from {path}")
        self.layouts_changed.emit()

        if layout.id == self._active_id:
            # Re-hydrate from the imported document
            self.select_layout(layout.id, remember=False)

        self.notice.emit(NoticeLevel.SUCCESS, "Imported", f"Layout '{layout.display_name}' imported")
        return layout

    def _find(self, layout_id: Optional[str]) -> Optional[LayoutDocument]:
        if layout_id is None:
            return None
        for layout in self._layouts:
            if layout.id == layout_id:
                return layout
        return None
