"""
Interaction State Machine.

Turns pointer and keyboard events into edits of the section layout
state: selection, dragging and rotation. It holds no widgets; the
canvas forwards events in canvas (screen) coordinates and repaints
on the signals emitted here.

States:
    IDLE      nothing selected
    SELECTED  one section selected
    DRAGGING  one section selected and following the pointer

While DRAGGING the machine holds a viewport-wide pointer subscription
so the drag keeps tracking when the pointer leaves the canvas. The
subscription is released on every way out of DRAGGING.
"""

import logging
from enum import Enum, auto
from typing import Callable, Optional, Protocol
from PyQt6.QtCore import QObject, pyqtSignal

from models.layout_state import SectionLayoutState
from models.transform import Position, to_logical, to_screen
from services.zoom_controller import ZoomController

logger = logging.getLogger(__name__)


ROTATE_KEY = "r"
ROTATE_STEP = 90.0


class InteractionMode(Enum):
    """Interaction states."""
    IDLE = auto()
    SELECTED = auto()
    DRAGGING = auto()


class PointerSource(Protocol):
    """
    Something that can deliver pointer events from the whole viewport.

    ``capture`` starts forwarding move/release events to the callbacks
    and returns a function that stops it.
    """

    def capture(
        self,
        on_move: Callable[[Position], None],
        on_release: Callable[[], None],
    ) -> Callable[[], None]:
        ...


class PointerSubscription:
    """Handle on an active pointer capture; release() is idempotent."""

    def __init__(self, release_fn: Optional[Callable[[], None]] = None):
        self._release_fn = release_fn
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def release(self):
        if not self._active:
            return
        self._active = False
        if self._release_fn is not None:
            self._release_fn()


class InteractionStateMachine(QObject):
    """
    Selection / drag / rotate controller for the arena canvas.

    Positions passed in are canvas coordinates (pointer position
    relative to the canvas origin). The drag offset is fixed when the
    drag starts so the pointer keeps its grip point inside the section.
    """

    # Signals
    selection_changed = pyqtSignal(object)   # section_id or None
    drag_state_changed = pyqtSignal(object)  # dragging section_id or None
    section_moved = pyqtSignal(str)          # section_id
    section_rotated = pyqtSignal(str, float) # section_id, new rotation
    layout_reset = pyqtSignal()

    def __init__(
        self,
        zoom: ZoomController,
        pointer_source: Optional[PointerSource] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._zoom = zoom
        self._pointer_source = pointer_source
        self._layout_state = SectionLayoutState()

        self._selected_id: Optional[str] = None
        self._dragging_id: Optional[str] = None
        self._drag_offset = Position()
        self._subscription: Optional[PointerSubscription] = None

        self._zoom.zoom_changed.connect(self._on_zoom_changed)

    # ------------------------------------------------------------------
    # State

    @property
    def mode(self) -> InteractionMode:
        if self._dragging_id is not None:
            return InteractionMode.DRAGGING
        if self._selected_id is not None:
            return InteractionMode.SELECTED
        return InteractionMode.IDLE

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def dragging_id(self) -> Optional[str]:
        return self._dragging_id

    @property
    def drag_offset(self) -> Position:
        return self._drag_offset

    @property
    def layout_state(self) -> SectionLayoutState:
        return self._layout_state

    @property
    def zoom(self) -> float:
        return self._zoom.zoom

    @property
    def has_pointer_capture(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def set_pointer_source(self, source: Optional[PointerSource]):
        """Swap the pointer source; any running drag is cancelled first."""
        self.cancel_drag()
        self._pointer_source = source

    def screen_position(self, section_id: str) -> Optional[Position]:
        """Where a section is drawn at the current zoom."""
        state = self._layout_state.get(section_id)
        if state is None:
            return None
        return to_screen(state.position, self._zoom.zoom)

    # ------------------------------------------------------------------
    # Transitions

    def reset(self, layout_state: Optional[SectionLayoutState] = None):
        """Install a new layout state and clear the session (layout switch)."""
        self._stop_drag()
        self._layout_state = layout_state if layout_state is not None else SectionLayoutState()
        self._set_selected(None)
        self._drag_offset = Position()
        self.layout_reset.emit()

    def press_section(self, section_id: str, pos: Position) -> bool:
        """Pointer down on a section: select it and start dragging."""
        state = self._layout_state.get(section_id)
        if state is None:
            logger.debug(f"Ignoring press on unknown section {section_id}")
            return False

        self._stop_drag()
        self._drag_offset = pos - to_screen(state.position, self._zoom.zoom)
        self._set_selected(section_id)
        self._dragging_id = section_id
        self._subscription = self._acquire_pointer()
        self.drag_state_changed.emit(section_id)
        return True

    def move_pointer(self, pos: Position) -> bool:
        """Pointer moved; only has an effect while dragging."""
        if self._dragging_id is None:
            return False

        logical = to_logical(pos - self._drag_offset, self._zoom.zoom)
        if not self._layout_state.set_position(self._dragging_id, logical):
            return False
        self.section_moved.emit(self._dragging_id)
        return True

    def release_pointer(self):
        """Pointer up anywhere: end the drag, keep the selection."""
        self._stop_drag()

    def press_canvas(self):
        """Pointer down on empty canvas: deselect."""
        self._stop_drag()
        self._set_selected(None)

    def cancel_drag(self) -> bool:
        """Abort a drag without moving anything; returns True if one was running."""
        if self._dragging_id is None:
            return False
        logger.debug(f"Drag of {self._dragging_id} cancelled")
        self._stop_drag()
        return True

    def rotate(self, section_id: str, delta: float) -> Optional[float]:
        """Rotate any section by ``delta`` degrees, selected or not."""
        rotation = self._layout_state.rotate(section_id, delta)
        if rotation is None:
            return None
        self.section_rotated.emit(section_id, rotation)
        return rotation

    def rotate_selected(self, delta: float) -> Optional[float]:
        if self._selected_id is None:
            return None
        return self.rotate(self._selected_id, delta)

    def handle_key(self, key: str, shift: bool = False) -> bool:
        """
        Global keyboard hook. R rotates the selected section by +90,
        Shift+R by -90. Returns True when the key was consumed.
        """
        if self._selected_id is None or key.lower() != ROTATE_KEY:
            return False
        return self.rotate_selected(-ROTATE_STEP if shift else ROTATE_STEP) is not None

    def shutdown(self):
        """Release everything held; called when the canvas goes away."""
        self._stop_drag()

    # ------------------------------------------------------------------
    # Internals

    def _on_zoom_changed(self, _zoom: float):
        # The drag offset was measured at the old zoom
        self.cancel_drag()

    def _set_selected(self, section_id: Optional[str]):
        if section_id == self._selected_id:
            return
        self._selected_id = section_id
        self.selection_changed.emit(section_id)

    def _acquire_pointer(self) -> PointerSubscription:
        if self._pointer_source is None:
            return PointerSubscription()
        release_fn = self._pointer_source.capture(self.move_pointer, self.release_pointer)
        return PointerSubscription(release_fn)

    def _stop_drag(self):
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.release()
        if self._dragging_id is not None:
            self._dragging_id = None
            self.drag_state_changed.emit(None)
