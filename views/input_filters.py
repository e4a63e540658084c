"""
Application-wide input filters.

ViewportPointerCapture is the PointerSource the interaction state
machine uses while dragging: it listens to mouse moves and releases on
the whole application, not just the canvas, so a drag keeps tracking
when the pointer leaves the canvas and ends wherever the button is
released.

RotateKeyFilter is the single keyboard hook for R / Shift+R. It is
installed once and asks the state machine on every key press, so it
never holds on to a section id. It only handles keys aimed at the
editor window, and never while a text field there has focus.
"""

import logging
from typing import Callable, Optional
from PyQt6.QtCore import QObject, QEvent, Qt
from PyQt6.QtGui import QWindow
from PyQt6.QtWidgets import (
    QApplication, QGraphicsView, QWidget, QLineEdit, QTextEdit,
    QPlainTextEdit, QAbstractSpinBox
)

from models.transform import Position
from services.interaction import InteractionStateMachine

logger = logging.getLogger(__name__)


class ViewportPointerCapture(QObject):
    """Forwards global mouse moves/releases as canvas coordinates."""

    def __init__(self, view: QGraphicsView, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._view = view
        self._on_move: Optional[Callable[[Position], None]] = None
        self._on_release: Optional[Callable[[], None]] = None
        self._installed = False

    @property
    def is_capturing(self) -> bool:
        return self._installed

    def capture(
        self,
        on_move: Callable[[Position], None],
        on_release: Callable[[], None],
    ) -> Callable[[], None]:
        """Start forwarding; returns the function that stops it."""
        self._on_move = on_move
        self._on_release = on_release
        app = QApplication.instance()
        if app is not None and not self._installed:
            app.installEventFilter(self)
            self._installed = True
            logger.debug("Pointer capture installed")
        return self._stop

    def _stop(self):
        self._on_move = None
        self._on_release = None
        app = QApplication.instance()
        if app is not None and self._installed:
            app.removeEventFilter(self)
            logger.debug("Pointer capture removed")
        self._installed = False

    def map_global(self, global_pos) -> Position:
        """Global screen point -> canvas coordinates."""
        viewport_pos = self._view.viewport().mapFromGlobal(global_pos.toPoint())
        scene_pos = self._view.mapToScene(viewport_pos)
        return Position(scene_pos.x(), scene_pos.y())

    def eventFilter(self, obj, event):
        # Mouse events reach the top-level QWindow first; handling them
        # there sees each event exactly once.
        if not isinstance(obj, QWindow):
            return False

        if event.type() == QEvent.Type.MouseMove and self._on_move is not None:
            self._on_move(self.map_global(event.globalPosition()))
            return True
        if event.type() == QEvent.Type.MouseButtonRelease and self._on_release is not None:
            self._on_release()
            # Let widgets see the release so their implicit grab ends
            return False
        return False


class RotateKeyFilter(QObject):
    """R rotates the selected section +90°, Shift+R -90°."""

    TEXT_INPUTS = (QLineEdit, QTextEdit, QPlainTextEdit, QAbstractSpinBox)

    def __init__(
        self,
        interaction: InteractionStateMachine,
        window: QWidget,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._interaction = interaction
        self._window = window

    def eventFilter(self, obj, event):
        if event.type() != QEvent.Type.KeyPress or not isinstance(obj, QWindow):
            return False
        if event.key() != Qt.Key.Key_R:
            return False
        # Dialogs and other top-level windows keep their keys
        if obj is not self._window.windowHandle():
            return False
        if isinstance(self._window.focusWidget(), self.TEXT_INPUTS):
            return False

        modifiers = event.modifiers()
        # Leave Ctrl+R / Alt+R to menus
        if modifiers & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.AltModifier):
            return False

        shift = bool(modifiers & Qt.KeyboardModifier.ShiftModifier)
        return self._interaction.handle_key("r", shift=shift)
