"""
Zoom Controller.

Owns the canvas zoom factor. Steps are rounded to two decimals after
clamping so repeated steps never drift and the bounds come out exact.
"""

import logging
from typing import Optional
from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)


MIN_ZOOM = 0.1
MAX_ZOOM = 2.5
ZOOM_STEP = 0.1
DEFAULT_ZOOM = 0.4
RESET_ZOOM = 1.0


def clamp_zoom(value: float) -> float:
    """Clamp into [MIN_ZOOM, MAX_ZOOM] and round to two decimals."""
    return round(min(MAX_ZOOM, max(MIN_ZOOM, value)), 2)


class ZoomController(QObject):
    """
    Bounded, steppable zoom factor.

    ``zoom_changed`` fires only when the value actually changes; the
    interaction state machine listens to it to cancel a running drag.
    """

    # Signals
    zoom_changed = pyqtSignal(float)  # New zoom factor

    def __init__(self, initial: float = DEFAULT_ZOOM, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._zoom = clamp_zoom(initial)

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def percent(self) -> int:
        """Zoom as a rounded percentage, for the toolbar readout."""
        return round(self._zoom * 100)

    @property
    def can_increase(self) -> bool:
        return self._zoom < MAX_ZOOM

    @property
    def can_decrease(self) -> bool:
        return self._zoom > MIN_ZOOM

    @property
    def is_reset(self) -> bool:
        return self._zoom == RESET_ZOOM

    def increase(self) -> float:
        return self.set_zoom(self._zoom + ZOOM_STEP)

    def decrease(self) -> float:
        return self.set_zoom(self._zoom - ZOOM_STEP)

    def reset(self) -> float:
        return self.set_zoom(RESET_ZOOM)

    def set_zoom(self, value: float) -> float:
        """Set the zoom (clamped, rounded); returns the resulting factor."""
        new_zoom = clamp_zoom(value)
        if new_zoom != self._zoom:
            logger.debug(f"Zoom {self._zoom} -> {new_zoom}")
            self._zoom = new_zoom
            self.zoom_changed.emit(new_zoom)
        return self._zoom
