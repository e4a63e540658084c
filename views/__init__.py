"""Views package."""

from .section_item import SectionGraphicsItem, RotateButtonItem
from .input_filters import ViewportPointerCapture, RotateKeyFilter
from .arena_canvas import ArenaCanvas, ArenaScene
from .main_window import MainWindow, EditorToolbar

__all__ = [
    "SectionGraphicsItem",
    "RotateButtonItem",
    "ViewportPointerCapture",
    "RotateKeyFilter",
    "ArenaCanvas",
    "ArenaScene",
    "MainWindow",
    "EditorToolbar",
]
