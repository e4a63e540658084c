"""
Arena canvas for visual section layout editing.

Uses Qt's Graphics View Framework for rendering. The view is never
scaled: scene coordinates are canvas (screen) coordinates, and the
zoom is applied by placing each section at ``logical * zoom`` and by
laying out its seat grid at that zoom.

All editing goes through the InteractionStateMachine; the canvas only
forwards presses and repaints on its signals.
"""

import logging
from typing import Dict, Optional
from PyQt6.QtCore import Qt, QRectF, QPointF, pyqtSignal
from PyQt6.QtGui import QPainter, QPen, QColor, QMouseEvent, QFont
from PyQt6.QtWidgets import QGraphicsView, QGraphicsScene, QGraphicsItem

from models.layout import LayoutDocument
from models.seat_grid import SeatDecoration
from models.transform import Position
from services.interaction import InteractionStateMachine
from services.zoom_controller import ZoomController
from views.input_filters import ViewportPointerCapture
from views.section_item import SectionGraphicsItem, RotateButtonItem

# Setup logger for this module
logger = logging.getLogger(__name__)


# Color scheme
COLORS = {
    "seat": QColor("#4DABF7"),            # Blue
    "seat_selected": QColor("#5C7CFA"),   # Indigo
    "grid": QColor("#E9ECEF"),            # Light gray
    "background": QColor("#F8F9FA"),      # Off-white
    "placeholder": QColor("#868E96"),
}

# Default minimum canvas size; EditorSettings can override it
CANVAS_WIDTH = 1200
CANVAS_HEIGHT = 800

ROTATE_BUTTON_STEP = 90.0


class ArenaScene(QGraphicsScene):
    """Scene holding one SectionGraphicsItem per section of the active layout."""

    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT, parent=None):
        super().__init__(parent)
        self._section_items: Dict[str, SectionGraphicsItem] = {}
        self._min_width = width
        self._min_height = height
        self.setBackgroundBrush(COLORS["background"])
        self.setSceneRect(QRectF(0, 0, width, height))

    def set_minimum_size(self, width: int, height: int):
        self._min_width = max(1, width)
        self._min_height = max(1, height)
        self.fit_scene_rect()

    @property
    def section_items(self) -> Dict[str, SectionGraphicsItem]:
        return dict(self._section_items)

    def get_section_item(self, section_id: str) -> Optional[SectionGraphicsItem]:
        return self._section_items.get(section_id)

    def add_section_item(self, item: SectionGraphicsItem):
        self.addItem(item)
        self._section_items[item.section_id] = item

    def clear_sections(self):
        for item in self._section_items.values():
            self.removeItem(item)
        self._section_items.clear()

    def fit_scene_rect(self):
        """Grow the scene to cover all sections, never below the canvas minimum."""
        rect = QRectF(0, 0, self._min_width, self._min_height)
        if self._section_items:
            rect = rect.united(self.itemsBoundingRect().adjusted(0, 0, 50, 50))
        rect.setLeft(0)
        rect.setTop(0)
        self.setSceneRect(rect)


class ArenaCanvas(QGraphicsView):
    """
    Main canvas widget for arranging sections.

    Presses on a section start a drag, presses on a section's rotate
    button rotate it, presses elsewhere deselect. Moves and releases
    during a drag arrive through the viewport-wide pointer capture.
    """

    # Signals
    sectionSelected = pyqtSignal(object)  # section_id or None

    def __init__(
        self,
        interaction: InteractionStateMachine,
        zoom: ZoomController,
        parent=None,
    ):
        super().__init__(parent)
        self._interaction = interaction
        self._zoom = zoom
        self._layout: Optional[LayoutDocument] = None
        self._show_grid = True
        self._grid_size = 50

        # Create scene
        self.arena_scene = ArenaScene()
        self.setScene(self.arena_scene)

        # View settings
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)

        # Viewport-wide pointer capture used during drags
        self.pointer_capture = ViewportPointerCapture(self, self)
        self._interaction.set_pointer_source(self.pointer_capture)

        self._connect_signals()

    def _connect_signals(self):
        self._interaction.section_moved.connect(self._on_section_moved)
        self._interaction.section_rotated.connect(self._on_section_rotated)
        self._interaction.selection_changed.connect(self._on_selection_changed)
        self._interaction.drag_state_changed.connect(self._on_drag_state_changed)
        self._zoom.zoom_changed.connect(self._on_zoom_changed)

    def set_canvas_size(self, width: int, height: int):
        """Minimum scene size at any zoom."""
        self.arena_scene.set_minimum_size(width, height)

    def set_grid(self, show: bool, size: int = 50):
        self._show_grid = show
        self._grid_size = max(5, size)
        self.viewport().update()

    # ------------------------------------------------------------------
    # Layout

    def set_layout(self, layout: Optional[LayoutDocument]):
        """Rebuild all section items for a newly selected layout."""
        self._layout = layout
        self.arena_scene.clear_sections()

        if layout is None:
            self.viewport().update()
            return

        for section in layout.sections:
            if section.id not in self._interaction.layout_state:
                continue
            item = SectionGraphicsItem(section, self._zoom.zoom, self._make_decorator(section.id))
            self.arena_scene.add_section_item(item)
            self._place_item(item)

        self.arena_scene.fit_scene_rect()
        logger.debug(f"Canvas showing {len(self.arena_scene.section_items)} section(s)")

    def _make_decorator(self, section_id: str):
        def decorate(seat_id: str) -> SeatDecoration:
            selected = self._interaction.selected_id == section_id
            dragging = self._interaction.dragging_id == section_id
            return SeatDecoration(
                color=(COLORS["seat_selected"] if selected else COLORS["seat"]).name(),
                cursor="grabbing" if dragging else "grab",
            )
        return decorate

    def _place_item(self, item: SectionGraphicsItem):
        state = self._interaction.layout_state.get(item.section_id)
        screen = self._interaction.screen_position(item.section_id)
        if state is None or screen is None:
            return
        item.setPos(screen.x, screen.y)
        item.set_section_rotation(state.rotation)
        selected = self._interaction.selected_id == item.section_id
        dragging = self._interaction.dragging_id == item.section_id
        item.setZValue(10 if selected or dragging else 1)

    # ------------------------------------------------------------------
    # State machine signals

    def _on_section_moved(self, section_id: str):
        item = self.arena_scene.get_section_item(section_id)
        if item:
            self._place_item(item)

    def _on_section_rotated(self, section_id: str, _rotation: float):
        item = self.arena_scene.get_section_item(section_id)
        if item:
            self._place_item(item)

    def _on_selection_changed(self, section_id):
        for item in self.arena_scene.section_items.values():
            self._place_item(item)
            item.refresh()
        self.sectionSelected.emit(section_id)

    def _on_drag_state_changed(self, section_id):
        for item in self.arena_scene.section_items.values():
            item.frame_cursor = "grabbing" if item.section_id == section_id else "grab"
            item.setCursor(
                Qt.CursorShape.ClosedHandCursor if item.section_id == section_id
                else Qt.CursorShape.OpenHandCursor
            )
            item.refresh()
        if section_id is None:
            self.arena_scene.fit_scene_rect()

    def _on_zoom_changed(self, zoom: float):
        for item in self.arena_scene.section_items.values():
            item.set_zoom(zoom)
            self._place_item(item)
        self.arena_scene.fit_scene_rect()

    # ------------------------------------------------------------------
    # Events

    def canvas_position(self, event: QMouseEvent) -> Position:
        scene_pos = self.mapToScene(event.position().toPoint())
        return Position(scene_pos.x(), scene_pos.y())

    def _section_item_at(self, scene_pos: QPointF):
        """Topmost rotate button or section item under a scene point."""
        for item in self.arena_scene.items(scene_pos):
            if isinstance(item, RotateButtonItem):
                return item
            node: Optional[QGraphicsItem] = item
            while node is not None:
                if isinstance(node, SectionGraphicsItem):
                    return node
                node = node.parentItem()
        return None

    def mousePressEvent(self, event: QMouseEvent):
        """Handle mouse press."""
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        pos = self.canvas_position(event)
        hit = self._section_item_at(QPointF(pos.x, pos.y))

        if isinstance(hit, RotateButtonItem):
            # Rotating doesn't need (or change) selection
            self._interaction.rotate(hit.section_item.section_id, ROTATE_BUTTON_STEP)
        elif isinstance(hit, SectionGraphicsItem):
            self._interaction.press_section(hit.section_id, pos)
            cell = hit.seat_at(hit.mapFromScene(QPointF(pos.x, pos.y)))
            decoration = hit.decoration_for(cell.seat_id) if cell else None
            if decoration and decoration.on_click:
                decoration.on_click()
        else:
            self._interaction.press_canvas()
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent):
        """Handle mouse release (normally already seen by the pointer capture)."""
        if event.button() == Qt.MouseButton.LeftButton:
            self._interaction.release_pointer()
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def drawBackground(self, painter: QPainter, rect: QRectF):
        """Draw grid background."""
        super().drawBackground(painter, rect)

        if not self._show_grid:
            return

        grid_size = max(5, int(self._grid_size * self._zoom.zoom))

        left = int(rect.left()) - (int(rect.left()) % grid_size)
        top = int(rect.top()) - (int(rect.top()) % grid_size)

        painter.setPen(QPen(COLORS["grid"], 1))

        # Vertical lines
        x = left
        while x < rect.right():
            painter.drawLine(int(x), int(rect.top()), int(x), int(rect.bottom()))
            x += grid_size

        # Horizontal lines
        y = top
        while y < rect.bottom():
            painter.drawLine(int(rect.left()), int(y), int(rect.right()), int(y))
            y += grid_size

    def drawForeground(self, painter: QPainter, rect: QRectF):
        """Placeholder text when no layout is selected."""
        super().drawForeground(painter, rect)
        if self._layout is not None:
            return
        painter.setPen(QPen(COLORS["placeholder"]))
        font = QFont()
        font.setPointSize(12)
        painter.setFont(font)
        visible = self.mapToScene(self.viewport().rect()).boundingRect()
        painter.drawText(visible, Qt.AlignmentFlag.AlignCenter, "Select a layout to edit")

    def closeEvent(self, event):
        self._interaction.shutdown()
        super().closeEvent(event)
