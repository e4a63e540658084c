"""
Graphics items for arena sections.

A SectionGraphicsItem paints one section's seat grid (geometry from
models.seat_grid) inside a dashed frame, with a title badge and a
rotate button. The item itself is rotated about its center; the badge
and the button counter-rotate so they stay upright.

Items never move themselves. The canvas positions them from the
section layout state and forwards presses to the interaction state
machine.
"""

from typing import Optional
from PyQt6.QtCore import Qt, QRectF, QPointF
from PyQt6.QtGui import QPainter, QPen, QBrush, QColor, QFont
from PyQt6.QtWidgets import (
    QGraphicsItem, QGraphicsEllipseItem, QGraphicsSimpleTextItem,
    QGraphicsRectItem
)

from models.layout import SectionDocument
from models.seat_grid import SeatCell, SeatDecorator, SeatGrid, compute_seat_grid


COLORS = {
    "seat_default": QColor("#DEE2E6"),    # Gray
    "seat_text": QColor("#FFFFFF"),
    "row_label": QColor("#495057"),       # Dark gray
    "frame": QColor("#CED4DA"),           # Light gray dashed outline
    "frame_fill": QColor(255, 255, 255, 217),
    "badge": QColor(255, 255, 255, 230),
    "badge_text": QColor("#212529"),
    "rotate_button": QColor("#E7F5FF"),
    "rotate_icon": QColor("#1C7ED6"),
}

CURSORS = {
    "grab": Qt.CursorShape.OpenHandCursor,
    "grabbing": Qt.CursorShape.ClosedHandCursor,
    "pointer": Qt.CursorShape.PointingHandCursor,
    "default": Qt.CursorShape.ArrowCursor,
}

# Padding between the seat grid and the dashed frame
FRAME_PADDING = 4.0
FRAME_OFFSET = 4.0


def cursor_shape(name: Optional[str]) -> Qt.CursorShape:
    return CURSORS.get(name or "default", Qt.CursorShape.ArrowCursor)


class RotateButtonItem(QGraphicsEllipseItem):
    """Small round button in a section's top-right corner; rotates +90."""

    RADIUS = 11

    def __init__(self, section_item: "SectionGraphicsItem"):
        super().__init__(-self.RADIUS, -self.RADIUS, self.RADIUS * 2, self.RADIUS * 2, section_item)
        self.section_item = section_item
        self.setBrush(QBrush(COLORS["rotate_button"]))
        self.setPen(QPen(COLORS["rotate_icon"].lighter(150), 1))
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.setToolTip("Rotate 90°")
        self.setZValue(2)

    def paint(self, painter: QPainter, option, widget=None):
        super().paint(painter, option, widget)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(QPen(COLORS["rotate_icon"], 1.6))
        r = self.RADIUS * 0.5
        arc = QRectF(-r, -r, r * 2, r * 2)
        # Qt angles are in 1/16 degree
        painter.drawArc(arc, 90 * 16, -270 * 16)
        painter.drawLine(QPointF(0, -r), QPointF(-3, -r - 3))
        painter.drawLine(QPointF(0, -r), QPointF(-3, -r + 3))


class SectionGraphicsItem(QGraphicsItem):
    """
    Visual representation of a section: seat grid, title badge and
    rotate button.

    ``decorator`` is called with each seat id to get highlight color,
    tooltip, extra content, click handler and cursor.
    """

    def __init__(
        self,
        section: SectionDocument,
        zoom: float = 1.0,
        decorator: Optional[SeatDecorator] = None,
        parent: Optional[QGraphicsItem] = None,
    ):
        super().__init__(parent)
        self.section = section
        self._zoom = zoom
        self._decorator = decorator
        self._grid: SeatGrid = compute_seat_grid(section, zoom)
        self._rotation = 0.0
        # Cursor over the frame and gaps; seats may override it
        self.frame_cursor = "grab"

        self.setAcceptHoverEvents(True)
        self.setCursor(cursor_shape(self.frame_cursor))

        self._badge = QGraphicsRectItem(self)
        self._badge.setBrush(QBrush(COLORS["badge"]))
        self._badge.setPen(QPen(Qt.PenStyle.NoPen))
        self._badge.setZValue(2)
        self._title = QGraphicsSimpleTextItem(section.display_name, self._badge)
        font = QFont()
        font.setPointSize(8)
        font.setBold(True)
        self._title.setFont(font)
        self._title.setBrush(QBrush(COLORS["badge_text"]))

        self.rotate_button = RotateButtonItem(self)

        self._layout_overlays()

    @property
    def section_id(self) -> str:
        return self.section.id

    @property
    def grid(self) -> SeatGrid:
        return self._grid

    def set_zoom(self, zoom: float):
        """Recompute the grid geometry for a new zoom."""
        if zoom == self._zoom:
            return
        self.prepareGeometryChange()
        self._zoom = zoom
        self._grid = compute_seat_grid(self.section, zoom)
        self._layout_overlays()
        self.set_section_rotation(self._rotation)

    def set_section_rotation(self, degrees: float):
        """Rotate about the center; overlays stay upright."""
        self._rotation = degrees
        self.setTransformOriginPoint(self.boundingRect().center())
        self.setRotation(degrees)
        for overlay in (self._badge, self.rotate_button):
            overlay.setTransformOriginPoint(overlay.boundingRect().center())
            overlay.setRotation(-degrees)

    def refresh(self):
        """Repaint after selection/drag changes alter the decoration."""
        self.update()

    def frame_rect(self) -> QRectF:
        pad = FRAME_PADDING
        return QRectF(-pad, -pad, self._grid.width + pad * 2, self._grid.height + pad * 2)

    def boundingRect(self) -> QRectF:
        margin = FRAME_OFFSET + 1
        return self.frame_rect().adjusted(-margin, -margin, margin, margin)

    def seat_at(self, local_pos: QPointF) -> Optional[SeatCell]:
        return self._grid.seat_at(local_pos.x(), local_pos.y())

    def decoration_for(self, seat_id: str):
        if self._decorator is None:
            return None
        return self._decorator(seat_id)

    def _layout_overlays(self):
        frame = self.frame_rect()
        text_rect = self._title.boundingRect()
        self._badge.setRect(0, 0, text_rect.width() + 12, text_rect.height() + 4)
        self._title.setPos(6, 2)
        self._badge.setPos(frame.left() + 4, frame.top() + 4)
        r = RotateButtonItem.RADIUS
        self.rotate_button.setPos(frame.right() - 4 - r, frame.top() + 4 + r)

    def paint(self, painter: QPainter, option, widget=None):
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        # Frame
        frame = self.frame_rect()
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(COLORS["frame_fill"]))
        painter.drawRect(frame)
        painter.setPen(QPen(COLORS["frame"], 1, Qt.PenStyle.DashLine))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        offset = FRAME_OFFSET
        painter.drawRect(frame.adjusted(-offset, -offset, offset, offset))

        font = QFont("monospace")
        font.setStyleHint(QFont.StyleHint.Monospace)
        font.setPixelSize(max(6, int(self._grid.seat_height * 0.4)))
        painter.setFont(font)

        # Row labels
        painter.setPen(QPen(COLORS["row_label"]))
        for label in self._grid.labels:
            rect = QRectF(label.rect.x, label.rect.y, label.rect.width, label.rect.height)
            painter.drawText(
                rect.adjusted(0, 0, -max(2.0, 4 * self._zoom), 0),
                Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
                label.text,
            )

        # Seats
        radius = max(1.0, 3 * self._zoom)
        for cell in self._grid.seats:
            decoration = self.decoration_for(cell.seat_id)
            color = QColor(decoration.color) if decoration and decoration.color else COLORS["seat_default"]
            rect = QRectF(cell.rect.x, cell.rect.y, cell.rect.width, cell.rect.height)

            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(color))
            painter.drawRoundedRect(rect, radius, radius)

            text = cell.seat_id
            if decoration and decoration.content:
                text = f"{text} {decoration.content}"
            painter.setPen(QPen(COLORS["seat_text"]))
            painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)

    def hoverMoveEvent(self, event):
        """Per-seat tooltip and cursor from the decoration."""
        cell = self.seat_at(event.pos())
        decoration = self.decoration_for(cell.seat_id) if cell else None
        self.setToolTip(decoration.tooltip if decoration and decoration.tooltip else "")
        self.setCursor(cursor_shape(decoration.cursor if decoration and decoration.cursor else self.frame_cursor))
        super().hoverMoveEvent(event)
