"""Workflow canvas widget.

A QWidget that renders and interacts with a WorkflowGraph.  Handles:
  - Node drag (press, hold past the click window, move)
  - Double click on a node to open its configuration
  - Two-phase port connection: click an output, then click an input
  - Click on a connection to remove it
  - Delete button on each node
  - Drops from the node palette

The canvas has no zoom or pan: widget pixels are canvas coordinates.

Painting and picking both go through scene.py; the pointer state machine
lives in gesture.py.  This module only translates between Qt and those.
"""

from __future__ import annotations

import math
from typing import Callable, Optional

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import (
    QBrush, QColor, QDragEnterEvent, QDropEvent, QFont,
    QMouseEvent, QPainter, QPainterPath, QPen, QPolygonF,
)
from PySide6.QtWidgets import QSizePolicy, QToolTip, QWidget

from .geometry import CurveSpec
from .gesture import CLICK_WINDOW_MS, GestureController
from .graph_model import DEFAULT_NODE_H, DEFAULT_NODE_W, PortRole, WorkflowGraph
from .palette import MIME_TYPE, drop_template, template_from_mime
from .scene import GRID_SIZE, PORT_RADIUS, HitKind, NodeView, Scene, build_scene, hit_test


# ---------------------------------------------------------------------------
# Visual constants
# ---------------------------------------------------------------------------

C_BG            = QColor("#101624")
C_GRID          = QColor("#2E2A55")
C_NODE_BORDER   = QColor(255, 255, 255, 40)
C_NODE_SEL      = QColor("#FFFFFF")
C_WIRE          = QColor("#FFFFFF")
C_WIRE_HOVER    = QColor("#FFD35B")
C_WIRE_PREVIEW  = QColor("#A1A1A5")
C_PORT = {
    PortRole.INPUT:  QColor("#3B82F6"),
    PortRole.OUTPUT: QColor("#22C55E"),
}
C_ERROR         = QColor("#EF4444")
C_BANNER        = QColor("#9B4A4A")
C_TEXT          = QColor("#FFFFFF")
C_TEXT_DIM      = QColor(255, 255, 255, 170)
C_HINT          = QColor("#A1A1A5")

ARROW_LEN       = 10.0
ARROW_HALF_W    = 5.0
NODE_RADIUS     = 8


# ---------------------------------------------------------------------------
# Timer adapter
# ---------------------------------------------------------------------------

class QtSingleShotTimer:
    """SingleShotTimer backed by a QTimer parented to the canvas."""

    def __init__(self, parent=None):
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._callback: Optional[Callable[[], None]] = None
        self._timer.timeout.connect(self._fire)

    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._timer.start(interval_ms)

    def stop(self) -> None:
        self._timer.stop()
        self._callback = None

    def _fire(self) -> None:
        cb, self._callback = self._callback, None
        if cb is not None:
            cb()


# ---------------------------------------------------------------------------
# Workflow canvas
# ---------------------------------------------------------------------------

class NodeGraphCanvas(QWidget):
    """Interactive workflow canvas.

    Signals:
      graph_changed()        – emitted whenever the graph is mutated
      open_config(object)    – WorkflowNode double-clicked
      status_changed(str)    – connect-mode status text ("" when idle)
    """

    graph_changed  = Signal()
    open_config    = Signal(object)
    status_changed = Signal(str)

    def __init__(self, graph: WorkflowGraph, parent=None,
                 click_window_ms: int = CLICK_WINDOW_MS,
                 grid_size: int = GRID_SIZE,
                 node_size: tuple[float, float] = (DEFAULT_NODE_W, DEFAULT_NODE_H)):
        super().__init__(parent)
        self.graph = graph
        self.grid_size = grid_size
        self.node_size = node_size

        self.setFocusPolicy(Qt.StrongFocus)
        self.setMouseTracking(True)
        self.setAcceptDrops(True)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(500, 400)

        self.gesture = GestureController(
            graph, QtSingleShotTimer(self), click_window_ms,
            on_open_config=self.open_config.emit,
            on_tracking=self._on_tracking,
        )
        self._hover_conn: Optional[str] = None
        self._last_status = ""

        graph.on_change(self._on_graph_change)

    # -----------------------------------------------------------------------
    # Scene
    # -----------------------------------------------------------------------

    def scene(self) -> Scene:
        return build_scene(self.graph, self.gesture, self._hover_conn, self.grid_size)

    def _on_graph_change(self, source) -> None:
        if self._hover_conn is not None and self.graph.get_connection(self._hover_conn) is None:
            self._hover_conn = None
        self._sync_status()
        self.update()
        if source != "select":
            self.graph_changed.emit()

    def _sync_status(self) -> None:
        text = self.gesture.status_text
        if text != self._last_status:
            self._last_status = text
            self.status_changed.emit(text)

    def _on_tracking(self, active: bool) -> None:
        if not active:
            self.unsetCursor()
        elif self.gesture.is_connecting:
            self.setCursor(Qt.CrossCursor)
        else:
            self.setCursor(Qt.ClosedHandCursor)

    # -----------------------------------------------------------------------
    # Painting
    # -----------------------------------------------------------------------

    def paintEvent(self, event):
        scene = self.scene()
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)

        painter.fillRect(self.rect(), C_BG)
        self._draw_grid(painter, scene.grid_size)

        self._draw_connections(painter, scene)
        if scene.preview is not None:
            self._draw_preview_wire(painter, scene.preview)
        for nv in scene.nodes:
            self._draw_node(painter, nv)

        if scene.empty_hint is not None:
            self._draw_empty_hint(painter, scene.empty_hint)
        if scene.status_text:
            self._draw_banner(painter, scene.status_text)

    def _draw_grid(self, painter: QPainter, step: int) -> None:
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(C_GRID))
        y = 0
        while y < self.height():
            x = 0
            while x < self.width():
                painter.drawEllipse(QPointF(x + 1, y + 1), 1.0, 1.0)
                x += step
            y += step

    def _draw_connections(self, painter: QPainter, scene: Scene) -> None:
        for cv in scene.connections:
            col = C_WIRE_HOVER if cv.hover else C_WIRE
            painter.setPen(QPen(col, cv.width, Qt.SolidLine, Qt.RoundCap))
            painter.setBrush(Qt.NoBrush)
            painter.drawPath(_curve_path(cv.curve))
            _draw_arrowhead(painter, cv.curve, col)

    def _draw_preview_wire(self, painter: QPainter, curve: CurveSpec) -> None:
        painter.setPen(QPen(C_WIRE_PREVIEW, 2.0, Qt.DashLine))
        painter.setBrush(Qt.NoBrush)
        painter.drawPath(_curve_path(curve))

    def _draw_node(self, painter: QPainter, nv: NodeView) -> None:
        r = QRectF(nv.x, nv.y, nv.width, nv.height)

        # Shadow
        shadow = QPainterPath()
        shadow.addRoundedRect(r.adjusted(3, 3, 3, 3), NODE_RADIUS, NODE_RADIUS)
        painter.fillPath(shadow, QColor(0, 0, 0, 80))

        # Body
        body = QPainterPath()
        body.addRoundedRect(r, NODE_RADIUS, NODE_RADIUS)
        painter.fillPath(body, QColor(nv.fill))

        # Border
        painter.setPen(QPen(C_NODE_SEL if nv.selected else C_NODE_BORDER,
                            2.5 if nv.selected else 1.0))
        painter.setBrush(Qt.NoBrush)
        painter.drawRoundedRect(r, NODE_RADIUS, NODE_RADIUS)

        # Icon
        icon_r = QRectF(r.left() + 12, r.center().y() - 16, 32, 32)
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(QColor(255, 255, 255, 40)))
        painter.drawRoundedRect(icon_r, 6, 6)
        painter.setPen(QPen(C_TEXT))
        painter.setFont(QFont("Segoe UI", 12))
        painter.drawText(icon_r, Qt.AlignCenter, nv.glyph)

        # Label + kind caption
        text_left = icon_r.right() + 10
        text_w = nv.delete_rect[0] - text_left - 4
        font = QFont("Segoe UI", 9)
        font.setBold(True)
        painter.setFont(font)
        painter.drawText(QRectF(text_left, r.top() + 18, text_w, 20),
                         Qt.AlignVCenter | Qt.AlignLeft, nv.label)
        painter.setPen(QPen(C_TEXT_DIM))
        painter.setFont(QFont("Segoe UI", 8))
        painter.drawText(QRectF(text_left, r.top() + 40, text_w, 18),
                         Qt.AlignVCenter | Qt.AlignLeft, nv.caption)

        # Delete button
        dx, dy, dw, dh = nv.delete_rect
        painter.setPen(QPen(C_TEXT_DIM))
        painter.setFont(QFont("Segoe UI", 11))
        painter.drawText(QRectF(dx, dy, dw, dh), Qt.AlignCenter, "×")

        # Error badge
        if nv.has_error:
            painter.setPen(Qt.NoPen)
            painter.setBrush(QBrush(C_ERROR))
            badge = QPointF(r.right() - 4, r.top() + 4)
            painter.drawEllipse(badge, 8, 8)
            painter.setPen(QPen(C_TEXT))
            painter.setFont(QFont("Segoe UI", 8, QFont.Bold))
            painter.drawText(QRectF(badge.x() - 8, badge.y() - 8, 16, 16), Qt.AlignCenter, "!")

        # Collaborator avatars
        for i, (initial, color) in enumerate(nv.avatars):
            c = QPointF(r.left() + 10 + i * 14, r.top() - 2)
            painter.setPen(QPen(C_BG, 2))
            painter.setBrush(QBrush(QColor(color)))
            painter.drawEllipse(c, 9, 9)
            painter.setPen(QPen(C_TEXT))
            painter.setFont(QFont("Segoe UI", 7, QFont.Bold))
            painter.drawText(QRectF(c.x() - 9, c.y() - 9, 18, 18), Qt.AlignCenter, initial)

        self._draw_ports(painter, nv)

    def _draw_ports(self, painter: QPainter, nv: NodeView) -> None:
        for pv in nv.ports:
            col = C_PORT[pv.role]
            center = QPointF(pv.x, pv.y)
            if pv.pulsing:
                painter.setPen(QPen(col, 1.5, Qt.DashLine))
                painter.setBrush(Qt.NoBrush)
                painter.drawEllipse(center, PORT_RADIUS + 4, PORT_RADIUS + 4)
            painter.setBrush(QBrush(col))
            painter.setPen(QPen(C_TEXT, 2))
            painter.drawEllipse(center, PORT_RADIUS, PORT_RADIUS)

    def _draw_banner(self, painter: QPainter, text: str) -> None:
        font = QFont("Segoe UI", 9)
        font.setBold(True)
        painter.setFont(font)
        w = painter.fontMetrics().horizontalAdvance(text) + 32
        r = QRectF((self.width() - w) / 2, 12, w, 28)
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(C_BANNER))
        painter.drawRoundedRect(r, 6, 6)
        painter.setPen(QPen(C_TEXT))
        painter.drawText(r, Qt.AlignCenter, text)

    def _draw_empty_hint(self, painter: QPainter, hint: tuple[str, str]) -> None:
        title, body = hint
        cy = self.height() / 2
        painter.setPen(QPen(C_TEXT))
        font = QFont("Segoe UI", 13)
        font.setBold(True)
        painter.setFont(font)
        painter.drawText(QRectF(0, cy - 30, self.width(), 26), Qt.AlignCenter, title)
        painter.setPen(QPen(C_HINT))
        painter.setFont(QFont("Segoe UI", 10))
        painter.drawText(QRectF(0, cy, self.width(), 22), Qt.AlignCenter, body)

    # -----------------------------------------------------------------------
    # Mouse events
    # -----------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton:
            return
        pos = event.position()
        x, y = pos.x(), pos.y()
        hit = hit_test(self.scene(), x, y)

        if hit.kind == HitKind.PORT:
            self.gesture.pointer_down_port(hit.node_id, hit.side, x, y)
        elif hit.kind == HitKind.DELETE_BUTTON:
            self.graph.delete_node(hit.node_id)
        elif hit.kind == HitKind.NODE:
            self.gesture.pointer_down_node(hit.node_id, x, y)
        elif hit.kind == HitKind.CONNECTION and not self.gesture.is_connecting:
            self.graph.delete_connection(hit.conn_id)
        else:
            self.gesture.pointer_down_canvas(x, y)

        self._sync_status()
        self.update()

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:
        # Qt delivers the second press of a double click here; the gesture
        # controller does its own click-window timing
        self.mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        pos = event.position()
        if self.gesture.pointer_move(pos.x(), pos.y()):
            self.update()
            return

        hit = hit_test(self.scene(), pos.x(), pos.y())
        new_hc = hit.conn_id if hit.kind == HitKind.CONNECTION else None
        if new_hc != self._hover_conn:
            self._hover_conn = new_hc
            self.update()

        node = self.graph.get_node(hit.node_id) if hit.kind == HitKind.NODE else None
        if node is not None and node.has_error and node.error_message:
            QToolTip.showText(event.globalPosition().toPoint(), node.error_message, self)
        else:
            QToolTip.hideText()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.LeftButton:
            return
        pos = event.position()
        self.gesture.pointer_up(pos.x(), pos.y())
        self.update()

    def leaveEvent(self, event) -> None:
        if self._hover_conn is not None:
            self._hover_conn = None
            self.update()
        super().leaveEvent(event)

    # -----------------------------------------------------------------------
    # Palette drops
    # -----------------------------------------------------------------------

    def dragEnterEvent(self, event: QDragEnterEvent) -> None:
        if event.mimeData().hasFormat(MIME_TYPE):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event) -> None:
        if event.mimeData().hasFormat(MIME_TYPE):
            event.acceptProposedAction()

    def dropEvent(self, event: QDropEvent) -> None:
        template = template_from_mime(bytes(event.mimeData().data(MIME_TYPE)))
        if template is None:
            event.ignore()
            return
        pos = event.position()
        w, h = self.node_size
        drop_template(self.graph, template, pos.x(), pos.y(), w, h)
        event.acceptProposedAction()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _curve_path(curve: CurveSpec) -> QPainterPath:
    path = QPainterPath(QPointF(*curve.start))
    path.cubicTo(QPointF(*curve.c1), QPointF(*curve.c2), QPointF(*curve.end))
    return path


def _draw_arrowhead(painter: QPainter, curve: CurveSpec, color: QColor) -> None:
    """Filled triangle at the curve's end, pointing along the end tangent."""
    ex, ey = curve.end
    for bx, by in (curve.c2, curve.c1, curve.start):
        dx, dy = ex - bx, ey - by
        length = math.hypot(dx, dy)
        if length > 1e-6:
            break
    else:
        return
    ux, uy = dx / length, dy / length
    tip = QPointF(ex, ey)
    base_x, base_y = ex - ux * ARROW_LEN, ey - uy * ARROW_LEN
    left = QPointF(base_x - uy * ARROW_HALF_W, base_y + ux * ARROW_HALF_W)
    right = QPointF(base_x + uy * ARROW_HALF_W, base_y - ux * ARROW_HALF_W)
    painter.setPen(Qt.NoPen)
    painter.setBrush(QBrush(color))
    painter.drawPolygon(QPolygonF([tip, left, right]))
