"""Node palette widget.

Lists the node templates in Triggers / Actions / Conditions sections,
filtered by the category chosen in the combo box.  Dragging an entry onto
the canvas carries the template as an application/json payload.  A static
"AI Suggestions" card sits below the list.
"""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QByteArray, QMimeData, QPoint, Qt
from PySide6.QtGui import QColor, QDrag, QMouseEvent
from PySide6.QtWidgets import QComboBox, QFrame, QLabel, QScrollArea, QVBoxLayout, QWidget

from .graph_model import NodeKind
from .palette import (
    CATEGORIES, MIME_TYPE, SECTION_TITLES, SUGGESTIONS, NodeTemplate,
    template_to_mime, templates_for,
)
from .scene import KIND_GLYPH

ACCENT = {
    NodeKind.TRIGGER:   QColor("#9B4A4A"),
    NodeKind.ACTION:    QColor("#2A66F6"),
    NodeKind.CONDITION: QColor("#1FA861"),
}


class _TemplateEntry(QLabel):
    """One draggable palette row."""

    def __init__(self, template: NodeTemplate, parent=None):
        accent = ACCENT[template.kind].name()
        super().__init__(
            f'<span style="color:{accent}">{KIND_GLYPH[template.kind]}</span>'
            f'&nbsp;&nbsp;{template.name}', parent)
        self.template = template
        self._press_pos: Optional[QPoint] = None
        self.setCursor(Qt.OpenHandCursor)
        self.setStyleSheet("""
            QLabel {
                background: #141419; color: #EAEAEA;
                border: 1px solid rgba(255, 255, 255, 0.1); border-radius: 4px;
                padding: 8px;
            }
            QLabel:hover { border-color: rgba(155, 74, 74, 0.4); }
        """)

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.LeftButton:
            self._press_pos = event.position().toPoint()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if self._press_pos is None or not (event.buttons() & Qt.LeftButton):
            return
        moved = (event.position().toPoint() - self._press_pos).manhattanLength()
        if moved < 4:
            return
        self._press_pos = None

        mime = QMimeData()
        mime.setData(MIME_TYPE, QByteArray(template_to_mime(self.template)))
        drag = QDrag(self)
        drag.setMimeData(mime)
        drag.setPixmap(self.grab())
        drag.exec(Qt.CopyAction)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        self._press_pos = None
        super().mouseReleaseEvent(event)


def _suggestions_card() -> QFrame:
    card = QFrame()
    card.setStyleSheet("QFrame { background: #141419; border: 1px solid rgba(255, 255, 255, 0.1);"
                       " border-radius: 6px; }")
    lay = QVBoxLayout(card)
    lay.setContentsMargins(10, 10, 10, 10)
    lay.setSpacing(6)

    title = QLabel('<span style="color:#9B4A4A">⚡</span>&nbsp;AI Suggestions')
    title.setStyleSheet("font-weight: bold; font-size: 13px; color: #EAEAEA; border: none;")
    lay.addWidget(title)

    for s in SUGGESTIONS:
        row = QLabel(
            f'<span style="color:#9B4A4A">{s.glyph}</span>&nbsp;'
            f'<span style="color:#EAEAEA; font-weight:600">{s.name}</span><br>'
            f'<span style="color:#A1A1A5; font-size:11px">{s.description}</span>')
        row.setStyleSheet("background: #0E0E10; border: 1px solid rgba(255, 255, 255, 0.1);"
                          " border-radius: 4px; padding: 8px;")
        lay.addWidget(row)
    return card


class NodePalette(QWidget):

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumWidth(200)
        self.setMaximumWidth(260)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(6, 6, 6, 6)
        outer.setSpacing(6)

        title = QLabel("Node Palette")
        title.setStyleSheet("font-weight: bold; font-size: 13px; color: #EAEAEA;")
        outer.addWidget(title)

        self._category = QComboBox()
        self._category.addItem("All Categories", "all")
        for cat in CATEGORIES:
            self._category.addItem(cat, cat)
        self._category.currentIndexChanged.connect(lambda _i: self._rebuild())
        outer.addWidget(self._category)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        self._list = QWidget()
        self._list_lay = QVBoxLayout(self._list)
        self._list_lay.setContentsMargins(0, 0, 0, 0)
        self._list_lay.setSpacing(4)
        scroll.setWidget(self._list)
        outer.addWidget(scroll, 1)
        outer.addWidget(_suggestions_card())

        self._rebuild()

    @property
    def category(self) -> str:
        return self._category.currentData()

    def _rebuild(self) -> None:
        while self._list_lay.count():
            item = self._list_lay.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()

        for kind in NodeKind:
            entries = templates_for(kind, self.category)
            if not entries:
                continue
            header = QLabel(SECTION_TITLES[kind])
            header.setStyleSheet("font-weight: 600; color: #EAEAEA; padding-top: 6px;")
            self._list_lay.addWidget(header)
            for t in entries:
                self._list_lay.addWidget(_TemplateEntry(t, self._list))

        self._list_lay.addStretch()
