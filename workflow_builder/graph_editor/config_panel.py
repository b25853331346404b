"""Node configuration side panel.

Layout:
  ┌──────────────────────────────┐
  │ Node Configuration       [×] │
  ├──────────────┬───────────────┤
  │  Settings    │     Logs      │  ← tabs
  ├──────────────┴───────────────┤
  │  form fields for node.form   │
  ├──────────────────────────────┤
  │ [Cancel]  [Save Configuration]│
  └──────────────────────────────┘

Edits are written through to the graph as they are typed (ConfigBinding);
Save reconciles the node's display name and closes, Cancel just closes.
"""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import (
    QCheckBox, QComboBox, QFormLayout, QFrame, QHBoxLayout, QLabel,
    QLineEdit, QPlainTextEdit, QPushButton, QScrollArea, QTabWidget,
    QToolButton, QVBoxLayout, QWidget,
)

from .config_binding import ConfigBinding
from .graph_model import WorkflowGraph
from .node_config import FieldSpec, format_json

# Decorative last-run entries for the Logs tab
_SAMPLE_LOGS = [
    ("✔", "#4ADE80", "Execution Success", "2024-01-20 14:30:22", "Form data processed successfully"),
    ("✖", "#9B4A4A", "Execution Failed",  "2024-01-20 12:15:18", "Invalid email format"),
]

_INPUT_STYLE = "background: #1E1E22; color: #EAEAEA; border: 1px solid rgba(255,255,255,0.1);"


class ConfigPanel(QWidget):
    """Settings form for one node at a time.

    Signals:
      closed()   – emitted when the panel is dismissed (Save, Cancel or ×)
    """

    closed = Signal()

    def __init__(self, graph: WorkflowGraph, parent=None):
        super().__init__(parent)
        self.graph = graph
        self.binding: Optional[ConfigBinding] = None
        self.setMinimumWidth(300)
        self.setMaximumWidth(380)
        self._build_ui()
        self.hide()

    # -----------------------------------------------------------------------
    # UI construction
    # -----------------------------------------------------------------------

    def _build_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(6, 6, 6, 6)
        outer.setSpacing(6)

        header = QHBoxLayout()
        title = QLabel("Node Configuration")
        title.setStyleSheet("font-weight: bold; font-size: 13px; color: #EAEAEA;")
        header.addWidget(title)
        header.addStretch()
        close_btn = QToolButton()
        close_btn.setText("×")
        close_btn.clicked.connect(self.close_panel)
        header.addWidget(close_btn)
        outer.addLayout(header)

        self._tabs = QTabWidget()
        self._settings_scroll = QScrollArea()
        self._settings_scroll.setWidgetResizable(True)
        self._settings_scroll.setFrameShape(QFrame.NoFrame)
        self._tabs.addTab(self._settings_scroll, "Settings")
        self._tabs.addTab(self._build_logs_tab(), "Logs")
        outer.addWidget(self._tabs, 1)

        buttons = QHBoxLayout()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.close_panel)
        buttons.addWidget(cancel_btn)
        save_btn = QPushButton("Save Configuration")
        save_btn.setStyleSheet("background-color: #6B2D2D; color: #FFFFFF;")
        save_btn.clicked.connect(self._save)
        buttons.addWidget(save_btn)
        outer.addLayout(buttons)

    def _build_logs_tab(self) -> QWidget:
        w = QWidget()
        lay = QVBoxLayout(w)
        lay.setContentsMargins(8, 8, 8, 8)
        for glyph, color, heading, stamp, text in _SAMPLE_LOGS:
            card = QLabel(
                f'<div><span style="color:{color}; font-weight:600">{glyph} {heading}</span><br>'
                f'<span style="color:#A1A1A5">{stamp}</span><br>'
                f'<span style="color:#EAEAEA">{text}</span></div>')
            card.setStyleSheet("background: #141419; border: 1px solid rgba(255,255,255,0.1);"
                               " border-radius: 6px; padding: 10px;")
            lay.addWidget(card)
        lay.addStretch()
        return w

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def open_node(self, node_id: str) -> None:
        self.binding = ConfigBinding(self.graph, node_id)
        if not self.binding.alive:
            self.binding = None
            return
        self._tabs.setCurrentIndex(0)
        self._rebuild_form()
        self.show()

    def close_panel(self) -> None:
        self.binding = None
        self.hide()
        self.closed.emit()

    def check_alive(self) -> None:
        """Close if the node being edited has been deleted."""
        if self.binding is not None and not self.binding.alive:
            self.close_panel()

    # -----------------------------------------------------------------------
    # Form
    # -----------------------------------------------------------------------

    def _rebuild_form(self) -> None:
        form_w = QWidget()
        lay = QFormLayout(form_w)
        lay.setContentsMargins(4, 4, 4, 4)
        lay.setSpacing(8)
        lay.setFieldGrowthPolicy(QFormLayout.AllNonFixedFieldsGrow)

        values = self.binding.values
        for spec in self.binding.visible_fields():
            editor = self._make_editor(spec, values.get(spec.key))
            if spec.widget == "switch":
                lay.addRow(editor)
            else:
                lay.addRow(QLabel(spec.label), editor)

        # setWidget() deletes the previous form
        self._settings_scroll.setWidget(form_w)

    def _make_editor(self, spec: FieldSpec, value) -> QWidget:
        b = self.binding
        key = spec.key

        if spec.widget == "textarea":
            edit = QPlainTextEdit("" if value is None else str(value))
            edit.setPlaceholderText(spec.placeholder)
            edit.setStyleSheet(_INPUT_STYLE)
            edit.setFixedHeight(90)
            edit.textChanged.connect(lambda: b.set_field(key, edit.toPlainText()))
            return edit

        if spec.widget == "json":
            edit = QPlainTextEdit(format_json(value))
            edit.setPlaceholderText(spec.placeholder)
            edit.setStyleSheet(_INPUT_STYLE)
            edit.setFixedHeight(80)
            edit.textChanged.connect(lambda: b.set_json_field(key, edit.toPlainText()))
            return edit

        if spec.widget == "switch":
            box = QCheckBox(spec.label)
            box.setChecked(bool(value))
            box.toggled.connect(lambda on: self._on_switch(key, on))
            return box

        if spec.widget == "choice":
            combo = QComboBox()
            combo.addItems(list(spec.choices))
            if value in spec.choices:
                combo.setCurrentText(value)
            combo.setStyleSheet(_INPUT_STYLE)
            combo.currentTextChanged.connect(lambda text: b.set_field(key, text))
            return combo

        edit = QLineEdit("" if value is None else str(value))
        edit.setPlaceholderText(spec.placeholder)
        edit.setStyleSheet(_INPUT_STYLE)

        if spec.widget == "number":
            edit.textChanged.connect(lambda text: b.set_int_field(key, text))
            return edit

        edit.textChanged.connect(lambda text: b.set_field(key, text))
        if not spec.is_secret:
            return edit

        # Secret: masked line edit plus a reveal toggle
        edit.setEchoMode(QLineEdit.Normal if b.is_revealed(key) else QLineEdit.Password)
        row = QWidget()
        row_lay = QHBoxLayout(row)
        row_lay.setContentsMargins(0, 0, 0, 0)
        row_lay.setSpacing(3)
        row_lay.addWidget(edit)
        eye = QToolButton()
        eye.setText("👁")
        eye.setCheckable(True)
        eye.setChecked(b.is_revealed(key))
        eye.setToolTip("Show / hide")

        def _toggle(_checked=False):
            shown = b.toggle_reveal(key)
            edit.setEchoMode(QLineEdit.Normal if shown else QLineEdit.Password)
        eye.clicked.connect(_toggle)
        row_lay.addWidget(eye)
        return row

    def _on_switch(self, key: str, on: bool) -> None:
        self.binding.set_field(key, on)
        # Dependent fields (retryCount) appear and disappear with their switch,
        # once the sender's signal has returned.
        if any(f.depends_on == key for f in self.binding.fields()):
            QTimer.singleShot(0, self._rebuild_if_open)

    def _rebuild_if_open(self) -> None:
        if self.binding is not None and self.binding.alive:
            self._rebuild_form()

    def _save(self) -> None:
        if self.binding is not None:
            self.binding.save()
        self.close_panel()
