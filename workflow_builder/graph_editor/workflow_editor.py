"""Workflow editor widget.

Layout:
  ┌──────────────────────────────────────────────────────────────────────┐
  │ [Add Node ▼] [Quick Start…] [Run Test Workflow]   status  [Save] ... │  ← toolbar
  ├────────────┬───────────────────────────────────────┬─────────────────┤
  │            │                                       │                 │
  │  Palette   │           NodeGraphCanvas             │  ConfigPanel    │
  │            │                                       │  (on demand)    │
  └────────────┴───────────────────────────────────────┴─────────────────┘

Add Node dropdown mirrors the palette: Triggers / Actions / Conditions.

Save writes to the WorkflowStore under the current workflow id (a new id on
first save); Open lists the store.  Export / Import work on a single file
anywhere on disk.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtWidgets import (
    QComboBox, QDialog, QDialogButtonBox, QFileDialog, QFormLayout, QFrame,
    QHBoxLayout, QInputDialog, QLabel, QLineEdit, QMenu, QMessageBox,
    QPushButton, QToolButton, QVBoxLayout, QWidget,
)

from ..ops.wizard import ACTION_OPTIONS, TRIGGER_OPTIONS, build_wizard_graph
from ..ops.workflow_io import WorkflowStore, export_workflow, import_workflow
from .config_panel import ConfigPanel
from .gesture import GestureState
from .graph_model import NodeKind, WorkflowGraph
from .node_canvas import NodeGraphCanvas
from .palette import SECTION_TITLES, drop_template, templates_for
from .palette_panel import NodePalette

logger = logging.getLogger(__name__)

STATUS_OK   = "color: #6bcb77; font-size: 10px;"
STATUS_WARN = "color: #e94560; font-size: 10px;"
STATUS_DIM  = "color: #888; font-size: 10px;"


# ---------------------------------------------------------------------------
# Quick-start dialog
# ---------------------------------------------------------------------------

class QuickStartDialog(QDialog):
    """Name a workflow and pick one trigger and one action."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Quick Start")

        lay = QFormLayout(self)
        self._name = QLineEdit()
        self._name.setPlaceholderText("My workflow")
        lay.addRow("Workflow name:", self._name)

        self._trigger = QComboBox()
        self._trigger.addItem("(none)", "")
        for opt in TRIGGER_OPTIONS:
            self._trigger.addItem(opt.name, opt.option_id)
            self._trigger.setItemData(self._trigger.count() - 1, opt.description,
                                      Qt.ToolTipRole)
        lay.addRow("What starts it?", self._trigger)

        self._action = QComboBox()
        self._action.addItem("(none)", "")
        for opt in ACTION_OPTIONS:
            self._action.addItem(opt.name, opt.option_id)
            self._action.setItemData(self._action.count() - 1, opt.description,
                                     Qt.ToolTipRole)
        lay.addRow("What should happen?", self._action)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.button(QDialogButtonBox.Ok).setText("Create Workflow")
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        lay.addRow(buttons)

    @property
    def workflow_name(self) -> str:
        return self._name.text().strip()

    @property
    def trigger_id(self) -> str:
        return self._trigger.currentData()

    @property
    def action_id(self) -> str:
        return self._action.currentData()


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------

class WorkflowEditor(QWidget):
    """Palette, canvas and configuration panel around one WorkflowGraph.

    Parameters
    ----------
    graph     WorkflowGraph edited in place; replaced contents on load.
    store     WorkflowStore for Save / Open.
    settings  Settings (click window, grid, node size).
    """

    title_changed = Signal(str)

    def __init__(self, graph: WorkflowGraph, store: WorkflowStore,
                 settings, parent=None):
        super().__init__(parent)
        self.graph = graph
        self.store = store
        self.settings = settings
        self.workflow_id: Optional[str] = None
        self.workflow_name = ""
        self._dirty = False

        # Status messages fade back to the node count after a while
        self._status_timer = QTimer(self)
        self._status_timer.setSingleShot(True)
        self._status_timer.setInterval(4000)
        self._status_timer.timeout.connect(self._show_summary)

        self._build_ui()
        self.graph.on_change(self._on_graph_change)
        self._show_summary()

    # -----------------------------------------------------------------------
    # UI construction
    # -----------------------------------------------------------------------

    def _build_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(6, 6, 6, 6)
        outer.setSpacing(4)

        # Canvas first so toolbar buttons can connect to it
        self._canvas = NodeGraphCanvas(
            self.graph, self,
            click_window_ms=self.settings.click_window_ms,
            grid_size=self.settings.grid_size,
            node_size=self.settings.node_size,
        )
        self._canvas.open_config.connect(self._open_config)
        self._canvas.status_changed.connect(self._on_connect_status)

        self._config = ConfigPanel(self.graph, self)
        self._config.closed.connect(self._canvas.setFocus)

        toolbar = QHBoxLayout()
        toolbar.setSpacing(6)

        self._add_btn = QToolButton()
        self._add_btn.setText("＋ Add Node  ▾")
        self._add_btn.setPopupMode(QToolButton.InstantPopup)
        self._add_btn.setMenu(self._build_add_menu())
        toolbar.addWidget(self._add_btn)

        quick_btn = QPushButton("Quick Start…")
        quick_btn.clicked.connect(self._quick_start)
        toolbar.addWidget(quick_btn)

        run_btn = QPushButton("Run Test Workflow")
        run_btn.clicked.connect(self._run_test)
        toolbar.addWidget(run_btn)

        toolbar.addStretch()

        self._status_lbl = QLabel("")
        self._status_lbl.setStyleSheet(STATUS_DIM)
        toolbar.addWidget(self._status_lbl)

        toolbar.addSpacing(12)

        for text, slot in (("New", self.new_workflow),
                           ("Open…", self.open_workflow),
                           ("Save", self.save_workflow),
                           ("Import…", self.import_file),
                           ("Export…", self.export_file)):
            btn = QPushButton(text)
            btn.clicked.connect(slot)
            toolbar.addWidget(btn)

        outer.addLayout(toolbar)

        sep = QFrame()
        sep.setFrameShape(QFrame.HLine)
        sep.setStyleSheet("color: #2a3a5c;")
        outer.addWidget(sep)

        body = QHBoxLayout()
        body.setSpacing(6)
        body.addWidget(NodePalette(self))
        body.addWidget(self._canvas, 1)
        body.addWidget(self._config)
        outer.addLayout(body, 1)

    def _build_add_menu(self) -> QMenu:
        menu = QMenu(self)
        for kind in NodeKind:
            sub = menu.addMenu(SECTION_TITLES[kind])
            for t in templates_for(kind):
                sub.addAction(t.name).triggered.connect(
                    lambda checked=False, tpl=t: self._add_template(tpl))
        return menu

    # -----------------------------------------------------------------------
    # Status
    # -----------------------------------------------------------------------

    def _set_status(self, text: str, style: str = STATUS_DIM) -> None:
        self._status_lbl.setText(text)
        self._status_lbl.setStyleSheet(style)
        self._status_timer.start()

    def _show_summary(self) -> None:
        n, c = len(self.graph.nodes), len(self.graph.connections)
        mark = " •" if self._dirty else ""
        self._status_lbl.setText(f"{n} nodes, {c} connections{mark}")
        self._status_lbl.setStyleSheet(STATUS_DIM)

    def _on_connect_status(self, text: str) -> None:
        if text:
            self._status_timer.stop()
            self._status_lbl.setText(text)
            self._status_lbl.setStyleSheet(STATUS_WARN)
        else:
            self._show_summary()

    def _on_graph_change(self, source) -> None:
        if source not in ("select", "replace"):
            self._dirty = True
        self._config.check_alive()
        if not self._status_timer.isActive() and not self._canvas.gesture.is_connecting:
            self._show_summary()

    def _emit_title(self) -> None:
        self.title_changed.emit(self.workflow_name or "Untitled workflow")

    # -----------------------------------------------------------------------
    # Node actions
    # -----------------------------------------------------------------------

    def _add_template(self, template) -> None:
        c = self._canvas
        w, h = self.settings.node_size
        node = drop_template(self.graph, template, c.width() / 2, c.height() / 2, w, h)
        self.graph.select(node.node_id)

    def _open_config(self, node) -> None:
        self._config.open_node(node.node_id)

    def delete_selected(self) -> None:
        if self.graph.selected_node_id:
            self.graph.delete_node(self.graph.selected_node_id)

    def cancel_gesture(self) -> None:
        """Escape: abandon a drag or connection, else close the config panel."""
        gesture = self._canvas.gesture
        if gesture.state is GestureState.IDLE and self._config.binding is not None:
            self._config.close_panel()
            return
        gesture.cancel()
        self._canvas.update()
        self._on_connect_status("")

    def _run_test(self) -> None:
        # Workflows are not executed by the editor
        self._set_status("Test run requested: workflow execution is not available here",
                         STATUS_DIM)
        logger.info("Run Test Workflow requested (%d nodes); execution not supported",
                    len(self.graph.nodes))

    def _quick_start(self) -> None:
        dlg = QuickStartDialog(self)
        if dlg.exec() != QDialog.Accepted:
            return
        if (self.graph.nodes and
                QMessageBox.question(self, "Quick Start",
                                     "Replace the current workflow?") != QMessageBox.Yes):
            return
        self._adopt(build_wizard_graph(dlg.trigger_id, dlg.action_id),
                    workflow_id=None, name=dlg.workflow_name)
        self._dirty = True
        self._set_status("Workflow created", STATUS_OK)

    # -----------------------------------------------------------------------
    # Save / load
    # -----------------------------------------------------------------------

    def _adopt(self, graph: WorkflowGraph, workflow_id: Optional[str], name: str) -> None:
        self._config.close_panel()
        self._canvas.gesture.cancel()
        self.graph.replace_with(graph)
        self.workflow_id = workflow_id
        self.workflow_name = name
        self._dirty = False
        self._emit_title()
        self._show_summary()

    def new_workflow(self) -> None:
        self._adopt(WorkflowGraph(), workflow_id=None, name="")

    def save_workflow(self) -> bool:
        """Save to the store.  False if the user cancelled or the write failed."""
        name = self.workflow_name
        if not name:
            name, ok = QInputDialog.getText(self, "Save Workflow", "Workflow name:")
            if not ok:
                return False
            name = name.strip()
        try:
            self.workflow_id = self.store.save(self.graph, self.workflow_id, name=name)
        except OSError as e:
            logger.error("Saving workflow failed: %s", e)
            QMessageBox.warning(self, "Save failed", str(e))
            return False
        self.workflow_name = name or self.workflow_id
        self._dirty = False
        self._emit_title()
        self._set_status("Saved", STATUS_OK)
        return True

    def open_workflow(self) -> None:
        ids = self.store.list_ids()
        if not ids:
            QMessageBox.information(self, "Open Workflow",
                                    f"No saved workflows in {self.store.directory}")
            return
        labels = []
        for wid in ids:
            try:
                labels.append(f"{self.store.name_of(wid)}  [{wid[:8]}]")
            except (OSError, ValueError):
                labels.append(wid)
        choice, ok = QInputDialog.getItem(self, "Open Workflow", "Workflow:", labels, 0, False)
        if not ok:
            return
        wid = ids[labels.index(choice)]
        try:
            graph = self.store.load(wid)
            name = self.store.name_of(wid)
        except (OSError, ValueError, KeyError) as e:
            logger.warning("Loading workflow %s failed: %s", wid, e)
            QMessageBox.warning(self, "Load failed", str(e))
            return
        self._adopt(graph, workflow_id=wid, name=name)

    def import_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Import Workflow", "", "Workflow JSON (*.workflow.json *.json)")
        if not path:
            return
        try:
            graph = import_workflow(path)
        except (OSError, ValueError, KeyError) as e:
            logger.warning("Import of %s failed: %s", path, e)
            QMessageBox.warning(self, "Import failed", str(e))
            return
        self._adopt(graph, workflow_id=None, name="")
        self._dirty = True
        self._set_status("Imported", STATUS_OK)

    def export_file(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Workflow", "", "Workflow JSON (*.workflow.json *.json)")
        if not path:
            return
        try:
            export_workflow(self.graph, path, name=self.workflow_name)
        except (OSError, TypeError) as e:
            logger.error("Export to %s failed: %s", path, e)
            QMessageBox.warning(self, "Export failed", str(e))
            return
        self._set_status("Exported", STATUS_OK)

    @property
    def dirty(self) -> bool:
        return self._dirty
