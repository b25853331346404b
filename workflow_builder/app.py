"""Main application class - creates the window, wires up the editor."""

import logging

from PySide6.QtWidgets import QMainWindow, QMessageBox
from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut

from .core.settings import Settings
from .graph_editor.graph_model import WorkflowGraph
from .graph_editor.workflow_editor import WorkflowEditor
from .ops.workflow_io import WorkflowStore

logger = logging.getLogger(__name__)


class App(QMainWindow):
    """Main application - owns the graph and the store, hosts the editor."""

    def __init__(self, settings: Settings = None):
        super().__init__()
        self.settings = settings or Settings()
        self.store = WorkflowStore(self.settings.workflows_dir)
        self.graph = WorkflowGraph.make_demo() if self.settings.seed_demo else WorkflowGraph()

        self._setup_theme()
        self.editor = WorkflowEditor(self.graph, self.store, self.settings, self)
        self.editor.title_changed.connect(self._on_title)
        self.setCentralWidget(self.editor)
        self._bind_keys()

        self.resize(1400, 850)
        self._on_title("Untitled workflow")
        logger.info('Workflow store at %s', self.store.directory)

    def _setup_theme(self):
        """Configure Qt stylesheet for dark mode."""
        self.setStyleSheet("""
            QMainWindow, QWidget {
                background-color: #0B0B0F;
                color: #EAEAEA;
            }
            QPushButton, QToolButton {
                background-color: #1E1E22;
                color: #EAEAEA;
                border: 1px solid rgba(255, 255, 255, 0.1);
                border-radius: 4px;
                padding: 4px 10px;
            }
            QPushButton:hover, QToolButton:hover { background-color: #2E2A55; }
            QComboBox {
                background-color: #1E1E22;
                color: #EAEAEA;
                border: 1px solid rgba(255, 255, 255, 0.1);
                padding: 3px 6px;
            }
            QMenu { background: #141419; color: #EAEAEA; border: 1px solid #2E2A55; }
            QMenu::item:selected { background: #6B2D2D; }
            QTabWidget::pane { border: 1px solid rgba(255, 255, 255, 0.1); }
            QTabBar::tab { background: #2E2A55; color: #A1A1A5; padding: 6px 18px; }
            QTabBar::tab:selected { background: #6B2D2D; color: #FFFFFF; }
            QLabel { background: transparent; }
            QScrollArea { background: transparent; }
        """)

    def _bind_keys(self):
        QShortcut(QKeySequence.Delete, self, self.editor.delete_selected)
        QShortcut(Qt.Key_Backspace, self, self.editor.delete_selected)
        QShortcut(Qt.Key_Escape, self, self.editor.cancel_gesture)
        QShortcut(QKeySequence.Save, self, self.editor.save_workflow)
        QShortcut(QKeySequence.Open, self, self.editor.open_workflow)
        QShortcut(QKeySequence.New, self, self.editor.new_workflow)

    def _on_title(self, name: str):
        self.setWindowTitle(f'{name} - Workflow Builder')

    def closeEvent(self, event):
        if self.editor.dirty and self.graph.nodes:
            answer = QMessageBox.question(
                self, 'Workflow Builder', 'Save changes before closing?',
                QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel)
            if answer == QMessageBox.Cancel:
                event.ignore()
                return
            if answer == QMessageBox.Save and not self.editor.save_workflow():
                # name prompt cancelled or write failed; keep the window open
                event.ignore()
                return
        super().closeEvent(event)
