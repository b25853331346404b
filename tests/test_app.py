import os

import pytest

pytest.importorskip("PySide6.QtWidgets")
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication

from workflow_builder import app as app_module
from workflow_builder.core.settings import Settings
from workflow_builder.graph_editor import workflow_editor


class DummyMessageBox:
    Save, Discard, Cancel = 1, 2, 4
    answer = Save
    warnings = []

    @classmethod
    def question(cls, *args):
        return cls.answer

    @classmethod
    def warning(cls, parent, title, text):
        cls.warnings.append(title)


class DummyInputDialog:
    reply = ("", False)

    @classmethod
    def getText(cls, *args):
        return cls.reply


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(qapp, tmp_path, monkeypatch):
    DummyMessageBox.answer = DummyMessageBox.Save
    DummyMessageBox.warnings = []
    monkeypatch.setattr(app_module, "QMessageBox", DummyMessageBox)
    monkeypatch.setattr(workflow_editor, "QMessageBox", DummyMessageBox)
    monkeypatch.setattr(workflow_editor, "QInputDialog", DummyInputDialog)

    settings = Settings(tmp_path / "settings.json")
    settings.workflows_dir = str(tmp_path / "workflows")
    win = app_module.App(settings)
    win.graph.move_node("demo-1", 10, 10)
    assert win.editor.dirty
    yield win
    win.deleteLater()


def test_close_stays_open_when_name_prompt_cancelled(window, monkeypatch):
    monkeypatch.setattr(DummyInputDialog, "reply", ("", False))
    assert window.close() is False
    assert window.editor.dirty
    assert window.store.list_ids() == []


def test_close_stays_open_when_save_fails(window, monkeypatch):
    def broken_save(*args, **kwargs):
        raise OSError("disk full")

    window.editor.workflow_name = "Leads"
    monkeypatch.setattr(window.store, "save", broken_save)
    assert window.close() is False
    assert window.editor.dirty
    assert DummyMessageBox.warnings == ["Save failed"]


def test_close_after_successful_save(window, monkeypatch):
    monkeypatch.setattr(DummyInputDialog, "reply", ("Leads", True))
    assert window.close() is True
    (wid,) = window.store.list_ids()
    assert window.store.name_of(wid) == "Leads"
    assert not window.editor.dirty


@pytest.mark.parametrize("answer, closes", [
    (DummyMessageBox.Discard, True),
    (DummyMessageBox.Cancel, False),
])
def test_close_without_saving(window, answer, closes):
    DummyMessageBox.answer = answer
    assert window.close() is closes
    assert window.store.list_ids() == []
