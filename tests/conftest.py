import pytest

from workflow_builder.graph_editor.graph_model import NodeKind, WorkflowGraph


class FakeTimer:
    """Single-shot timer driven by the test instead of an event loop."""

    def __init__(self):
        self.interval = None
        self.callback = None
        self.starts = 0
        self.stops = 0

    @property
    def active(self):
        return self.callback is not None

    def start(self, interval_ms, callback):
        self.interval = interval_ms
        self.callback = callback
        self.starts += 1

    def stop(self):
        self.callback = None
        self.stops += 1

    def fire(self):
        cb, self.callback = self.callback, None
        assert cb is not None, "timer fired while not armed"
        cb()


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def graph():
    return WorkflowGraph()


@pytest.fixture
def two_nodes(graph):
    """A trigger at (100, 100) and an action at (100, 300)."""
    a = graph.add_node(NodeKind.TRIGGER, "Form Submitted", 100, 100)
    b = graph.add_node(NodeKind.ACTION, "Send Email", 100, 300)
    return graph, a, b
