import pytest

from workflow_builder.graph_editor.config_binding import ConfigBinding
from workflow_builder.graph_editor.graph_model import NodeKind
from workflow_builder.graph_editor.node_config import FormKind


@pytest.fixture
def api_binding(graph):
    node = graph.add_node(NodeKind.ACTION, "HTTP Request", 0, 0)
    return ConfigBinding(graph, node.node_id), node


def test_form_kind_and_values(api_binding):
    binding, node = api_binding
    assert binding.alive
    assert binding.form_kind is FormKind.API
    assert binding.values == node.config
    assert binding.values is not node.config


def test_edits_are_live(api_binding):
    binding, node = api_binding
    binding.set_field("url", "https://api.example.com")
    assert node.config["url"] == "https://api.example.com"


def test_name_edit_renames_but_keeps_form(api_binding):
    binding, node = api_binding
    binding.set_field("name", "Fetch Orders")
    assert node.display_name == "Fetch Orders"
    assert binding.form_kind is FormKind.API


def test_json_field(api_binding):
    binding, node = api_binding
    assert binding.set_json_field("headers", '{"X-Token": "abc"}')
    assert node.config["headers"] == {"X-Token": "abc"}

    assert not binding.set_json_field("headers", '{"X-Token": ')
    assert node.config["headers"] == {"X-Token": "abc"}

    assert binding.set_json_field("headers", "   ")
    assert node.config["headers"] == {}


@pytest.mark.parametrize("text, ok", [("45", True), ("", False), ("4.5", False), ("abc", False)])
def test_int_field(graph, text, ok):
    node = graph.add_node(NodeKind.CONDITION, "Delay", 0, 0)
    binding = ConfigBinding(graph, node.node_id)
    assert binding.set_int_field("timeout", text) is ok
    assert node.config["timeout"] == (45 if ok else 30)


def test_retry_count_visibility(graph):
    node = graph.add_node(NodeKind.CONDITION, "Filter", 0, 0)
    binding = ConfigBinding(graph, node.node_id)
    assert "retryCount" not in [f.key for f in binding.visible_fields()]
    binding.set_field("retryEnabled", True)
    assert "retryCount" in [f.key for f in binding.visible_fields()]


def test_toggle_reveal(api_binding):
    binding, _ = api_binding
    assert not binding.is_revealed("apiKey")
    assert binding.toggle_reveal("apiKey")
    assert binding.is_revealed("apiKey")
    assert not binding.toggle_reveal("apiKey")


def test_save_reconciles_and_is_idempotent(api_binding):
    binding, node = api_binding
    node.config["name"] = "Renamed Elsewhere"
    assert binding.save()
    assert node.display_name == "Renamed Elsewhere"
    assert binding.save()
    assert node.display_name == "Renamed Elsewhere"


def test_deleted_node(api_binding):
    binding, node = api_binding
    binding.graph.delete_node(node.node_id)
    assert not binding.alive
    assert binding.values == {}
    assert binding.form_kind is FormKind.GENERIC
    binding.set_field("url", "x")
    assert not binding.save()
