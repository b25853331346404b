import json

import pytest

from workflow_builder.graph_editor.graph_model import WorkflowGraph
from workflow_builder.graph_editor.scene import build_scene
from workflow_builder.ops.workflow_io import (
    FILE_TYPE, WorkflowNotFoundError, WorkflowStore, export_workflow, import_workflow,
)


@pytest.fixture
def store(tmp_path):
    return WorkflowStore(tmp_path / "workflows")


def test_save_and_load(store):
    g = WorkflowGraph.make_demo()
    wid = store.save(g, name="Onboarding")
    assert store.list_ids() == [wid]
    assert store.name_of(wid) == "Onboarding"

    back = store.load(wid)
    assert back.to_dict() == g.to_dict()


def test_save_overwrites_existing_id(store):
    g = WorkflowGraph.make_demo()
    wid = store.save(g)
    g.delete_node("demo-3")
    assert store.save(g, wid) == wid
    assert len(store.load(wid).nodes) == 2
    assert store.list_ids() == [wid]
    assert store.name_of(wid) == wid


def test_list_ids_sorted(store):
    for wid in ["b", "a", "c"]:
        store.save(WorkflowGraph(), wid)
    assert store.list_ids() == ["a", "b", "c"]


def test_missing_directory_lists_nothing(store):
    assert store.list_ids() == []


@pytest.mark.parametrize("wid", ["missing", "../escape", "", "a/b"])
def test_load_unknown_id(store, wid):
    with pytest.raises(WorkflowNotFoundError):
        store.load(wid)


def test_delete(store):
    wid = store.save(WorkflowGraph())
    store.delete(wid)
    assert store.list_ids() == []
    with pytest.raises(WorkflowNotFoundError):
        store.delete(wid)


def test_load_wrong_file_type(store):
    store.directory.mkdir(parents=True)
    (store.directory / "odd.workflow.json").write_text(json.dumps({"type": "project"}))
    with pytest.raises(ValueError, match="project"):
        store.load("odd")


def test_export_import_roundtrip(tmp_path):
    g = WorkflowGraph.make_demo()
    path = tmp_path / "demo.json"
    export_workflow(g, str(path))

    data = json.loads(path.read_text())
    assert data["type"] == FILE_TYPE
    assert data["name"] == "demo"

    assert import_workflow(str(path)).to_dict() == g.to_dict()


def test_import_rejects_other_files(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ValueError, match="list"):
        import_workflow(str(path))


def test_import_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{")
    with pytest.raises(ValueError):
        import_workflow(str(path))


def _write_workflow(path, nodes, connections=()):
    path.write_text(json.dumps({"type": FILE_TYPE, "version": 1, "name": "x",
                                "graph": {"nodes": nodes, "connections": list(connections)}}))


def test_import_converts_string_sizes(tmp_path):
    path = tmp_path / "sizes.json"
    _write_workflow(path, [{"id": "n1", "type": "action", "name": "Send Email",
                            "x": 10, "y": None, "width": "200", "height": "80"}])
    graph = import_workflow(str(path))
    node = graph.get_node("n1")
    assert (node.x, node.y, node.width, node.height) == (10, 0, 200, 80)
    assert build_scene(graph).nodes[0].delete_rect == (174, 28, 24, 24)


@pytest.mark.parametrize("graph", [
    {"nodes": [{"id": "n1", "type": "action", "x": "far left"}]},
    {"nodes": [{"id": "n1"}]},
    {"nodes": [{"id": "n1", "type": "action", "collaborators": [1]}]},
    {"nodes": [], "connections": [{"fromPort": "bottom"}]},
    ["not", "a", "graph"],
])
def test_malformed_graph_is_a_value_error(tmp_path, store, graph):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"type": FILE_TYPE, "version": 1, "graph": graph}))
    with pytest.raises(ValueError, match="Malformed workflow"):
        import_workflow(str(path))

    store.directory.mkdir(parents=True)
    (store.directory / "bad.workflow.json").write_text(path.read_text())
    with pytest.raises(ValueError, match="Malformed workflow"):
        store.load("bad")


def test_import_drops_invalid_connections(tmp_path):
    path = tmp_path / "conns.json"
    nodes = [{"id": "a", "type": "trigger", "name": "Webhook"},
             {"id": "b", "type": "action", "name": "Send Email"}]
    _write_workflow(path, nodes, [
        {"id": "good", "from": "a", "fromPort": "bottom", "to": "b", "toPort": "top"},
        {"id": "loop", "from": "a", "fromPort": "bottom", "to": "a", "toPort": "top"},
        {"id": "reversed", "from": "b", "fromPort": "top", "to": "a", "toPort": "bottom"},
    ])
    assert [c.id for c in import_workflow(str(path)).connections] == ["good"]
