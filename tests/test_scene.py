from workflow_builder.graph_editor.geometry import port_position
from workflow_builder.graph_editor.gesture import STATUS_CONNECTING, GestureController
from workflow_builder.graph_editor.graph_model import (
    Collaborator, NodeKind, PortSide, WorkflowConnection, WorkflowGraph,
)
from workflow_builder.graph_editor.scene import (
    EMPTY_HINT, KIND_FILL, HitKind, build_scene, hit_test,
)


def test_empty_graph_shows_hint(graph):
    scene = build_scene(graph)
    assert scene.nodes == [] and scene.connections == []
    assert scene.empty_hint == EMPTY_HINT


def test_demo_scene():
    g = WorkflowGraph.make_demo()
    g.select("demo-2")
    scene = build_scene(g)
    assert scene.empty_hint is None
    assert [nv.label for nv in scene.nodes] == ["Form Submission", "Send Email", "Check Status"]
    assert [nv.caption for nv in scene.nodes] == ["Trigger", "Action", "Condition"]
    assert scene.nodes[0].fill == KIND_FILL[NodeKind.TRIGGER]
    assert [nv.selected for nv in scene.nodes] == [False, True, False]
    assert len(scene.connections) == 2
    assert all(len(nv.ports) == 4 for nv in scene.nodes)


def test_dangling_connection_skipped(two_nodes):
    graph, a, _ = two_nodes
    graph.connections.append(WorkflowConnection(from_node=a.node_id, to_node="gone"))
    assert build_scene(graph).connections == []


def test_avatars_limited_to_two(graph):
    node = graph.add_node(NodeKind.ACTION, "Send Email", 0, 0)
    node.collaborators = [Collaborator("alice", "#111"), Collaborator("bob", "#222"),
                          Collaborator("carol", "#333")]
    assert build_scene(graph).nodes[0].avatars == [("A", "#111"), ("B", "#222")]


def test_hover_flag(two_nodes):
    graph, a, b = two_nodes
    conn = graph.add_connection(a.node_id, "bottom", b.node_id, "top")
    scene = build_scene(graph, hover_connection_id=conn.id)
    assert scene.connections[0].hover


def test_preview_and_pulse_while_connecting(two_nodes, timer):
    graph, a, b = two_nodes
    gc = GestureController(graph, timer)
    gc.pointer_down_port(a.node_id, "bottom", 200, 180)
    gc.pointer_move(400, 400)

    scene = build_scene(graph, gc)
    assert scene.status_text == STATUS_CONNECTING
    assert scene.preview.start == port_position(a, PortSide.BOTTOM)
    assert scene.preview.end == (400, 400)
    pulsing = {(nv.node_id, p.side) for nv in scene.nodes for p in nv.ports if p.pulsing}
    assert (b.node_id, PortSide.TOP) in pulsing
    assert (b.node_id, PortSide.BOTTOM) not in pulsing


def test_no_preview_when_idle(two_nodes, timer):
    graph, *_ = two_nodes
    scene = build_scene(graph, GestureController(graph, timer))
    assert scene.preview is None
    assert scene.status_text == ""


def test_hit_priority(two_nodes):
    graph, a, b = two_nodes
    conn = graph.add_connection(a.node_id, "bottom", b.node_id, "top")
    scene = build_scene(graph)

    # a spans (100..300, 100..180)
    hit = hit_test(scene, 200, 180)
    assert (hit.kind, hit.node_id, hit.side) == (HitKind.PORT, a.node_id, PortSide.BOTTOM)

    dx, dy, dw, dh = scene.nodes[0].delete_rect
    hit = hit_test(scene, dx + dw / 2, dy + dh / 2)
    assert (hit.kind, hit.node_id) == (HitKind.DELETE_BUTTON, a.node_id)

    hit = hit_test(scene, 150, 140)
    assert (hit.kind, hit.node_id) == (HitKind.NODE, a.node_id)

    hit = hit_test(scene, 205, 240)
    assert (hit.kind, hit.conn_id) == (HitKind.CONNECTION, conn.id)

    assert hit_test(scene, 900, 900).kind == HitKind.NONE


def test_topmost_node_wins(graph):
    graph.add_node(NodeKind.ACTION, "Send Email", 0, 0)
    top = graph.add_node(NodeKind.ACTION, "Send Email", 50, 20)
    hit = hit_test(build_scene(graph), 60, 50)
    assert hit.node_id == top.node_id
