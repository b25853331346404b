import pytest

from workflow_builder.graph_editor.graph_model import NodeKind
from workflow_builder.graph_editor.palette import (
    CATEGORIES, DROP_MARGIN, NODE_TEMPLATES, SUGGESTIONS, drop_position, drop_template,
    get_template, template_from_mime, template_to_mime, templates_for,
)


def test_catalogue_shape():
    assert len(NODE_TEMPLATES) == 11
    assert len({t.template_id for t in NODE_TEMPLATES}) == 11
    assert all(t.category in CATEGORIES for t in NODE_TEMPLATES)
    assert [len(templates_for(k)) for k in NodeKind] == [4, 4, 3]


def test_category_filter():
    names = [t.name for t in templates_for("trigger", "Data Integration")]
    assert names == ["Form Submitted", "Webhook"]
    assert templates_for(NodeKind.CONDITION, "Communication") == []


def test_get_template():
    assert get_template("http-request").name == "HTTP Request"
    assert get_template("nope") is None


@pytest.mark.parametrize("x, y, expected", [
    (500, 300, (400, 260)),
    (10, 10, (DROP_MARGIN, DROP_MARGIN)),
    (110, 500, (DROP_MARGIN, 460)),
])
def test_drop_position_centres_on_pointer(x, y, expected):
    assert drop_position(x, y) == expected


def test_drop_template_creates_node(graph):
    node = drop_template(graph, get_template("send-email"), 500, 300)
    assert node.kind is NodeKind.ACTION
    assert node.display_name == "Send Email"
    assert (node.x, node.y) == (400, 260)
    assert node.config["subject"] == ""
    assert graph.nodes == [node]


def test_mime_payload():
    tpl = get_template("webhook-trigger")
    data = template_to_mime(tpl)
    assert isinstance(data, bytes)
    assert template_from_mime(data) == tpl
    assert template_from_mime(data.decode()) == tpl


@pytest.mark.parametrize("payload", [
    b"\xff\xfe",
    b"not json",
    b'{"name": "X"}',
    b'{"name": "X", "type": "gizmo"}',
    b"[1, 2, 3]",
    None,
])
def test_malformed_payload_is_ignored(payload):
    assert template_from_mime(payload) is None


def test_suggestions_catalogue():
    assert [s.name for s in SUGGESTIONS] == [
        "Send Confirmation Email", "Create Calendar Event", "Update CRM Status"]
    assert all(s.description and s.glyph for s in SUGGESTIONS)
    # suggestions are display-only, not droppable templates
    assert not {s.name for s in SUGGESTIONS} & {t.name for t in NODE_TEMPLATES}
