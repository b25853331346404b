"""Node template catalogue and palette drop handling.

Qt-free.  palette_panel.py renders the catalogue and starts drags; the
canvas calls template_from_mime() and drop_template() when one lands.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

from .graph_model import DEFAULT_NODE_H, DEFAULT_NODE_W, NodeKind, WorkflowGraph, WorkflowNode

logger = logging.getLogger(__name__)

MIME_TYPE = "application/json"

# Drops are centred on the pointer but never closer than this to the origin
DROP_MARGIN = 20


@dataclass(frozen=True)
class NodeTemplate:
    template_id: str
    name: str
    kind: NodeKind
    category: str

    def to_dict(self) -> dict:
        return {
            "id": self.template_id,
            "name": self.name,
            "type": self.kind.value,
            "category": self.category,
        }

    @staticmethod
    def from_dict(d: dict) -> "NodeTemplate":
        return NodeTemplate(
            template_id=d.get("id", ""),
            name=d["name"],
            kind=NodeKind(d["type"]),
            category=d.get("category", ""),
        )


CATEGORIES = ["Communication", "Data Integration", "Sales", "Monitoring"]

NODE_TEMPLATES = [
    NodeTemplate("email-trigger",     "Email Received",    NodeKind.TRIGGER,   "Communication"),
    NodeTemplate("form-trigger",      "Form Submitted",    NodeKind.TRIGGER,   "Data Integration"),
    NodeTemplate("schedule-trigger",  "Scheduled",         NodeKind.TRIGGER,   "Monitoring"),
    NodeTemplate("webhook-trigger",   "Webhook",           NodeKind.TRIGGER,   "Data Integration"),

    NodeTemplate("send-email",        "Send Email",        NodeKind.ACTION,    "Communication"),
    NodeTemplate("create-record",     "Create Record",     NodeKind.ACTION,    "Data Integration"),
    NodeTemplate("send-notification", "Send Notification", NodeKind.ACTION,    "Communication"),
    NodeTemplate("http-request",      "HTTP Request",      NodeKind.ACTION,    "Data Integration"),

    NodeTemplate("condition",         "Condition",         NodeKind.CONDITION, "Sales"),
    NodeTemplate("delay",             "Delay",             NodeKind.CONDITION, "Monitoring"),
    NodeTemplate("filter",            "Filter",            NodeKind.CONDITION, "Data Integration"),
]

SECTION_TITLES = {
    NodeKind.TRIGGER:   "Triggers",
    NodeKind.ACTION:    "Actions",
    NodeKind.CONDITION: "Conditions",
}


# Decorative "AI Suggestions" cards shown under the palette
@dataclass(frozen=True)
class Suggestion:
    name: str
    description: str
    glyph: str


SUGGESTIONS = [
    Suggestion("Send Confirmation Email", "Follow up with email confirmation", "✉"),
    Suggestion("Create Calendar Event",   "Schedule a follow-up meeting",      "📅"),
    Suggestion("Update CRM Status",       "Mark lead as contacted",            "🗄"),
]


def templates_for(kind, category: str = "all") -> list[NodeTemplate]:
    kind = kind if isinstance(kind, NodeKind) else NodeKind(kind)
    return [t for t in NODE_TEMPLATES
            if t.kind is kind and (category == "all" or t.category == category)]


def get_template(template_id: str) -> Optional[NodeTemplate]:
    return next((t for t in NODE_TEMPLATES if t.template_id == template_id), None)


def drop_position(x: float, y: float,
                  width: float = DEFAULT_NODE_W,
                  height: float = DEFAULT_NODE_H) -> tuple[float, float]:
    """Top-left corner for a node dropped with its centre at (x, y)."""
    return (max(DROP_MARGIN, x - width / 2), max(DROP_MARGIN, y - height / 2))


def drop_template(graph: WorkflowGraph, template: NodeTemplate,
                  x: float, y: float,
                  width: float = DEFAULT_NODE_W,
                  height: float = DEFAULT_NODE_H) -> WorkflowNode:
    nx, ny = drop_position(x, y, width, height)
    node = graph.add_node(template.kind, template.name, nx, ny, width, height)
    logger.debug("dropped %s at (%s, %s) as %s", template.template_id, nx, ny, node.node_id)
    return node


# ---------------------------------------------------------------------------
# Drag payload
# ---------------------------------------------------------------------------

def template_to_mime(template: NodeTemplate) -> bytes:
    return json.dumps(template.to_dict()).encode("utf-8")


def template_from_mime(data) -> Optional[NodeTemplate]:
    """Decode a drag payload.  None (logged) for anything malformed."""
    if isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("dropped payload is not UTF-8")
            return None
    try:
        d = json.loads(data)
        return NodeTemplate.from_dict(d)
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        logger.debug("ignoring malformed drop payload: %s", e)
        return None
