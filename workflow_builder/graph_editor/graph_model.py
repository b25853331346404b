"""Workflow graph data model.

Pure Python, no Qt dependency.  Owns the graph topology that the canvas
edits and that ops/workflow_io.py persists.

Node kinds:
  trigger    – starts a workflow (form submitted, webhook, schedule, ...)
  action     – does something (send email, HTTP request, create record, ...)
  condition  – branches or delays (condition, delay, filter)

Ports
-----
Ports are not stored.  Every node has one port on the midpoint of each edge
of its rectangle; geometry.py computes their coordinates.  The role of a
port is fixed by its side:

  top, left      – input  (a connection may end here)
  right, bottom  – output (a connection may start here)

Connection rules
----------------
  - from_port must be an output, to_port must be an input.
  - No self-loops.
  - Both endpoints must exist when the connection is made.
  - Parallel connections between the same two nodes are allowed.

Every mutation is total over stale ids: an unknown node or connection id is
a silent no-op, never an exception.  The canvas relies on this while a drag
is in flight and the node is deleted from elsewhere.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .node_config import default_config, form_kind_for

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class NodeKind(Enum):
    TRIGGER   = "trigger"
    ACTION    = "action"
    CONDITION = "condition"


class PortSide(Enum):
    TOP    = "top"
    RIGHT  = "right"
    BOTTOM = "bottom"
    LEFT   = "left"


class PortRole(Enum):
    INPUT  = "input"
    OUTPUT = "output"


PORT_ROLES = {
    PortSide.TOP:    PortRole.INPUT,
    PortSide.RIGHT:  PortRole.OUTPUT,
    PortSide.BOTTOM: PortRole.OUTPUT,
    PortSide.LEFT:   PortRole.INPUT,
}

DEFAULT_NODE_W = 200
DEFAULT_NODE_H = 80


def coerce_side(side) -> Optional[PortSide]:
    """Accept a PortSide or its string value; None for anything else."""
    if isinstance(side, PortSide):
        return side
    try:
        return PortSide(side)
    except ValueError:
        return None


def port_role(side) -> Optional[PortRole]:
    s = coerce_side(side)
    return PORT_ROLES[s] if s is not None else None


def connection_rule_error(from_id: str, from_port, to_id: str, to_port) -> Optional[str]:
    """Describe why a connection breaks the port rules; None if it is allowed.

    Endpoint existence is not checked here.
    """
    if from_id == to_id:
        return f"self-loop on {from_id}"
    if port_role(from_port) is not PortRole.OUTPUT:
        return f"{from_port!r} is not an output port"
    if port_role(to_port) is not PortRole.INPUT:
        return f"{to_port!r} is not an input port"
    return None


def _number(value, default: float = 0.0) -> float:
    """float() for file data; None means the default."""
    return default if value is None else float(value)


@dataclass(frozen=True)
class Port:
    """A connection point, derived from a node rectangle (see geometry.py)."""
    side: PortSide
    role: PortRole
    x: float
    y: float

    @property
    def is_output(self) -> bool:
        return self.role is PortRole.OUTPUT


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


# ---------------------------------------------------------------------------
# Collaborator marker
# ---------------------------------------------------------------------------

@dataclass
class Collaborator:
    name: str
    color: str = "#CE7777"

    def to_dict(self) -> dict:
        return {"name": self.name, "color": self.color}

    @staticmethod
    def from_dict(d: dict) -> "Collaborator":
        return Collaborator(name=d.get("name", "?"), color=d.get("color", "#CE7777"))


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------

@dataclass
class WorkflowConnection:
    id: str = field(default_factory=lambda: _new_id("conn"))
    from_node: str = ""
    from_port: PortSide = PortSide.BOTTOM
    to_node:   str = ""
    to_port:   PortSide = PortSide.TOP

    def touches(self, node_id: str) -> bool:
        return self.from_node == node_id or self.to_node == node_id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "from": self.from_node, "fromPort": self.from_port.value,
            "to":   self.to_node,   "toPort":   self.to_port.value,
        }

    @staticmethod
    def from_dict(d: dict) -> "WorkflowConnection":
        return WorkflowConnection(
            id=d.get("id") or _new_id("conn"),
            from_node=d["from"],
            from_port=coerce_side(d.get("fromPort")) or PortSide.BOTTOM,
            to_node=d["to"],
            to_port=coerce_side(d.get("toPort")) or PortSide.TOP,
        )


# ---------------------------------------------------------------------------
# Workflow node
# ---------------------------------------------------------------------------

@dataclass
class WorkflowNode:
    """One node in the workflow graph.

    kind          – NodeKind; fixed for the node's lifetime.
    node_id       – unique within the graph.
    display_name  – shown on the node; follows config["name"].
    x, y          – top-left corner, canvas coordinates, never negative.
    width, height – fixed at creation.
    config        – open key/value record, see node_config.default_config.
    form          – configuration form chosen at creation (FormKind value).
    has_error     – diagnostic badge (fixture data only).
    collaborators – decorative presence markers.
    """
    kind:         NodeKind
    node_id:      str = field(default_factory=lambda: _new_id("node"))
    display_name: str = ""
    x: float = 0.0
    y: float = 0.0
    width:  float = DEFAULT_NODE_W
    height: float = DEFAULT_NODE_H
    config: dict = field(default_factory=dict)
    form:   str = ""
    has_error: bool = False
    error_message: str = ""
    collaborators: list[Collaborator] = field(default_factory=list)

    def output_sides(self) -> list[PortSide]:
        return [s for s in PortSide if PORT_ROLES[s] is PortRole.OUTPUT]

    def input_sides(self) -> list[PortSide]:
        return [s for s in PortSide if PORT_ROLES[s] is PortRole.INPUT]

    def to_dict(self) -> dict:
        return {
            "id":     self.node_id,
            "type":   self.kind.value,
            "name":   self.display_name,
            "x": self.x, "y": self.y,
            "width": self.width, "height": self.height,
            "config": self.config,
            "form":   self.form,
            "hasError": self.has_error,
            "errorMessage": self.error_message,
            "collaborators": [c.to_dict() for c in self.collaborators],
        }

    @staticmethod
    def from_dict(d: dict) -> "WorkflowNode":
        """Build a node from file data.

        Raises KeyError, ValueError or TypeError on malformed input; numbers
        may arrive as strings and are converted.
        """
        kind = NodeKind(d["type"])
        name = str(d.get("name") or "")
        config = d.get("config")
        return WorkflowNode(
            kind=kind,
            node_id=str(d["id"]),
            display_name=name,
            x=max(0.0, _number(d.get("x"))),
            y=max(0.0, _number(d.get("y"))),
            width=_number(d.get("width"), DEFAULT_NODE_W),
            height=_number(d.get("height"), DEFAULT_NODE_H),
            config=dict(config) if isinstance(config, dict) and config
            else default_config(kind.value, name),
            form=d.get("form") or form_kind_for(name).value,
            has_error=bool(d.get("hasError", False)),
            error_message=str(d.get("errorMessage") or ""),
            collaborators=[Collaborator.from_dict(c) for c in d.get("collaborators", [])],
        )


# ---------------------------------------------------------------------------
# Graph model
# ---------------------------------------------------------------------------

class WorkflowGraph:
    """Mutable workflow graph: nodes + connections + selection."""

    def __init__(self):
        # node_id -> node; dict keeps insertion (paint) order
        self._nodes: dict[str, WorkflowNode] = {}
        self.connections: list[WorkflowConnection] = []
        self.selected_node_id: Optional[str] = None
        self._listeners: list[Callable] = []

    # -- Observers --

    def on_change(self, callback: Callable) -> None:
        self._listeners.append(callback)

    def notify(self, source=None) -> None:
        for cb in list(self._listeners):
            cb(source)

    # -- Node accessors --

    @property
    def nodes(self) -> list[WorkflowNode]:
        return list(self._nodes.values())

    def get_node(self, node_id: Optional[str]) -> Optional[WorkflowNode]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def insert_node(self, node: WorkflowNode) -> None:
        """Insert a fully built node (load, seed, wizard)."""
        self._nodes[node.node_id] = node
        self.notify("add_node")

    def add_node(self, kind, display_name: str, x: float, y: float,
                 width: float = DEFAULT_NODE_W,
                 height: float = DEFAULT_NODE_H) -> WorkflowNode:
        kind = kind if isinstance(kind, NodeKind) else NodeKind(kind)
        node = WorkflowNode(
            kind=kind,
            display_name=display_name,
            x=max(0.0, float(x)), y=max(0.0, float(y)),
            width=width, height=height,
            config=default_config(kind.value, display_name),
            form=form_kind_for(display_name).value,
        )
        self.insert_node(node)
        return node

    def move_node(self, node_id: str, x: float, y: float) -> None:
        node = self.get_node(node_id)
        if node is None:
            logger.debug("move_node: unknown node %s", node_id)
            return
        node.x = max(0.0, float(x))
        node.y = max(0.0, float(y))
        self.notify("move_node")

    def update_node_config(self, node_id: str, partial: dict) -> None:
        node = self.get_node(node_id)
        if node is None:
            logger.debug("update_node_config: unknown node %s", node_id)
            return
        node.config = {**node.config, **partial}
        self._sync_display_name(node)
        self.notify("update_node_config")

    def reconcile_display_name(self, node_id: str) -> bool:
        """Copy config["name"] onto the display name.  False if unknown."""
        node = self.get_node(node_id)
        if node is None:
            return False
        if self._sync_display_name(node):
            self.notify("rename_node")
        return True

    @staticmethod
    def _sync_display_name(node: WorkflowNode) -> bool:
        name = node.config.get("name")
        if isinstance(name, str) and name and name != node.display_name:
            node.display_name = name
            return True
        return False

    def delete_node(self, node_id: str) -> None:
        if self._nodes.pop(node_id, None) is None:
            logger.debug("delete_node: unknown node %s", node_id)
            return
        self.connections = [c for c in self.connections if not c.touches(node_id)]
        if self.selected_node_id == node_id:
            self.selected_node_id = None
        self.notify("delete_node")

    # -- Selection --

    def select(self, node_id: Optional[str]) -> None:
        new_sel = node_id if node_id in self._nodes else None
        if new_sel != self.selected_node_id:
            self.selected_node_id = new_sel
            self.notify("select")

    @property
    def selected_node(self) -> Optional[WorkflowNode]:
        return self.get_node(self.selected_node_id)

    # -- Connection accessors --

    def get_connection(self, conn_id: str) -> Optional[WorkflowConnection]:
        return next((c for c in self.connections if c.id == conn_id), None)

    def connections_for_node(self, node_id: str) -> list[WorkflowConnection]:
        return [c for c in self.connections if c.touches(node_id)]

    def add_connection(self, from_id: str, from_port, to_id: str,
                       to_port) -> Optional[WorkflowConnection]:
        """Add a connection.  Returns the new connection, or None if rejected."""
        problem = connection_rule_error(from_id, from_port, to_id, to_port)
        if problem is not None:
            logger.debug("add_connection: %s, rejected", problem)
            return None
        if from_id not in self._nodes or to_id not in self._nodes:
            logger.debug("add_connection: unknown endpoint %s -> %s", from_id, to_id)
            return None

        conn = WorkflowConnection(from_node=from_id, from_port=coerce_side(from_port),
                                  to_node=to_id, to_port=coerce_side(to_port))
        self.connections.append(conn)
        self.notify("add_connection")
        return conn

    def delete_connection(self, conn_id: str) -> None:
        before = len(self.connections)
        self.connections = [c for c in self.connections if c.id != conn_id]
        if len(self.connections) != before:
            self.notify("delete_connection")

    def clear(self) -> None:
        self._nodes.clear()
        self.connections = []
        self.selected_node_id = None
        self.notify("clear")

    def replace_with(self, other: "WorkflowGraph") -> None:
        """Adopt another graph's contents, keeping this graph's listeners."""
        self._nodes = dict(other._nodes)
        self.connections = list(other.connections)
        self.selected_node_id = None
        self.notify("replace")

    # -- Serialisation --

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self._nodes.values()],
            "connections": [c.to_dict() for c in self.connections],
        }

    @staticmethod
    def from_dict(d: dict) -> "WorkflowGraph":
        """Rebuild a graph from to_dict() output.

        Connections that break the port rules are dropped.  Connections to
        missing nodes are kept; the scene skips them.
        """
        g = WorkflowGraph()
        for nd in d.get("nodes", []):
            node = WorkflowNode.from_dict(nd)
            g._nodes[node.node_id] = node
        for cd in d.get("connections", []):
            conn = WorkflowConnection.from_dict(cd)
            problem = connection_rule_error(conn.from_node, conn.from_port,
                                            conn.to_node, conn.to_port)
            if problem is not None:
                logger.debug("from_dict: dropping connection %s: %s", conn.id, problem)
                continue
            g.connections.append(conn)
        return g

    # -- Factory --

    @staticmethod
    def make_demo() -> "WorkflowGraph":
        """Build the demonstration graph: form → email → status check."""
        g = WorkflowGraph()
        seed = [
            ("demo-1", NodeKind.TRIGGER,   "Form Submission", 150, 100),
            ("demo-2", NodeKind.ACTION,    "Send Email",      150, 250),
            ("demo-3", NodeKind.CONDITION, "Check Status",    450, 175),
        ]
        for nid, kind, name, x, y in seed:
            g._nodes[nid] = WorkflowNode(
                kind=kind, node_id=nid, display_name=name, x=x, y=y,
                config=default_config(kind.value, name),
                form=form_kind_for(name).value,
            )
        g.connections = [
            WorkflowConnection(id="demo-conn-1",
                               from_node="demo-1", from_port=PortSide.BOTTOM,
                               to_node="demo-2",   to_port=PortSide.TOP),
            WorkflowConnection(id="demo-conn-2",
                               from_node="demo-2", from_port=PortSide.RIGHT,
                               to_node="demo-3",   to_port=PortSide.LEFT),
        ]
        return g
