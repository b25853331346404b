"""Scene projection for the workflow canvas.

build_scene() turns the graph, the gesture state and the hover state into a
flat description of everything the canvas paints.  It owns no state and
never mutates the graph; node_canvas.py paints a Scene with QPainter and
hit_test() answers "what is under the pointer" against the same Scene, so
painting and picking can never disagree.

Connections whose endpoints no longer exist are skipped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from .geometry import CurveSpec, connection_points, distance_to_curve, port_position, route_points
from .graph_model import NodeKind, PortRole, PortSide, WorkflowGraph


# ---------------------------------------------------------------------------
# Visual constants
# ---------------------------------------------------------------------------

GRID_SIZE            = 20
PORT_RADIUS          = 6
PORT_HIT_RADIUS      = PORT_RADIUS * 1.8
CONNECTION_WIDTH     = 3.0
CONNECTION_HIT_WIDTH = 20.0
DELETE_BUTTON_SIZE   = 24
NODE_PADDING         = 12
MAX_AVATARS          = 2

KIND_FILL = {
    NodeKind.TRIGGER:   "#550015",
    NodeKind.ACTION:    "#000080",
    NodeKind.CONDITION: "#008080",
}
DEFAULT_FILL = "#6D6D70"

KIND_GLYPH = {
    NodeKind.TRIGGER:   "⚡",
    NodeKind.ACTION:    "▶",
    NodeKind.CONDITION: "◆",
}

EMPTY_HINT = ("Start Building Your Workflow",
              "Drag nodes from the palette to create your automation")


# ---------------------------------------------------------------------------
# Scene primitives
# ---------------------------------------------------------------------------

@dataclass
class PortView:
    side: PortSide
    role: PortRole
    x: float
    y: float
    pulsing: bool = False      # input ports pulse while a connection is open


@dataclass
class NodeView:
    node_id: str
    kind: NodeKind
    label: str
    caption: str
    x: float
    y: float
    width: float
    height: float
    fill: str
    glyph: str
    selected: bool = False
    has_error: bool = False
    error_message: str = ""
    avatars: list = field(default_factory=list)   # [(initial, color)]
    ports: list = field(default_factory=list)

    @property
    def delete_rect(self) -> tuple[float, float, float, float]:
        s = DELETE_BUTTON_SIZE
        return (self.x + self.width - NODE_PADDING - s,
                self.y + (self.height - s) / 2, s, s)

    def contains(self, x: float, y: float) -> bool:
        return (self.x <= x <= self.x + self.width and
                self.y <= y <= self.y + self.height)


@dataclass
class ConnectionView:
    conn_id: str
    curve: CurveSpec
    width: float = CONNECTION_WIDTH
    hit_width: float = CONNECTION_HIT_WIDTH
    hover: bool = False


@dataclass
class Scene:
    grid_size: int
    nodes: list[NodeView]
    connections: list[ConnectionView]
    status_text: str = ""
    preview: Optional[CurveSpec] = None
    empty_hint: Optional[tuple[str, str]] = None


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def build_scene(graph: WorkflowGraph, gesture=None,
                hover_connection_id: Optional[str] = None,
                grid_size: int = GRID_SIZE) -> Scene:
    connecting = gesture is not None and gesture.is_connecting

    nodes = []
    for node in graph.nodes:
        ports = [
            PortView(side=p.side, role=p.role, x=p.x, y=p.y,
                     pulsing=connecting and p.role is PortRole.INPUT)
            for p in connection_points(node)
        ]
        nodes.append(NodeView(
            node_id=node.node_id,
            kind=node.kind,
            label=node.display_name or node.kind.value,
            caption=node.kind.value.capitalize(),
            x=node.x, y=node.y, width=node.width, height=node.height,
            fill=KIND_FILL.get(node.kind, DEFAULT_FILL),
            glyph=KIND_GLYPH.get(node.kind, "?"),
            selected=node.node_id == graph.selected_node_id,
            has_error=node.has_error,
            error_message=node.error_message,
            avatars=[(c.name[:1].upper(), c.color)
                     for c in node.collaborators[:MAX_AVATARS] if c.name],
            ports=ports,
        ))

    connections = []
    for conn in graph.connections:
        src = graph.get_node(conn.from_node)
        dst = graph.get_node(conn.to_node)
        if src is None or dst is None:
            continue
        start = port_position(src, conn.from_port)
        end = port_position(dst, conn.to_port)
        connections.append(ConnectionView(
            conn_id=conn.id,
            curve=route_points(start, end, conn.from_port, conn.to_port),
            hover=conn.id == hover_connection_id,
        ))

    preview = None
    if connecting:
        src = graph.get_node(gesture.connect_source)
        if src is not None:
            preview = route_points(port_position(src, gesture.connect_side),
                                   gesture.cursor, gesture.connect_side, None)

    return Scene(
        grid_size=grid_size,
        nodes=nodes,
        connections=connections,
        status_text=gesture.status_text if gesture is not None else "",
        preview=preview,
        empty_hint=None if nodes else EMPTY_HINT,
    )


# ---------------------------------------------------------------------------
# Hit testing
# ---------------------------------------------------------------------------

class HitKind:
    NONE          = "none"
    PORT          = "port"
    DELETE_BUTTON = "delete_button"
    NODE          = "node"
    CONNECTION    = "connection"


@dataclass
class Hit:
    kind: str = HitKind.NONE
    node_id: Optional[str] = None
    side: Optional[PortSide] = None
    conn_id: Optional[str] = None


def _in_rect(rect, x: float, y: float) -> bool:
    rx, ry, rw, rh = rect
    return rx <= x <= rx + rw and ry <= y <= ry + rh


def hit_test(scene: Scene, x: float, y: float) -> Hit:
    # Ports sit on node edges and take priority over bodies; topmost first
    for nv in reversed(scene.nodes):
        for pv in nv.ports:
            if math.hypot(x - pv.x, y - pv.y) <= PORT_HIT_RADIUS:
                return Hit(HitKind.PORT, node_id=nv.node_id, side=pv.side)

    for nv in reversed(scene.nodes):
        if _in_rect(nv.delete_rect, x, y):
            return Hit(HitKind.DELETE_BUTTON, node_id=nv.node_id)
        if nv.contains(x, y):
            return Hit(HitKind.NODE, node_id=nv.node_id)

    for cv in reversed(scene.connections):
        if distance_to_curve(cv.curve, x, y) <= cv.hit_width / 2:
            return Hit(HitKind.CONNECTION, conn_id=cv.conn_id)

    return Hit()
