"""Port coordinates and connector routing.

Pure functions over node rectangles; no Qt and no graph state.  A node is
anything with x, y, width and height attributes.

Routing
-------
Each connection is drawn as one cubic Bézier from the source port to the
destination port.  Control points depend on the port pairing:

  bottom → top   c1 straight below start, c2 straight above end
  right → left   c1 straight right of start, c2 straight left of end
  anything else  blend along the dominant axis at 30% / 70%

The vertical and horizontal offsets are k = min(0.3 * distance, 80), so two
coincident ports give k = 0 and a zero-length (straight) curve.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .graph_model import PORT_ROLES, Port, PortSide, coerce_side

CURVATURE_RATIO = 0.3
MAX_CURVATURE   = 80.0


@dataclass(frozen=True)
class CurveSpec:
    start: tuple[float, float]
    c1:    tuple[float, float]
    c2:    tuple[float, float]
    end:   tuple[float, float]

    def control_array(self) -> np.ndarray:
        return np.array([self.start, self.c1, self.c2, self.end], dtype=float)

    def to_svg(self) -> str:
        (sx, sy), (ax, ay), (bx, by), (ex, ey) = self.start, self.c1, self.c2, self.end
        return f"M {sx:g} {sy:g} C {ax:g} {ay:g}, {bx:g} {by:g}, {ex:g} {ey:g}"


# ---------------------------------------------------------------------------
# Ports
# ---------------------------------------------------------------------------

def port_position(node, side) -> tuple[float, float]:
    """Midpoint of one edge of the node's rectangle."""
    s = coerce_side(side)
    if s is PortSide.TOP:
        return (node.x + node.width / 2, node.y)
    if s is PortSide.RIGHT:
        return (node.x + node.width, node.y + node.height / 2)
    if s is PortSide.LEFT:
        return (node.x, node.y + node.height / 2)
    return (node.x + node.width / 2, node.y + node.height)


def connection_points(node) -> list[Port]:
    points = []
    for side in PortSide:
        x, y = port_position(node, side)
        points.append(Port(side=side, role=PORT_ROLES[side], x=x, y=y))
    return points


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

def route_points(start: tuple[float, float], end: tuple[float, float],
                 from_side, to_side) -> CurveSpec:
    sx, sy = start
    ex, ey = end
    from_side = coerce_side(from_side)
    to_side = coerce_side(to_side)

    distance = math.hypot(ex - sx, ey - sy)
    k = min(distance * CURVATURE_RATIO, MAX_CURVATURE)

    if from_side is PortSide.BOTTOM and to_side is PortSide.TOP:
        c1, c2 = (sx, sy + k), (ex, ey - k)
    elif from_side is PortSide.RIGHT and to_side is PortSide.LEFT:
        c1, c2 = (sx + k, sy), (ex - k, ey)
    elif abs(ex - sx) > abs(ey - sy):
        dx = ex - sx
        c1, c2 = (sx + dx * CURVATURE_RATIO, sy), (ex - dx * CURVATURE_RATIO, ey)
    else:
        dy = ey - sy
        c1, c2 = (sx, sy + dy * CURVATURE_RATIO), (ex, ey - dy * CURVATURE_RATIO)

    return CurveSpec(start=(sx, sy), c1=c1, c2=c2, end=(ex, ey))


def route_path(from_node, from_port, to_node, to_port) -> CurveSpec:
    """Route a connector between two ports of two nodes."""
    if coerce_side(to_port) is None:
        to_port = PortSide.TOP
    return route_points(port_position(from_node, from_port),
                        port_position(to_node, to_port),
                        from_port, to_port)


# ---------------------------------------------------------------------------
# Hit testing
# ---------------------------------------------------------------------------

def sample_curve(curve: CurveSpec, samples: int = 30) -> np.ndarray:
    """(samples + 1, 2) array of points along the curve, t = 0 .. 1."""
    t = np.linspace(0.0, 1.0, samples + 1)[:, None]
    mt = 1.0 - t
    p = curve.control_array()
    return (mt ** 3 * p[0] +
            3 * mt ** 2 * t * p[1] +
            3 * mt * t ** 2 * p[2] +
            t ** 3 * p[3])


def distance_to_curve(curve: CurveSpec, x: float, y: float,
                      samples: int = 30) -> float:
    """Approximate minimum distance from (x, y) to the curve."""
    pts = sample_curve(curve, samples)
    return float(np.min(np.hypot(pts[:, 0] - x, pts[:, 1] - y)))
