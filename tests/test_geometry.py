import math

import pytest

from workflow_builder.graph_editor.geometry import (
    MAX_CURVATURE, connection_points, distance_to_curve, port_position,
    route_path, route_points, sample_curve,
)
from workflow_builder.graph_editor.graph_model import NodeKind, PortRole, PortSide, WorkflowNode


def _node(x, y, w=200, h=80):
    return WorkflowNode(kind=NodeKind.ACTION, node_id=f"n{x}-{y}", x=x, y=y, width=w, height=h)


def test_port_positions_are_edge_midpoints():
    n = _node(100, 50)
    assert port_position(n, "top") == (200, 50)
    assert port_position(n, "right") == (300, 90)
    assert port_position(n, "bottom") == (200, 130)
    assert port_position(n, "left") == (100, 90)


def test_unknown_side_falls_back_to_bottom():
    n = _node(0, 0)
    assert port_position(n, "sideways") == port_position(n, "bottom")


def test_connection_points_roles():
    roles = {p.side: p.role for p in connection_points(_node(0, 0))}
    assert roles == {
        PortSide.TOP: PortRole.INPUT, PortSide.LEFT: PortRole.INPUT,
        PortSide.RIGHT: PortRole.OUTPUT, PortSide.BOTTOM: PortRole.OUTPUT,
    }


def test_bottom_to_top_offset_short_distance():
    # 100 px apart: k = 0.3 * 100 = 30
    curve = route_points((0, 0), (0, 100), "bottom", "top")
    assert curve.c1 == (0, 30)
    assert curve.c2 == (0, 70)


def test_bottom_to_top_offset_is_capped():
    # 1000 px apart: 0.3 * 1000 = 300, capped at 80
    curve = route_points((50, 0), (50, 1000), "bottom", "top")
    assert curve.c1 == (50, MAX_CURVATURE)
    assert curve.c2 == (50, 1000 - MAX_CURVATURE)


def test_right_to_left_is_horizontal():
    curve = route_points((0, 0), (30, 40), "right", "left")
    # distance 50 -> k = 15
    assert curve.c1 == (15, 0)
    assert curve.c2 == (15, 40)


def test_other_pairs_blend_on_dominant_axis():
    horizontal = route_points((0, 0), (100, 20), "bottom", "left")
    assert horizontal.c1 == pytest.approx((30, 0))
    assert horizontal.c2 == pytest.approx((70, 20))

    vertical = route_points((0, 0), (20, 100), "right", "top")
    assert vertical.c1 == pytest.approx((0, 30))
    assert vertical.c2 == pytest.approx((20, 70))


def test_zero_distance_is_degenerate():
    curve = route_points((10, 10), (10, 10), "bottom", "top")
    assert curve.start == curve.c1 == curve.c2 == curve.end == (10, 10)


def test_route_path_between_demo_nodes():
    a, b = _node(150, 100), _node(150, 250)
    curve = route_path(a, "bottom", b, "top")
    assert curve.start == (250, 180)
    assert curve.end == (250, 250)
    d = math.hypot(0, 70)
    assert curve.c1 == (250, 180 + 0.3 * d)


def test_route_path_unknown_destination_uses_top():
    a, b = _node(0, 0), _node(0, 300)
    assert route_path(a, "bottom", b, None).end == port_position(b, "top")


def test_to_svg():
    curve = route_points((0, 0), (0, 100), "bottom", "top")
    assert curve.to_svg() == "M 0 0 C 0 30, 0 70, 0 100"


def test_sample_curve_endpoints():
    curve = route_points((0, 0), (100, 200), "bottom", "top")
    pts = sample_curve(curve, samples=10)
    assert pts.shape == (11, 2)
    assert tuple(pts[0]) == pytest.approx((0, 0))
    assert tuple(pts[-1]) == pytest.approx((100, 200))


def test_distance_to_curve():
    curve = route_points((0, 0), (0, 100), "bottom", "top")
    assert distance_to_curve(curve, 0, 50) == pytest.approx(0, abs=1e-6)
    assert distance_to_curve(curve, 7, 50) == pytest.approx(7, abs=0.5)
