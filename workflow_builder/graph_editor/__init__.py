"""Workflow graph editor package.

Public surface (Qt-free):
  WorkflowGraph                 – data model (nodes + connections + selection)
  WorkflowNode, WorkflowConnection, Port, NodeKind, PortSide, PortRole
  GestureController             – pointer state machine
  build_scene, hit_test         – render projection and picking
  ConfigBinding                 – live node configuration binding
  route_path, connection_points – connector geometry

Widgets live in their own modules so that importing the model never loads Qt:
  node_canvas.NodeGraphCanvas, workflow_editor.WorkflowEditor,
  config_panel.ConfigPanel, palette_panel.NodePalette
"""

from .graph_model import (
    WorkflowGraph, WorkflowNode, WorkflowConnection, Collaborator,
    Port, NodeKind, PortSide, PortRole,
)
from .geometry import CurveSpec, connection_points, port_position, route_path
from .gesture import GestureController, GestureState
from .scene import Hit, HitKind, Scene, build_scene, hit_test
from .config_binding import ConfigBinding
from .node_config import FormKind, default_config, form_kind_for

__all__ = [
    "WorkflowGraph", "WorkflowNode", "WorkflowConnection", "Collaborator",
    "Port", "NodeKind", "PortSide", "PortRole",
    "CurveSpec", "connection_points", "port_position", "route_path",
    "GestureController", "GestureState",
    "Hit", "HitKind", "Scene", "build_scene", "hit_test",
    "ConfigBinding", "FormKind", "default_config", "form_kind_for",
]
