"""Pointer gesture state machine for the workflow canvas.

Turns raw pointer events into graph operations.  Qt-free: the canvas
forwards events in canvas coordinates and supplies a single-shot timer.

States:

  IDLE        nothing in progress
  PENDING     pointer went down on a node; waiting to see whether a second
              press (double click → open configuration) arrives before the
              click window closes (→ DRAGGING)
  DRAGGING    node follows the pointer, keeping the grab offset
  CONNECTING  an output port was clicked; the next click on an input port
              of another node completes the connection, a click on empty
              canvas cancels it

A press on a node and the start of a drag look identical, so the node is
only picked up once the click window expires.  If the button was already
released by then the press was a plain click and only selects the node.

All per-gesture state lives on the controller instance.  Nodes may be
deleted at any time; the controller listens to the graph and falls back to
IDLE when the node it is tracking disappears.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Protocol

from .graph_model import PortRole, WorkflowConnection, WorkflowGraph, coerce_side, port_role

logger = logging.getLogger(__name__)

CLICK_WINDOW_MS = 200
STATUS_CONNECTING = "Click a blue input point to complete connection"


class GestureState(Enum):
    IDLE       = "idle"
    PENDING    = "pending"
    DRAGGING   = "dragging"
    CONNECTING = "connecting"


class SingleShotTimer(Protocol):
    def start(self, interval_ms: int, callback: Callable[[], None]) -> None: ...
    def stop(self) -> None: ...


class GestureController:
    """Interprets pointer input for one canvas.

    on_open_config(node)  – called on double click
    on_tracking(bool)     – called once when a drag/connect starts following
                            the pointer and once when it stops
    """

    def __init__(self, graph: WorkflowGraph, timer: SingleShotTimer,
                 click_window_ms: int = CLICK_WINDOW_MS,
                 on_open_config: Optional[Callable] = None,
                 on_tracking: Optional[Callable[[bool], None]] = None):
        self.graph = graph
        self.click_window_ms = click_window_ms
        self.on_open_config = on_open_config
        self.on_tracking = on_tracking

        self._timer = timer
        self._timer_armed = False

        self.state = GestureState.IDLE
        self.node_id: Optional[str] = None        # pending / dragged node
        self._press_pos = (0.0, 0.0)
        self._released = False
        self.drag_offset = (0.0, 0.0)

        self.connect_side = None                  # PortSide while CONNECTING
        self.cursor = (0.0, 0.0)                  # last pointer position

        self._tracking = False

        graph.on_change(self._on_graph_change)

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    @property
    def is_connecting(self) -> bool:
        return self.state is GestureState.CONNECTING

    @property
    def status_text(self) -> str:
        return STATUS_CONNECTING if self.is_connecting else ""

    @property
    def connect_source(self) -> Optional[str]:
        return self.node_id if self.is_connecting else None

    # -----------------------------------------------------------------------
    # Pointer events
    # -----------------------------------------------------------------------

    def pointer_down_node(self, node_id: str, px: float, py: float) -> None:
        self.cursor = (px, py)
        if self.graph.get_node(node_id) is None:
            return

        if self.state is GestureState.CONNECTING:
            # Only a port can complete a connection
            return

        if self.state is GestureState.PENDING and self.node_id == node_id:
            self._disarm()
            self._reset()
            self.graph.select(node_id)
            node = self.graph.get_node(node_id)
            logger.debug("double click on %s", node_id)
            if self.on_open_config is not None and node is not None:
                self.on_open_config(node)
            return

        if self.state is not GestureState.IDLE:
            self.cancel()

        self.state = GestureState.PENDING
        self.node_id = node_id
        self._press_pos = (px, py)
        self._released = False
        self._arm()

    def pointer_down_port(self, node_id: str, side,
                          px: float = 0.0, py: float = 0.0) -> Optional[WorkflowConnection]:
        """Press on a port.  Returns the new connection when one is made."""
        self.cursor = (px, py)
        side = coerce_side(side)
        if side is None or self.graph.get_node(node_id) is None:
            return None
        role = port_role(side)

        if self.state is GestureState.CONNECTING:
            if role is not PortRole.INPUT or node_id == self.node_id:
                return None
            conn = self.graph.add_connection(self.node_id, self.connect_side, node_id, side)
            self._reset()
            return conn

        if role is not PortRole.OUTPUT:
            return None
        if self.state is not GestureState.IDLE:
            self.cancel()
        self.state = GestureState.CONNECTING
        self.node_id = node_id
        self.connect_side = side
        self._start_tracking()
        return None

    def pointer_down_canvas(self, px: float = 0.0, py: float = 0.0) -> None:
        self.cursor = (px, py)
        if self.state is GestureState.IDLE:
            self.graph.select(None)
            return
        self.cancel()

    def pointer_move(self, px: float, py: float) -> bool:
        """Returns True when the canvas needs a repaint."""
        self.cursor = (px, py)
        if self.state is GestureState.DRAGGING:
            if self.graph.get_node(self.node_id) is None:
                self._reset()
                return True
            ox, oy = self.drag_offset
            self.graph.move_node(self.node_id, px - ox, py - oy)
            return True
        return self.state is GestureState.CONNECTING

    def pointer_up(self, px: Optional[float] = None, py: Optional[float] = None) -> None:
        if px is not None and py is not None:
            self.cursor = (px, py)
        if self.state is GestureState.DRAGGING:
            self._reset()
        elif self.state is GestureState.PENDING:
            self._released = True

    def cancel(self) -> None:
        """Abandon whatever is in progress."""
        self._disarm()
        self._reset()

    # -----------------------------------------------------------------------
    # Timer
    # -----------------------------------------------------------------------

    def _arm(self) -> None:
        self._timer.stop()
        self._timer.start(self.click_window_ms, self._on_click_window_expired)
        self._timer_armed = True

    def _disarm(self) -> None:
        if self._timer_armed:
            self._timer.stop()
            self._timer_armed = False

    def _on_click_window_expired(self) -> None:
        self._timer_armed = False
        if self.state is not GestureState.PENDING:
            return
        node = self.graph.get_node(self.node_id)
        if node is None:
            self._reset()
            return

        self.graph.select(node.node_id)
        if self._released:
            self._reset()
            return

        px, py = self._press_pos
        self.drag_offset = (px - node.x, py - node.y)
        self.state = GestureState.DRAGGING
        self._start_tracking()

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _start_tracking(self) -> None:
        if not self._tracking:
            self._tracking = True
            if self.on_tracking is not None:
                self.on_tracking(True)

    def _stop_tracking(self) -> None:
        if self._tracking:
            self._tracking = False
            if self.on_tracking is not None:
                self.on_tracking(False)

    def _reset(self) -> None:
        self._stop_tracking()
        self.state = GestureState.IDLE
        self.node_id = None
        self.connect_side = None
        self._released = False
        self.drag_offset = (0.0, 0.0)

    def _on_graph_change(self, source) -> None:
        if self.state is GestureState.IDLE:
            return
        if self.graph.get_node(self.node_id) is None:
            logger.debug("tracked node %s vanished (%s); gesture cancelled",
                         self.node_id, source)
            self.cancel()
