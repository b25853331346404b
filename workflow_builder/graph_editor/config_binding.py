"""Live binding between a node's configuration and the settings form.

Qt-free; config_panel.py owns one of these per open node.
"""

from __future__ import annotations

import logging
from typing import Optional

from .graph_model import WorkflowGraph, WorkflowNode
from .node_config import FieldSpec, FormKind, coerce_form, form_fields, parse_json_object, visible_fields

logger = logging.getLogger(__name__)


class ConfigBinding:
    """Edits one node's config.  Every set_* call writes straight through to
    the graph; save() only reconciles the display name."""

    def __init__(self, graph: WorkflowGraph, node_id: str):
        self.graph = graph
        self.node_id = node_id
        self._revealed: set[str] = set()

    @property
    def node(self) -> Optional[WorkflowNode]:
        return self.graph.get_node(self.node_id)

    @property
    def alive(self) -> bool:
        return self.node is not None

    @property
    def form_kind(self) -> FormKind:
        node = self.node
        return coerce_form(node.form) if node is not None else FormKind.GENERIC

    @property
    def values(self) -> dict:
        node = self.node
        return dict(node.config) if node is not None else {}

    def fields(self) -> list[FieldSpec]:
        return form_fields(self.form_kind)

    def visible_fields(self) -> list[FieldSpec]:
        return visible_fields(self.form_kind, self.values)

    # -- Writes --

    def set_field(self, key: str, value) -> None:
        self.graph.update_node_config(self.node_id, {key: value})

    def set_json_field(self, key: str, text: str) -> bool:
        """Commit text as a JSON object.  Invalid input keeps the old value."""
        if not text.strip():
            self.set_field(key, {})
            return True
        parsed = parse_json_object(text)
        if parsed is None:
            logger.debug("%s.%s: invalid JSON ignored", self.node_id, key)
            return False
        self.set_field(key, parsed)
        return True

    def set_int_field(self, key: str, text) -> bool:
        try:
            value = int(text)
        except (TypeError, ValueError):
            return False
        self.set_field(key, value)
        return True

    # -- Secrets --

    def is_revealed(self, key: str) -> bool:
        return key in self._revealed

    def toggle_reveal(self, key: str) -> bool:
        if key in self._revealed:
            self._revealed.discard(key)
        else:
            self._revealed.add(key)
        return key in self._revealed

    # -- Save --

    def save(self) -> bool:
        ok = self.graph.reconcile_display_name(self.node_id)
        if not ok:
            logger.debug("save: node %s no longer exists", self.node_id)
        return ok
