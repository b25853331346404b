"""Workflow save/load operations, plus single-file import/export.

Saved workflows live one per file in a directory:

    <directory>/<workflow_id>.workflow.json

Every file has the same envelope as an exported workflow:

    {'type': 'workflow', 'version': 1, 'name': ..., 'graph': <WorkflowGraph.to_dict()>}
"""

import json
import logging
import re
import uuid
from pathlib import Path

from ..graph_editor.graph_model import WorkflowGraph

logger = logging.getLogger(__name__)

FILE_TYPE = 'workflow'
FORMAT_VERSION = 1
SUFFIX = '.workflow.json'

_SAFE_ID = re.compile(r'^[A-Za-z0-9_-]+$')


class WorkflowNotFoundError(KeyError):
    """No saved workflow with the requested id."""


def _envelope(graph: WorkflowGraph, name: str) -> dict:
    return {
        'type': FILE_TYPE,
        'version': FORMAT_VERSION,
        'name': name,
        'graph': graph.to_dict(),
    }


def _graph_from_envelope(data, source) -> WorkflowGraph:
    if not isinstance(data, dict) or data.get('type') != FILE_TYPE:
        found = data.get('type') if isinstance(data, dict) else type(data).__name__
        raise ValueError(
            f"Expected a workflow file (type='workflow'), got type={found!r} in {source}"
        )
    try:
        return WorkflowGraph.from_dict(data.get('graph') or {})
    except (TypeError, AttributeError, KeyError, ValueError) as e:
        raise ValueError(f"Malformed workflow in {source}: {e!r}") from e


# ---- Document store ----

class WorkflowStore:
    """Directory-backed store: save(graph) -> id, load(id) -> graph."""

    def __init__(self, directory):
        self.directory = Path(directory).expanduser()

    def _path(self, workflow_id: str) -> Path:
        if not _SAFE_ID.match(workflow_id or ''):
            raise WorkflowNotFoundError(workflow_id)
        return self.directory / f'{workflow_id}{SUFFIX}'

    def save(self, graph: WorkflowGraph, workflow_id: str = None, name: str = '') -> str:
        """Write the graph; a new id is allocated when none is given.

        Returns the workflow id.  Raises on I/O error.
        """
        if workflow_id is None:
            workflow_id = uuid.uuid4().hex
        path = self._path(workflow_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix('.tmp')
        with open(tmp, 'w') as f:
            json.dump(_envelope(graph, name or workflow_id), f, indent=2)
        tmp.replace(path)
        logger.info('Saved workflow %s (%d nodes) to %s',
                    workflow_id, len(graph.nodes), path)
        return workflow_id

    def load(self, workflow_id: str) -> WorkflowGraph:
        """Raises WorkflowNotFoundError, ValueError for a non-workflow or
        malformed file, and whatever json/file I/O raises on bad input."""
        path = self._path(workflow_id)
        if not path.exists():
            raise WorkflowNotFoundError(workflow_id)
        with open(path) as f:
            data = json.load(f)
        graph = _graph_from_envelope(data, path)
        logger.info('Loaded workflow %s (%d nodes)', workflow_id, len(graph.nodes))
        return graph

    def name_of(self, workflow_id: str) -> str:
        path = self._path(workflow_id)
        if not path.exists():
            raise WorkflowNotFoundError(workflow_id)
        with open(path) as f:
            data = json.load(f)
        return data.get('name', workflow_id) if isinstance(data, dict) else workflow_id

    def list_ids(self) -> list:
        if not self.directory.is_dir():
            return []
        return sorted(p.name[:-len(SUFFIX)] for p in self.directory.glob(f'*{SUFFIX}'))

    def delete(self, workflow_id: str) -> None:
        path = self._path(workflow_id)
        if not path.exists():
            raise WorkflowNotFoundError(workflow_id)
        path.unlink()
        logger.info('Deleted workflow %s', workflow_id)


# ---- Single-file import / export ----

def export_workflow(graph: WorkflowGraph, path: str, name: str = '') -> None:
    """Write one workflow to a JSON file.  Raises on I/O error."""
    with open(path, 'w') as f:
        json.dump(_envelope(graph, name or Path(path).stem), f, indent=2)
    logger.info('Exported workflow to %s', path)


def import_workflow(path: str) -> WorkflowGraph:
    """Read one workflow from a JSON file.

    Raises ValueError if the file is not a workflow or its graph is
    malformed, and whatever json.load or file I/O raises on bad input.
    """
    with open(path) as f:
        data = json.load(f)
    graph = _graph_from_envelope(data, path)
    logger.info('Imported workflow from %s (%d nodes)', path, len(graph.nodes))
    return graph
