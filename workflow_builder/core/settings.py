"""User-facing settings - persisted to ~/.config/workflow_builder/settings.json.

Editor tuning (click window, grid, default node size), where saved
workflows live, and whether a fresh session starts with the demo graph.
Command-line flags in main.py override these for one run without saving.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / '.config' / 'workflow_builder' / 'settings.json'

DEFAULTS = {
    'click_window_ms': 200,    # press-to-drag / double-click disambiguation
    'grid_size': 20,           # canvas dot grid spacing, px
    'node_width': 200,
    'node_height': 80,
    'workflows_dir': str(Path.home() / '.local' / 'share' / 'workflow_builder' / 'workflows'),
    'seed_demo': True,         # start with the three-node demo graph
    'log_level': 'INFO',
}


class Settings:
    def __init__(self, path=None):
        self.path = Path(path) if path else CONFIG_PATH
        self.click_window_ms: int = DEFAULTS['click_window_ms']
        self.grid_size: int = DEFAULTS['grid_size']
        self.node_width: int = DEFAULTS['node_width']
        self.node_height: int = DEFAULTS['node_height']
        self.workflows_dir: str = DEFAULTS['workflows_dir']
        self.seed_demo: bool = DEFAULTS['seed_demo']
        self.log_level: str = DEFAULTS['log_level']
        self._load()

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path) as f:
                d = json.load(f)
            self.click_window_ms = int(d.get('click_window_ms', self.click_window_ms))
            self.grid_size = max(1, int(d.get('grid_size', self.grid_size)))
            self.node_width = int(d.get('node_width', self.node_width))
            self.node_height = int(d.get('node_height', self.node_height))
            self.workflows_dir = str(d.get('workflows_dir', self.workflows_dir))
            self.seed_demo = bool(d.get('seed_demo', self.seed_demo))
            self.log_level = str(d.get('log_level', self.log_level)).upper()
        except (OSError, ValueError, TypeError, AttributeError) as e:
            # keep defaults on any parse error
            logger.warning('Ignoring unreadable settings file %s: %s', self.path, e)

    @property
    def node_size(self) -> tuple[int, int]:
        return (self.node_width, self.node_height)

    def to_dict(self) -> dict:
        return {
            'click_window_ms': self.click_window_ms,
            'grid_size': self.grid_size,
            'node_width': self.node_width,
            'node_height': self.node_height,
            'workflows_dir': self.workflows_dir,
            'seed_demo': self.seed_demo,
            'log_level': self.log_level,
        }

    def save(self):
        """Persist current settings to the user config file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            # non-fatal if we can't write
            logger.warning('Could not save settings to %s: %s', self.path, e)
