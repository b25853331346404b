#!/usr/bin/env python3
"""Workflow Builder - Desktop Application.

Usage:
    python main.py [--workflows DIR] [--no-demo] [--debug]   # from project root
    python -m workflow_builder.main [--workflows DIR] [--no-demo] [--debug]
"""
import sys
from pathlib import Path

# Ensure the project root (this file's directory) is on sys.path so that
# `import workflow_builder` works regardless of how the script is invoked.
_root = str(Path(__file__).resolve().parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

from workflow_builder.main import main  # noqa: E402


if __name__ == '__main__':
    main()
