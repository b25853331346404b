#!/usr/bin/env python3
"""Workflow Builder - Desktop Application.

A visual editor for automation workflows: drop trigger, action and
condition nodes on a canvas, connect them and configure each node.
Built with PySide6.

Usage:
    python -m workflow_builder.main [--workflows DIR] [--no-demo] [--debug]
    workflow-builder [--workflows DIR] [--no-demo] [--debug]
"""
import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from .core.settings import Settings


def main():
    parser = argparse.ArgumentParser(description='Workflow Builder')
    parser.add_argument('--workflows', type=str, default=None,
                        help='Directory holding saved workflows (overrides settings)')
    parser.add_argument('--no-demo', action='store_true',
                        help='Start with an empty canvas instead of the demo workflow')
    parser.add_argument('--debug', action='store_true',
                        help='Log at DEBUG level')
    args = parser.parse_args()

    settings = Settings()
    if args.workflows:
        settings.workflows_dir = args.workflows
    if args.no_demo:
        settings.seed_demo = False

    level = logging.DEBUG if args.debug else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)-7s %(name)s: %(message)s',
    )

    app = QApplication(sys.argv)

    # Set application style
    app.setStyle('Fusion')

    # Import here so QApplication exists before any widget module is loaded
    from .app import App
    main_window = App(settings)
    main_window.show()

    sys.exit(app.exec())


if __name__ == '__main__':
    main()
