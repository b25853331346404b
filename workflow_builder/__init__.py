"""Workflow Builder - visual editor for trigger / action / condition workflows."""

__version__ = "0.1.0"
