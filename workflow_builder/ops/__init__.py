"""Operations modules: persistence and graph construction outside the canvas.

Each module contains plain functions (or a small store class) over
WorkflowGraph.  The editor window wires these to toolbar actions and
handles any dialogs.
"""
