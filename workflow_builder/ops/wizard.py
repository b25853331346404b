"""Quick-start wizard: build a two-node workflow from a trigger and an action."""

from dataclasses import dataclass

from ..graph_editor.graph_model import NodeKind, PortSide, WorkflowGraph


@dataclass(frozen=True)
class WizardOption:
    option_id: str
    name: str
    description: str


TRIGGER_OPTIONS = [
    WizardOption('webhook', 'Webhook/API Call', 'Trigger when an external service calls your webhook'),
    WizardOption('schedule', 'Schedule', 'Run on a specific schedule (daily, weekly, etc.)'),
    WizardOption('email', 'New Email', 'Trigger when you receive a new email'),
    WizardOption('form', 'Form Submission', 'When a form is submitted on your website'),
]

ACTION_OPTIONS = [
    WizardOption('email', 'Send Email', 'Send an email notification'),
    WizardOption('slack', 'Send Slack Message', 'Post a message to Slack'),
    WizardOption('database', 'Save to Database', 'Store data in a database'),
    WizardOption('calendar', 'Create Calendar Event', 'Add an event to calendar'),
]

TRIGGER_POS = (200, 100)
ACTION_POS = (200, 250)


def _option_name(options, option_id: str, fallback: str) -> str:
    return next((o.name for o in options if o.option_id == option_id), fallback)


def build_wizard_graph(trigger_id: str = '', action_id: str = '') -> WorkflowGraph:
    """Return a fresh graph for the wizard's choices.

    An empty id skips that node; an unknown id still creates the node under
    the generic name 'Trigger' or 'Action'.  When both nodes exist they are
    joined bottom -> top.
    """
    graph = WorkflowGraph()
    trigger = action = None
    if trigger_id:
        trigger = graph.add_node(NodeKind.TRIGGER,
                                 _option_name(TRIGGER_OPTIONS, trigger_id, 'Trigger'),
                                 *TRIGGER_POS)
    if action_id:
        action = graph.add_node(NodeKind.ACTION,
                                _option_name(ACTION_OPTIONS, action_id, 'Action'),
                                *ACTION_POS)
    if trigger is not None and action is not None:
        graph.add_connection(trigger.node_id, PortSide.BOTTOM, action.node_id, PortSide.TOP)
    return graph
