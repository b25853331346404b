import pytest

from workflow_builder.graph_editor.node_config import (
    FormKind, SECRET_FIELDS, default_config, form_fields, form_kind_for,
    format_json, parse_json_object, visible_fields,
)

BASE_KEYS = {"name", "description", "timeout", "retryEnabled", "retryCount"}


def test_base_config():
    cfg = default_config("condition", "Check Status")
    assert set(cfg) == BASE_KEYS
    assert cfg == {"name": "Check Status", "description": "", "timeout": 30,
                   "retryEnabled": False, "retryCount": 3}


@pytest.mark.parametrize("name, extra", [
    ("Send Email", {"apiKey", "senderEmail", "recipientEmail", "subject", "body", "enableHtml"}),
    ("Gmail Digest", {"apiKey", "senderEmail", "recipientEmail", "subject", "body", "enableHtml"}),
    ("Post to Slack", {"webhookUrl", "channel", "message", "username"}),
    ("Webhook", {"url", "method", "headers", "body"}),
    ("SQL Insert", {"connectionString", "query", "database", "table"}),
    ("HTTP Request", {"url", "method", "headers", "body", "apiKey"}),
    ("Delay", set()),
])
def test_default_config_extras(name, extra):
    assert set(default_config("action", name)) == BASE_KEYS | extra


def test_webhook_defaults_to_post_and_http_to_get():
    assert default_config("trigger", "Webhook")["method"] == "POST"
    assert default_config("action", "HTTP Request")["method"] == "GET"
    assert default_config("action", "Post to Slack")["channel"] == "#general"


def test_email_wins_over_later_keywords():
    cfg = default_config("action", "Email via API")
    assert "senderEmail" in cfg and "url" not in cfg


@pytest.mark.parametrize("name, form", [
    ("Send Email", FormKind.EMAIL),
    ("GMAIL", FormKind.EMAIL),
    ("Slack Alert", FormKind.SLACK),
    ("Database Sync", FormKind.DATABASE),
    ("mysql", FormKind.DATABASE),
    ("HTTP Request", FormKind.API),
    ("Webhook", FormKind.API),
    ("Rapid Check", FormKind.API),   # substring match on "api"
    ("Condition", FormKind.GENERIC),
])
def test_form_kind_for(name, form):
    assert form_kind_for(name) is form


def test_specialised_forms_replace_generic():
    keys = [f.key for f in form_fields(FormKind.EMAIL)]
    assert keys[0] == "apiKey"
    assert "timeout" not in keys
    assert [f.key for f in form_fields("unknown")] == \
        ["name", "description", "timeout", "retryEnabled", "retryCount"]


def test_secret_fields_use_secret_widget():
    for form in FormKind:
        for spec in form_fields(form):
            assert spec.is_secret == (spec.key in SECRET_FIELDS)


def test_retry_count_depends_on_switch():
    hidden = [f.key for f in visible_fields(FormKind.GENERIC, {"retryEnabled": False})]
    shown = [f.key for f in visible_fields(FormKind.GENERIC, {"retryEnabled": True})]
    assert "retryCount" not in hidden
    assert "retryCount" in shown


@pytest.mark.parametrize("text, expected", [
    ('{"Content-Type": "application/json"}', {"Content-Type": "application/json"}),
    ("{}", {}),
    ("{not json", None),
    ("[1, 2]", None),
    ("42", None),
])
def test_parse_json_object(text, expected):
    assert parse_json_object(text) == expected


def test_format_json():
    assert format_json({}) == ""
    assert format_json({"a": 1}) == '{\n  "a": 1\n}'
