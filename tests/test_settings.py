import json

from workflow_builder.core.settings import DEFAULTS, Settings


def test_defaults_when_missing(tmp_path):
    s = Settings(tmp_path / "settings.json")
    assert s.to_dict() == DEFAULTS
    assert s.node_size == (200, 80)


def test_load_overrides(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"click_window_ms": 350, "grid_size": 0,
                                "seed_demo": False, "log_level": "debug"}))
    s = Settings(path)
    assert s.click_window_ms == 350
    assert s.grid_size == 1
    assert s.seed_demo is False
    assert s.log_level == "DEBUG"
    assert s.node_width == DEFAULTS["node_width"]


def test_unreadable_file_keeps_defaults(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{ nope")
    s = Settings(path)
    assert s.to_dict() == DEFAULTS
    assert "Ignoring unreadable settings file" in caplog.text


def test_save_roundtrip(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    s = Settings(path)
    s.node_width = 240
    s.save()
    assert Settings(path).node_width == 240
