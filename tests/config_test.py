import json

import pytest
from pydantic import ValidationError as SettingsError

from firstlast import config
from firstlast.config import ExtractionSettings, load_config, load_settings, save_config


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "firstlast" / "config.json"
    monkeypatch.setattr(config, "get_config_dir", lambda: path.parent)
    monkeypatch.setattr(config, "get_config_file", lambda: path)
    for env_name in config.ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    return path


def test_defaults():
    settings = ExtractionSettings()
    assert settings.render_scale == 1.5
    assert settings.jpeg_quality == 0.8
    assert settings.display_divisor is None
    assert settings.max_file_size == 20 * 1024 * 1024


@pytest.mark.parametrize("field, value", [
    ("render_scale", 0),
    ("jpeg_quality", 1.5),
    ("jpeg_quality", 0),
    ("display_divisor", -4),
    ("max_file_size", 0),
])
def test_invalid_settings(field, value):
    with pytest.raises(SettingsError):
        ExtractionSettings(**{field: value})


def test_save_and_load_config(config_file):
    save_config({"render_scale": 2.0})
    assert json.loads(config_file.read_text()) == {"render_scale": 2.0}
    assert load_config() == {"render_scale": 2.0}


def test_broken_config_file_is_ignored(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("{not json")
    assert load_config() == {}


def test_environment_overrides_file(config_file, monkeypatch):
    save_config({"render_scale": 2.0, "jpeg_quality": 0.5})
    monkeypatch.setenv("FIRSTLAST_RENDER_SCALE", "3")
    settings = load_settings()
    assert settings.render_scale == 3.0
    assert settings.jpeg_quality == 0.5


def test_explicit_overrides_win(config_file, monkeypatch):
    monkeypatch.setenv("FIRSTLAST_DISPLAY_DIVISOR", "4")
    save_config({"unknown_key": True})
    settings = load_settings(display_divisor=None, jpeg_quality=0.9, poppler_path="/opt/poppler")
    assert settings.display_divisor == 4.0
    assert settings.jpeg_quality == 0.9
    assert settings.poppler_path == "/opt/poppler"
