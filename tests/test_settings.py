"""Tests for JSON settings persistence."""

import importlib
import json
import logging
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

settings_mod = importlib.import_module("chorale_generator.settings")


def test_round_trip(tmp_path):
    path = tmp_path / "settings.json"
    data = {"key": "Dm", "measures": 6, "harmonic_complexity": 7}
    settings_mod.save_settings(data, path)
    assert json.loads(path.read_text(encoding="utf-8")) == data
    assert settings_mod.load_settings(path) == data


def test_missing_file_gives_empty_dict(tmp_path):
    assert settings_mod.load_settings(tmp_path / "missing.json") == {}


def test_corrupt_file_logged(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    caplog.set_level(logging.ERROR)
    assert settings_mod.load_settings(path) == {}
    assert "Could not load settings" in caplog.text


def test_non_object_file_ignored(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")
    caplog.set_level(logging.ERROR)
    assert settings_mod.load_settings(path) == {}
    assert "JSON object" in caplog.text


def test_save_failure_logged(tmp_path, caplog):
    caplog.set_level(logging.ERROR)
    settings_mod.save_settings({"key": "C"}, tmp_path / "no" / "such" / "dir.json")
    assert "Could not save settings" in caplog.text


def test_env_var_overrides_default_path(monkeypatch, tmp_path):
    target = tmp_path / "custom.json"
    monkeypatch.setenv("CHORALE_SETTINGS_FILE", str(target))
    reloaded = importlib.reload(settings_mod)
    try:
        assert reloaded.DEFAULT_SETTINGS_FILE == target
    finally:
        monkeypatch.delenv("CHORALE_SETTINGS_FILE")
        importlib.reload(settings_mod)


def test_settings_from_mapping():
    settings = settings_mod.settings_from_mapping({"melodic_smoothness": 9, "bpm": 100})
    assert settings.melodic_smoothness == 9
    assert settings.harmonic_complexity == 5
    with pytest.raises(ValueError):
        settings_mod.settings_from_mapping({"dissonance_strictness": 42})
