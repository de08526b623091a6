"""
Tests for the JSON settings store.
"""

import json
import logging

import allure
import pytest

from modeguard.config import ConfigError, SettingsStore, resolve_config_path
from modeguard.constants import CONFIG_FILE, CONFIG_PATH_ENV_VAR


@allure.feature("Settings Store")
@allure.story("Resolving the settings path")
class TestResolveConfigPath:

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(tmp_path / "env.json"))

        assert resolve_config_path(tmp_path / "cli.json") == tmp_path / "cli.json"

    def test_environment_variable_is_used(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV_VAR, str(tmp_path / "env.json"))

        assert resolve_config_path() == tmp_path / "env.json"

    def test_blank_environment_variable_is_ignored(self, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV_VAR, "   ")

        assert resolve_config_path() == CONFIG_FILE

    def test_default_location(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV_VAR, raising=False)

        assert resolve_config_path() == CONFIG_FILE
        assert SettingsStore().path == CONFIG_FILE


@allure.feature("Settings Store")
@allure.story("Loading and saving")
class TestSettingsStore:

    def test_missing_file_loads_as_none(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")

        assert store.load_settings() is None

    def test_save_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "settings.json"
        store = SettingsStore(path)

        store.save_settings({"theme": "dark", "mode_settings": {"active_mode_id": "ask"}})

        assert json.loads(path.read_text(encoding="utf-8")) == {
            "theme": "dark",
            "mode_settings": {"active_mode_id": "ask"},
        }
        assert store.load_settings()["mode_settings"]["active_mode_id"] == "ask"

    def test_corrupt_file_loads_as_none_with_warning(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="modeguard.config"):
            assert SettingsStore(path).load_settings() is None

        assert "Failed to load settings file" in caplog.text

    def test_non_object_document_loads_as_none(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="modeguard.config"):
            assert SettingsStore(path).load_settings() is None

        assert "expected an object" in caplog.text

    def test_unwritable_path_raises_config_error(self, tmp_path):
        store = SettingsStore(tmp_path)

        with pytest.raises(ConfigError) as exc_info:
            store.save_settings({})

        assert exc_info.value.path == tmp_path
        assert str(tmp_path) in str(exc_info.value)

    def test_unserializable_document_raises_config_error(self, tmp_path):
        store = SettingsStore(tmp_path / "settings.json")

        with pytest.raises(ConfigError):
            store.save_settings({"bad": object()})


def test_mode_manager_round_trip_through_file(tmp_path, registry):
    from modeguard.modes import Mode, ModeManager

    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

    manager = ModeManager(SettingsStore(path), registry)
    manager.add_custom_mode(Mode(id="review", name="Review", allowed_tags=["query"]))
    manager.set_current_mode("review")

    reloaded = ModeManager(SettingsStore(path), registry)
    document = json.loads(path.read_text(encoding="utf-8"))

    assert reloaded.get_current_mode().id == "review"
    assert document["theme"] == "dark"
    assert [m["id"] for m in document["mode_settings"]["custom_modes"]] == ["review"]
