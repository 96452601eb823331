"""Tests for persisted permit API settings."""

import json

import pytest

from permitsync.app import settings_store
from permitsync.app.permit_transport import PermitApiConfig


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Redirect settings I/O to a temp folder so tests don't touch real config."""
    monkeypatch.delenv("PERMITSYNC_SETTINGS_PATH", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return tmp_path / "permitsync" / "settings.json"


class TestSettingsStore:
    def test_path_uses_xdg_config_home(self, isolate_settings):
        assert settings_store.settings_path() == isolate_settings

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        target = tmp_path / "custom" / "permits.json"
        monkeypatch.setenv("PERMITSYNC_SETTINGS_PATH", str(target))
        assert settings_store.settings_path() == target

    @pytest.mark.skipif(settings_store.os.name == "nt", reason="POSIX config layout")
    def test_home_config_when_xdg_unset(self, tmp_path, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert settings_store.settings_path() == tmp_path / ".config" / "permitsync" / "settings.json"

    def test_missing_file_gives_defaults(self):
        assert settings_store.load_settings() == {}
        assert settings_store.load_permit_api_config() == PermitApiConfig()

    def test_corrupt_file_gives_defaults(self, isolate_settings):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text("{not json", encoding="utf-8")
        assert settings_store.load_settings() == {}

    def test_non_object_file_gives_defaults(self, isolate_settings):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text("[1, 2]", encoding="utf-8")
        assert settings_store.load_settings() == {}

    def test_save_and_load_config(self, isolate_settings):
        saved = settings_store.save_permit_api_config(
            PermitApiConfig(base_url="https://permits.example.test/", timeout_seconds=12.0)
        )
        assert saved.base_url == "https://permits.example.test"

        raw = json.loads(isolate_settings.read_text(encoding="utf-8"))
        assert raw["permitApiUrl"] == "https://permits.example.test"
        assert raw["permitApiTimeoutSeconds"] == 12.0
        assert settings_store.load_permit_api_config() == saved

    def test_save_keeps_unrelated_keys(self, isolate_settings):
        settings_store.save_settings({"darkMode": True})
        settings_store.save_permit_api_config(PermitApiConfig())
        assert settings_store.load_settings()["darkMode"] is True
