"""Tests for agentconf.config.settings module."""

from pathlib import Path

from agentconf.config.settings import DEFAULT_LOCAL_PROXY_URL, Settings


class TestSettingsDefaults:
    def test_defaults(self):
        settings = Settings()

        assert settings.backup_retention == 10
        assert settings.probe_timeout_seconds == 10.0
        assert settings.local_proxy_url == DEFAULT_LOCAL_PROXY_URL
        assert settings.probe_after_write is True

    def test_key_mapping_is_hidden_from_repr(self):
        assert "_key_mapping" not in repr(Settings())


class TestSettingsKeyMapping:
    def test_get_attribute_for_key(self):
        settings = Settings()

        assert settings.get_attribute_for_key("BACKUP_RETENTION") == "backup_retention"
        assert settings.get_attribute_for_key("UNKNOWN") is None

    def test_get_key_for_attribute(self):
        settings = Settings()

        assert settings.get_key_for_attribute("remote_proxy_url") == "REMOTE_PROXY_URL"
        assert settings.get_key_for_attribute("nope") is None

    def test_every_field_has_a_key(self):
        keys = Settings.get_config_keys()
        settings = Settings()

        attrs = {settings.get_attribute_for_key(k) for k in keys}
        assert attrs == {name for name in vars(settings) if not name.startswith("_")}


class TestSettingsPaths:
    def test_home_path_defaults_to_user_home(self, monkeypatch, tmp_path):
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)

        settings = Settings()

        assert settings.home_path == tmp_path
        assert settings.backup_path == tmp_path / ".agentconf" / "backups"

    def test_explicit_paths(self, tmp_path):
        settings = Settings(home_dir=str(tmp_path / "h"), backup_dir=str(tmp_path / "b"))

        assert settings.home_path == tmp_path / "h"
        assert settings.backup_path == tmp_path / "b"

    def test_tilde_is_expanded(self):
        assert Settings(backup_dir="~/snaps").backup_path == Path.home() / "snaps"
