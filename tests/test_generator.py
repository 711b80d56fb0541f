"""Tests for agentconf.lifecycle.generator."""

import json

import pytest

from agentconf.config.settings import Settings
from agentconf.integrations.agents import AgentKind, OperatingMode
from agentconf.lifecycle.generator import ConfigGenerator, validate_settings
from agentconf.lifecycle.reader import ConfigReader
from agentconf.models import CanonicalSettings
from agentconf.utils.errors import ConfigValidationError


@pytest.fixture
def generator(home):
    return ConfigGenerator(ConfigReader(home), Settings(home_dir=str(home)))


class TestValidateSettings:
    @pytest.mark.parametrize(
        "endpoint",
        ["", "proxy.local:8317", "ftp://proxy.local", "http://", "http://host:notaport"],
    )
    def test_rejects_bad_endpoints(self, endpoint):
        settings = CanonicalSettings(endpoint_url=endpoint, api_key="k", selected_model="m")

        with pytest.raises(ConfigValidationError):
            validate_settings(AgentKind.CLAUDE_CODE, settings)

    def test_model_required(self):
        settings = CanonicalSettings(endpoint_url="http://localhost:8317", api_key="k", selected_model="  ")

        with pytest.raises(ConfigValidationError, match="model is required"):
            validate_settings(AgentKind.CODEX, settings)

    def test_amp_needs_no_model(self):
        settings = CanonicalSettings(endpoint_url="http://localhost:8317", api_key="", selected_model="")

        validate_settings(AgentKind.AMP, settings)

    def test_empty_api_key_allowed(self, local_settings):
        settings = CanonicalSettings(
            endpoint_url=local_settings.endpoint_url, api_key="", selected_model="gemini-2.5-pro"
        )

        validate_settings(AgentKind.GEMINI_CLI, settings)

    @pytest.mark.parametrize("api_key", ["sk-t\u00e9st", "sk-\u2026", "sk-a\nb", "sk\x00"])
    def test_rejects_unsendable_api_key(self, api_key, remote_settings):
        settings = CanonicalSettings(
            endpoint_url=remote_settings.endpoint_url,
            api_key=api_key,
            selected_model=remote_settings.selected_model,
        )

        with pytest.raises(ConfigValidationError, match="API key"):
            validate_settings(AgentKind.CLAUDE_CODE, settings)

    @pytest.mark.parametrize("key", ["Reasoning", "1st", "with-dash", ""])
    def test_rejects_bad_extension_keys(self, key, remote_settings):
        settings = CanonicalSettings(
            endpoint_url=remote_settings.endpoint_url,
            api_key="k",
            selected_model="m",
            extensions={key: "v"},
        )

        with pytest.raises(ConfigValidationError, match="extension key"):
            validate_settings(AgentKind.CODEX, settings)

    def test_rejects_blank_available_model(self, remote_settings):
        settings = CanonicalSettings(
            endpoint_url=remote_settings.endpoint_url,
            api_key="k",
            selected_model="m",
            available_models=("gpt-5", " "),
        )

        with pytest.raises(ConfigValidationError):
            validate_settings(AgentKind.FACTORY_DROID, settings)


class TestConfigGenerator:
    def test_generate_merges_existing_file(self, generator, home, remote_settings):
        path = AgentKind.CLAUDE_CODE.config_path(home)
        path.parent.mkdir(parents=True)
        path.write_text('{"permissions": {"deny": ["Read(.env)"]}}')

        data = json.loads(generator.generate(AgentKind.CLAUDE_CODE, remote_settings))

        assert data["permissions"] == {"deny": ["Read(.env)"]}
        assert data["env"]["ANTHROPIC_BASE_URL"] == "https://proxy.local:8317"

    def test_generate_does_not_write(self, generator, home, remote_settings):
        generator.generate(AgentKind.CODEX, remote_settings)

        assert not AgentKind.CODEX.config_path(home).exists()

    def test_selected_model_override(self, generator, remote_settings):
        text = generator.generate(AgentKind.CODEX, remote_settings, selected_model="gpt-5")

        assert 'model = "gpt-5"' in text

    def test_is_deterministic(self, generator, remote_settings):
        first = generator.generate(AgentKind.OPENCODE, remote_settings)
        second = generator.generate(AgentKind.OPENCODE, remote_settings)

        assert first == second

    def test_invalid_settings_raise(self, generator):
        settings = CanonicalSettings(endpoint_url="nope", api_key="k", selected_model="m")

        with pytest.raises(ConfigValidationError):
            generator.generate(AgentKind.CLAUDE_CODE, settings)

    def test_default_settings_local(self, generator):
        settings = generator.default_settings(AgentKind.CODEX, OperatingMode.LOCAL, api_key="mgmt")

        assert settings.endpoint_url == "http://127.0.0.1:8317"
        assert settings.selected_model == "gpt-5-codex"
        assert settings.api_key == "mgmt"
        assert settings.operating_mode is OperatingMode.LOCAL

    def test_default_settings_remote_requires_url(self, generator):
        with pytest.raises(ConfigValidationError, match="REMOTE_PROXY_URL"):
            generator.default_settings(AgentKind.CLAUDE_CODE, OperatingMode.REMOTE)

    def test_default_settings_remote(self, home):
        app_settings = Settings(
            home_dir=str(home),
            remote_proxy_url="https://proxy.example.com/v1",
            default_model="claude-opus-4-1",
        )
        generator = ConfigGenerator(ConfigReader(home), app_settings)

        settings = generator.default_settings(AgentKind.GEMINI_CLI, OperatingMode.REMOTE, "key")

        assert settings.endpoint_url == "https://proxy.example.com"
        assert settings.selected_model == "claude-opus-4-1"

    def test_generate_default(self, generator):
        text = generator.generate_default(AgentKind.GEMINI_CLI, OperatingMode.LOCAL)

        assert 'CODE_ASSIST_ENDPOINT="http://127.0.0.1:8317"' in text
        assert 'GEMINI_MODEL="gemini-2.5-pro"' in text

    def test_strip_missing_file(self, generator):
        assert generator.strip(AgentKind.AMP) is None

    def test_strip_existing_file(self, generator, home):
        path = AgentKind.AMP.config_path(home)
        path.parent.mkdir(parents=True)
        path.write_text('{"amp.url": "http://localhost:8317", "amp.theme": "dark"}')

        assert json.loads(generator.strip(AgentKind.AMP)) == {"amp.theme": "dark"}
