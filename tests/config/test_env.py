"""Tests for environment settings and credential checks."""

from pathlib import Path

import pytest
from pydantic import SecretStr

from toolgate.config.env import (
    EnvSettings,
    MissingCredentialError,
    load_env_settings,
    require_credentials,
)
from toolgate.config.models import Provider, ToolgateConfig


class TestEnvSettings:
    """Tests for EnvSettings."""

    def test_defaults(self):
        """Test nothing is set in a clean environment."""
        settings = EnvSettings(_env_file=None)

        assert settings.api_key is None
        assert settings.endpoint is None
        assert settings.fitness_api_token is None

    @pytest.mark.parametrize(
        "variable", ["TOOLGATE_API_KEY", "AZURE_OPENAI_API_KEY", "OPENAI_API_APIKEY"]
    )
    def test_api_key_aliases(self, monkeypatch: pytest.MonkeyPatch, variable):
        """Test every accepted API key variable."""
        monkeypatch.setenv(variable, "sk-test")

        settings = EnvSettings(_env_file=None)

        assert settings.api_key.get_secret_value() == "sk-test"

    def test_endpoint_and_tokens(self, monkeypatch: pytest.MonkeyPatch):
        """Test endpoint and plugin tokens are read."""
        monkeypatch.setenv("OPENAI_API_ENDPOINT", "https://example.openai.azure.com/")
        monkeypatch.setenv("FITNESS_API_TOKEN", "fit")
        monkeypatch.setenv("KEEP_API_TOKEN", "keep")

        settings = EnvSettings(_env_file=None)

        assert settings.endpoint == "https://example.openai.azure.com/"
        assert settings.fitness_api_token.get_secret_value() == "fit"
        assert settings.keep_api_token.get_secret_value() == "keep"

    def test_secrets_are_masked(self, monkeypatch: pytest.MonkeyPatch):
        """Test secrets do not leak through repr."""
        monkeypatch.setenv("TOOLGATE_API_KEY", "sk-secret")

        assert "sk-secret" not in repr(EnvSettings(_env_file=None))

    def test_from_env_file(self, tmp_path: Path):
        """Test loading from a specific .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("AZURE_OPENAI_API_KEY=from-file\nKEEP_API_TOKEN=k\n")

        settings = load_env_settings(env_file)

        assert settings.api_key.get_secret_value() == "from-file"
        assert settings.keep_api_token.get_secret_value() == "k"

    def test_env_vars_override_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test process environment wins over .env."""
        env_file = tmp_path / ".env"
        env_file.write_text("AZURE_OPENAI_API_KEY=from-file\n")
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "from-env")

        assert load_env_settings(env_file).api_key.get_secret_value() == "from-env"


class TestRequireCredentials:
    """Tests for the startup credential check."""

    def test_all_present(self):
        """Test a complete environment passes."""
        env = EnvSettings(
            _env_file=None,
            api_key=SecretStr("k"),
            endpoint="https://example",
            fitness_api_token=SecretStr("f"),
            keep_api_token=SecretStr("n"),
        )

        require_credentials(ToolgateConfig(), env)

    def test_lists_every_missing_variable(self):
        """Test all missing secrets are reported together."""
        with pytest.raises(MissingCredentialError) as exc_info:
            require_credentials(ToolgateConfig(), EnvSettings(_env_file=None))

        message = str(exc_info.value)
        assert len(exc_info.value.variables) == 4
        assert "AZURE_OPENAI_API_KEY" in message
        assert "AZURE_OPENAI_ENDPOINT" in message
        assert "FITNESS_API_TOKEN" in message
        assert "KEEP_API_TOKEN" in message

    def test_tokens_only_for_enabled_plugins(self):
        """Test disabled plugins need no token."""
        env = EnvSettings(_env_file=None, api_key=SecretStr("k"), endpoint="https://example")

        require_credentials(ToolgateConfig(plugins=["Lights", "SoftwareBuilder"]), env)

    def test_openai_needs_no_endpoint(self):
        """Test the endpoint is only required for Azure OpenAI."""
        env = EnvSettings(_env_file=None, api_key=SecretStr("k"))

        require_credentials(ToolgateConfig(provider=Provider.OPENAI, plugins=["Lights"]), env)
