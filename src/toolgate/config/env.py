"""Environment settings and credential checks.

Secrets are read once at startup from the process environment and an
optional ``.env`` file in the working directory. Each secret accepts several
variable names so existing Azure OpenAI setups work unchanged.

Environment Variables:
    TOOLGATE_API_KEY / AZURE_OPENAI_API_KEY / OPENAI_API_APIKEY: LLM API key
    TOOLGATE_ENDPOINT / AZURE_OPENAI_ENDPOINT / OPENAI_API_ENDPOINT: LLM endpoint
    FITNESS_API_TOKEN: Bearer token for the Google Fitness plugin
    KEEP_API_TOKEN: Bearer token for the Google Keep plugin
    TOOLGATE_PROVIDER, TOOLGATE_MODEL, TOOLGATE_TEMPERATURE,
    TOOLGATE_APPROVAL_MODE, TOOLGATE_APPROVAL_TIMEOUT, TOOLGATE_AUDIT_LOG_FILE:
        configuration overrides
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from toolgate.config.models import Provider

if TYPE_CHECKING:
    from toolgate.config.models import ToolgateConfig

API_KEY_ENV_VARS = ("TOOLGATE_API_KEY", "AZURE_OPENAI_API_KEY", "OPENAI_API_APIKEY")
ENDPOINT_ENV_VARS = ("TOOLGATE_ENDPOINT", "AZURE_OPENAI_ENDPOINT", "OPENAI_API_ENDPOINT")


class ConfigurationError(Exception):
    """Raised when the configuration cannot be loaded or is inconsistent."""


class MissingCredentialError(ConfigurationError):
    """Raised at startup when required secrets are not set.

    Attributes:
        variables: Environment variables the user has to set
    """

    def __init__(self, variables: list[str]) -> None:
        self.variables = variables
        super().__init__(
            "Missing credentials. Set the following environment variables "
            "(or add them to .env):\n" + "\n".join(f"  {v}" for v in variables)
        )


class EnvSettings(BaseSettings):
    """Secrets and overrides read from the environment."""

    # NO env_prefix - use explicit full names for deterministic resolution
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    api_key: SecretStr | None = Field(
        default=None,
        description="API key for the hosted LLM",
        validation_alias=AliasChoices(*API_KEY_ENV_VARS),
    )
    endpoint: str | None = Field(
        default=None,
        description="Endpoint of the hosted LLM (required for Azure OpenAI)",
        validation_alias=AliasChoices(*ENDPOINT_ENV_VARS),
    )
    fitness_api_token: SecretStr | None = Field(
        default=None,
        validation_alias="FITNESS_API_TOKEN",
    )
    keep_api_token: SecretStr | None = Field(
        default=None,
        validation_alias="KEEP_API_TOKEN",
    )

    toolgate_provider: str | None = None
    toolgate_model: str | None = None
    toolgate_temperature: float | None = None
    toolgate_approval_mode: str | None = None
    toolgate_approval_timeout: float | None = None
    toolgate_audit_log_file: str | None = None


def load_env_settings(env_file: Path | None = None) -> EnvSettings:
    """Load environment settings, optionally from a specific .env file."""
    if env_file is not None:
        return EnvSettings(_env_file=env_file)  # type: ignore[call-arg]
    return EnvSettings()


def require_credentials(config: ToolgateConfig, env: EnvSettings) -> None:
    """Fail fast when a secret needed by the configuration is missing.

    Raises:
        MissingCredentialError: Listing every missing variable at once
    """
    missing: list[str] = []

    if env.api_key is None:
        missing.append(" or ".join(API_KEY_ENV_VARS))
    if config.provider == Provider.AZURE_OPENAI and not env.endpoint:
        missing.append(" or ".join(ENDPOINT_ENV_VARS))
    if "GoogleFitness" in config.plugins and env.fitness_api_token is None:
        missing.append("FITNESS_API_TOKEN")
    if "GoogleKeep" in config.plugins and env.keep_api_token is None:
        missing.append("KEEP_API_TOKEN")

    if missing:
        raise MissingCredentialError(missing)
