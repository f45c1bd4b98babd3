"""Chat model factory.

Builds the LangChain chat model for the configured hosted provider with
dependency checks and error handling.
"""

from __future__ import annotations

import importlib.util
import logging
from typing import TYPE_CHECKING, Any

from langchain.chat_models import init_chat_model

from toolgate.ai.exceptions import MissingDependencyError, ProviderInitializationError
from toolgate.config.models import Provider

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel

    from toolgate.config.env import EnvSettings
    from toolgate.config.models import ToolgateConfig

logger = logging.getLogger(__name__)

# Provider package mapping
PROVIDER_PACKAGES = {
    Provider.AZURE_OPENAI: "langchain_openai",
    Provider.OPENAI: "langchain_openai",
}


def validate_provider_dependencies(provider: Provider) -> None:
    """Check if required langchain provider package is installed.

    Raises:
        MissingDependencyError: If the required package is not installed.
    """
    package_name = PROVIDER_PACKAGES.get(provider)
    if not package_name:
        raise ProviderInitializationError(f"Unknown provider: {provider}")

    if importlib.util.find_spec(package_name) is None:
        pip_package = package_name.replace("_", "-")
        raise MissingDependencyError(
            f"Missing {pip_package} package.\n\n"
            f"To use {provider.value} models, install:\n"
            f"   pip install {pip_package}"
        )


def build_model_params(config: ToolgateConfig, env: EnvSettings) -> dict[str, Any]:
    """Convert configuration and secrets to init_chat_model parameters."""
    params: dict[str, Any] = {"model": config.model}

    if config.temperature is not None:
        params["temperature"] = config.temperature
    if env.api_key is not None:
        params["api_key"] = env.api_key.get_secret_value()

    if config.provider == Provider.AZURE_OPENAI:
        params["azure_deployment"] = config.model
        params["api_version"] = config.api_version
        if env.endpoint:
            params["azure_endpoint"] = env.endpoint
    elif env.endpoint:
        params["base_url"] = env.endpoint

    return params


def get_chat_model(
    config: ToolgateConfig,
    env: EnvSettings,
    **kwargs: Any,
) -> BaseChatModel:
    """Initialize the chat model for the configured provider.

    Args:
        config: Loaded configuration (provider, model, temperature)
        env: Environment settings holding the API key and endpoint
        **kwargs: Additional parameters to pass to init_chat_model.

    Raises:
        MissingDependencyError: If the provider package is missing.
        ProviderInitializationError: If the model cannot be built.
    """
    provider = config.provider
    validate_provider_dependencies(provider)

    params = build_model_params(config, env)
    params.update(kwargs)
    logger.debug(f"Initializing {provider.value} model '{config.model}'")

    try:
        return init_chat_model(model_provider=provider.value, **params)
    except ImportError as e:
        package = PROVIDER_PACKAGES.get(provider, provider.value)
        raise MissingDependencyError(
            f"Failed to import {package}: {e}\n\n"
            f"Install with: pip install {package.replace('_', '-')}"
        ) from e
    except Exception as e:
        raise ProviderInitializationError(
            f"Failed to initialize {provider.value} model '{config.model}': {e}"
        ) from e
