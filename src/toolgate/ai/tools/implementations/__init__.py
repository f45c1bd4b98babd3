"""Plugins that can be registered with the CapabilityRegistry.

Each plugin owns its state and exposes its capabilities through
``as_tools()``; ``build_plugins`` creates the ones enabled in configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from toolgate.ai.tools.implementations.fitness import GoogleFitnessPlugin, HeartRateSample
from toolgate.ai.tools.implementations.lights import LightsPlugin, LightState
from toolgate.ai.tools.implementations.notes import GoogleKeepPlugin, Note
from toolgate.ai.tools.implementations.software_builder import SoftwareBuilderPlugin
from toolgate.config.env import MissingCredentialError

if TYPE_CHECKING:
    from pydantic import SecretStr
    from rich.console import Console

    from toolgate.ai.tools.registry import Plugin
    from toolgate.config.env import EnvSettings
    from toolgate.config.models import ToolgateConfig


def build_plugins(
    config: ToolgateConfig,
    env: EnvSettings,
    console: Console | None = None,
    strict: bool = True,
) -> list[Plugin]:
    """Instantiate the plugins enabled in ``config.plugins``, in that order.

    Args:
        config: Loaded configuration
        env: Environment settings holding the plugin tokens
        console: Console the SoftwareBuilder plugin prints to
        strict: Require tokens. Without it a plugin lacking its token is
            built with an empty one, which is enough to list capabilities.

    Raises:
        MissingCredentialError: If ``strict`` and an enabled plugin has no token
    """
    plugins: list[Plugin] = []
    for name in config.plugins:
        if name == "Lights":
            plugins.append(LightsPlugin())
        elif name == "SoftwareBuilder":
            plugins.append(SoftwareBuilderPlugin(console=console))
        elif name == "GoogleFitness":
            plugins.append(
                GoogleFitnessPlugin(
                    _token(env.fitness_api_token, "FITNESS_API_TOKEN", strict),
                    base_url=config.fitness.base_url,
                    timeout=config.fitness.timeout,
                    heart_rate_bucket_seconds=config.fitness.heart_rate_bucket_seconds,
                )
            )
        elif name == "GoogleKeep":
            plugins.append(
                GoogleKeepPlugin(
                    _token(env.keep_api_token, "KEEP_API_TOKEN", strict),
                    base_url=config.notes.base_url,
                    timeout=config.notes.timeout,
                    max_pages=config.notes.max_pages,
                )
            )
    return plugins


def _token(secret: SecretStr | None, variable: str, strict: bool) -> str:
    if secret is not None:
        return secret.get_secret_value()
    if strict:
        raise MissingCredentialError([variable])
    return ""


__all__ = [
    "GoogleFitnessPlugin",
    "GoogleKeepPlugin",
    "HeartRateSample",
    "LightState",
    "LightsPlugin",
    "Note",
    "SoftwareBuilderPlugin",
    "build_plugins",
]
