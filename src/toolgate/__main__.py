"""CLI entry point for toolgate."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import click
import yaml
from rich.console import Console
from rich.table import Table

from toolgate.ai.exceptions import ProviderInitializationError, ToolgateAIError
from toolgate.config.env import (
    ConfigurationError,
    EnvSettings,
    load_env_settings,
    require_credentials,
)
from toolgate.config.loader import load_config
from toolgate.config.models import PLUGIN_NAMES, Provider, ToolgateConfig

F = TypeVar("F", bound=Callable[..., Any])

BUILD_DEMO_PROMPT = (
    "I want to build a software. Let's start from the first step. Continue until "
    "all steps were executed or one of the steps are rejected."
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Raised while loading configuration or building the session
STARTUP_ERRORS = (
    ConfigurationError,
    ProviderInitializationError,
    yaml.YAMLError,
    OSError,
    ValueError,
)


def _setup_logging(debug: bool, log_file: Path | None) -> None:
    """Configure the root logger: DEBUG to file and stderr with --debug, else WARNING."""
    if not debug:
        logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
        return

    log_path = log_file or Path("toolgate.log")
    logging.basicConfig(
        level=logging.DEBUG,
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(log_path, mode="w"), logging.StreamHandler()],
        force=True,
    )
    logging.getLogger("toolgate").setLevel(logging.DEBUG)
    logging.getLogger(__name__).info(f"Debug logging enabled, writing to: {log_path}")


def _model_options(func: F) -> F:
    """Options shared by the commands that talk to the model."""
    options = [
        click.option(
            "--provider",
            type=click.Choice([p.value for p in Provider]),
            help="Override LLM provider",
        ),
        click.option("--model", help="Override model (deployment) name"),
        click.option("--debug", is_flag=True, help="Enable debug logging"),
        click.option(
            "--log-file",
            type=click.Path(path_type=Path),
            help="Debug log file (default: toolgate.log)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load(overrides: dict[str, Any]) -> tuple[ToolgateConfig, EnvSettings]:
    env = load_env_settings()
    return load_config(cli_overrides=overrides, env_settings=env), env


def _fail(error: Exception) -> NoReturn:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(package_name="toolgate")
def cli() -> None:
    """Toolgate - console LLM agent with approval for every function call."""


@cli.command()
@click.option(
    "--approval",
    type=click.Choice(["interactive", "policy", "allow", "deny"]),
    help="How function calls are approved (default: interactive)",
)
@click.option(
    "--plugin",
    "plugins",
    multiple=True,
    type=click.Choice(list(PLUGIN_NAMES)),
    help="Enable only this plugin (repeatable)",
)
@_model_options
def chat(
    approval: str | None,
    plugins: tuple[str, ...],
    provider: str | None,
    model: str | None,
    debug: bool,
    log_file: Path | None,
) -> None:
    """Start an interactive chat session."""
    from toolgate.cli.wiring import build_session

    _setup_logging(debug, log_file)

    overrides: dict[str, Any] = {}
    if provider:
        overrides["provider"] = provider
    if model:
        overrides["model"] = model
    if approval:
        overrides["approval"] = {"mode": approval}
    if plugins:
        overrides["plugins"] = list(plugins)

    console = Console(highlight=False)
    try:
        config, env = _load(overrides)
        require_credentials(config, env)
        session = build_session(config, env, console)
    except STARTUP_ERRORS as e:
        _fail(e)

    console.print(
        f"Chatting with {config.agent_name} ({config.provider.value}/{config.model}). "
        f"'{config.clear_command}' resets the conversation, Ctrl+D exits.",
        style="dim",
        markup=False,
    )
    try:
        session.run()
    except KeyboardInterrupt:
        # interrupted mid-turn; the turn was already rolled back
        console.print()


@cli.command("build-demo")
@_model_options
def build_demo(
    provider: str | None,
    model: str | None,
    debug: bool,
    log_file: Path | None,
) -> None:
    """Run the software-build scenario with approval at every stage."""
    from toolgate.cli.wiring import build_session

    _setup_logging(debug, log_file)

    overrides: dict[str, Any] = {
        "plugins": ["SoftwareBuilder"],
        "temperature": 0.0,
        "approval": {"mode": "interactive"},
    }
    if provider:
        overrides["provider"] = provider
    if model:
        overrides["model"] = model

    console = Console(highlight=False)
    try:
        config, env = _load(overrides)
        require_credentials(config, env)
        session = build_session(config, env, console)
    except STARTUP_ERRORS as e:
        _fail(e)

    try:
        result = session.send(BUILD_DEMO_PROMPT)
    except ToolgateAIError as e:
        click.echo(f"Error invoking chat completion: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print()
        return

    from toolgate.cli.chat_session import message_text

    console.print(f"\n{message_text(result)}", markup=False)


@cli.command()
@click.option(
    "--plugin",
    "plugins",
    multiple=True,
    type=click.Choice(list(PLUGIN_NAMES)),
    help="Only list this plugin (repeatable)",
)
def tools(plugins: tuple[str, ...]) -> None:
    """List the functions the model can call."""
    from toolgate.cli.wiring import build_registry

    overrides: dict[str, Any] = {"plugins": list(plugins)} if plugins else {}
    try:
        config, env = _load(overrides)
        registry = build_registry(config, env, strict=False)
    except STARTUP_ERRORS as e:
        _fail(e)

    table = Table(title=f"Functions ({len(registry)})")
    table.add_column("Function", style="cyan", no_wrap=True)
    table.add_column("Parameters")
    table.add_column("Description")

    for descriptor in registry:
        params = ", ".join(
            f"{p.name}: {p.type}" + ("" if p.required else "?") for p in descriptor.parameters
        )
        table.add_row(descriptor.qualified_name, params or "-", descriptor.description)

    Console().print(table)


def main() -> None:
    """Main entry point for toolgate CLI."""
    cli()


if __name__ == "__main__":
    main()
