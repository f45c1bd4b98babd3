"""Layered configuration loading.

Sources, lowest precedence first:
1. Built-in defaults (``ToolgateConfig()``)
2. User file ``~/.toolgate/config.yaml``
3. Project file ``.toolgate/config.yaml``, searched upward from the working
   directory and never past the enclosing git repository
4. ``TOOLGATE_*`` environment variables
5. Command line options

Mappings are merged key by key; any other value (lists included) replaces
the lower-precedence one. The merged dictionary is validated once at the end.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from toolgate.config.env import EnvSettings, load_env_settings
from toolgate.config.models import ToolgateConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".toolgate"
CONFIG_FILE_NAME = "config.yaml"


def user_config_path() -> Path:
    """Location of the per-user config file (it may not exist)."""
    return Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def find_project_config(start: Path | None = None) -> Path | None:
    """Search ``start`` (default: cwd) and its parents for a project config.

    The search ends at the first directory holding ``.git`` or at the
    filesystem root.
    """
    directory = (start or Path.cwd()).resolve()

    for candidate in (directory, *directory.parents):
        config_path = candidate / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if config_path.exists():
            logger.debug(f"Found project config: {config_path}")
            return config_path
        if (candidate / ".git").exists():
            break

    return None


def load_yaml_config(path: Path | None) -> dict[str, Any]:
    """Read one YAML config file into a dict.

    A missing path or an empty file gives ``{}``.

    Raises:
        yaml.YAMLError: The file is not valid YAML
        ValueError: The top level is not a mapping
        OSError: The file exists but cannot be read
    """
    if path is None or not path.exists():
        return {}

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise OSError(f"Cannot read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {path} must contain a YAML mapping, got {type(data).__name__}"
        )
    return data


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override``, recursing into nested dicts.

    Neither argument is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Fold config dicts from lowest to highest precedence; empty ones are skipped."""
    merged: dict[str, Any] = {}
    for layer in configs:
        if layer:
            merged = deep_merge(merged, layer)
    return merged


def load_env_config(env_settings: EnvSettings | None = None) -> dict[str, Any]:
    """Convert TOOLGATE_* environment overrides into a config dict for merging."""
    env = env_settings if env_settings is not None else load_env_settings()

    overrides: dict[str, Any] = {}
    if env.toolgate_provider:
        overrides["provider"] = env.toolgate_provider
    if env.toolgate_model:
        overrides["model"] = env.toolgate_model
    if env.toolgate_temperature is not None:
        overrides["temperature"] = env.toolgate_temperature

    approval: dict[str, Any] = {}
    if env.toolgate_approval_mode:
        approval["mode"] = env.toolgate_approval_mode
    if env.toolgate_approval_timeout is not None:
        approval["timeout"] = env.toolgate_approval_timeout
    if approval:
        overrides["approval"] = approval

    if env.toolgate_audit_log_file:
        overrides["audit"] = {"log_file": env.toolgate_audit_log_file}

    return overrides


def create_default_config() -> dict[str, Any]:
    """The built-in defaults as a plain dict."""
    return ToolgateConfig().model_dump(mode="json")


def load_config(
    global_config_path: Path | None = None,
    project_config_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
    env_settings: EnvSettings | None = None,
) -> ToolgateConfig:
    """Build the effective configuration from every source.

    Args:
        global_config_path: User config file; looked up in ``~/.toolgate``
            when None
        project_config_path: Project config file; searched upward from the
            working directory when None
        cli_overrides: Values given on the command line
        env_settings: Already loaded environment settings

    Raises:
        yaml.YAMLError: A config file is not valid YAML
        ValidationError: The merged values do not fit ``ToolgateConfig``
    """
    if global_config_path is None:
        global_config_path = user_config_path()
    if project_config_path is None:
        project_config_path = find_project_config()

    merged = merge_configs(
        create_default_config(),
        load_yaml_config(global_config_path),
        load_yaml_config(project_config_path),
        load_env_config(env_settings),
        cli_overrides or {},
    )
    logger.debug(
        f"Config sources: user={global_config_path}, project={project_config_path}"
    )
    return ToolgateConfig.model_validate(merged)
