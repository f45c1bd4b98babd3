"""Configuration management for toolgate.

Layered YAML configuration validated by Pydantic models, plus secrets read
from the environment.
"""

from toolgate.config.env import (
    ConfigurationError,
    EnvSettings,
    MissingCredentialError,
    load_env_settings,
    require_credentials,
)
from toolgate.config.loader import load_config
from toolgate.config.models import (
    PLUGIN_NAMES,
    ApprovalConfig,
    AuditConfig,
    FitnessConfig,
    NotesConfig,
    Provider,
    ToolgateConfig,
)

__all__ = [
    "PLUGIN_NAMES",
    "ApprovalConfig",
    "AuditConfig",
    "ConfigurationError",
    "EnvSettings",
    "FitnessConfig",
    "MissingCredentialError",
    "NotesConfig",
    "Provider",
    "ToolgateConfig",
    "load_config",
    "load_env_settings",
    "require_credentials",
]
