"""Chat model integration and the capability system.

Builds the LangChain chat model for the configured provider and hosts the
capability registry, approval gate and plugins under ``toolgate.ai.tools``.
"""

from toolgate.ai.exceptions import (
    MissingDependencyError,
    ProviderInitializationError,
    ToolgateAIError,
    ToolRoundLimitError,
    UpstreamServiceError,
)

__all__ = [
    "MissingDependencyError",
    "ProviderInitializationError",
    "ToolgateAIError",
    "ToolRoundLimitError",
    "UpstreamServiceError",
]
