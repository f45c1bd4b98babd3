"""Custom exceptions for chat model initialization and calls.

This module defines exception classes for errors raised while building the
LangChain chat model and while talking to the hosted LLM service.
"""

from __future__ import annotations


class ProviderInitializationError(Exception):
    """Base exception for chat model initialization errors.

    Raised when the model cannot be built because of invalid configuration,
    missing credentials, or unavailable dependencies.
    """


class MissingDependencyError(ProviderInitializationError):
    """Exception raised when the LangChain provider package is not installed."""


class ToolgateAIError(Exception):
    """Base exception for errors during a conversation with the model."""


class UpstreamServiceError(ToolgateAIError):
    """Exception raised when the LLM service call fails.

    The agent loop catches this at the turn boundary: the turn is abandoned
    and the session waits for the next line of user input.
    """


class ToolRoundLimitError(ToolgateAIError):
    """Exception raised when one user turn exceeds the function-call round limit."""
