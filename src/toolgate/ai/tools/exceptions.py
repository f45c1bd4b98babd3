"""Exceptions raised by the capability registry, invoker and plugins."""

from __future__ import annotations


class ToolError(Exception):
    """Base exception for capability registration and invocation errors."""


class DuplicateCapabilityError(ToolError):
    """Raised when a capability name is already registered in a namespace."""


class UnknownCapabilityError(ToolError):
    """Raised when a requested capability is not registered.

    Attributes:
        name: The name (or qualified function name) that was requested.
    """

    def __init__(self, message: str, name: str = ""):
        super().__init__(message)
        self.name = name


class CapabilityExecutionError(ToolError):
    """An approved capability failed while running.

    Not raised by the invoker: it is carried by a failed ``Executed`` outcome.
    The original exception is chained as ``__cause__``.

    Attributes:
        capability: Qualified function name of the capability that failed.
    """

    def __init__(self, message: str, capability: str = ""):
        super().__init__(message)
        self.capability = capability


class ToolExecutionError(ToolError):
    """Raised by plugin implementations for described failures.

    Examples are malformed ISO-8601 time ranges or a non-success HTTP
    response from an upstream API.
    """
