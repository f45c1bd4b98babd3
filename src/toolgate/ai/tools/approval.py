"""Approval protocol and invocation data types.

An ``InvocationRequest`` is built by the agent loop for every function call
the model proposes. An ``ApprovalProvider`` decides whether it may run, and the
invoker answers with exactly one ``InvocationOutcome``: ``Executed`` when the
capability ran, ``Rejected`` when it did not.

Example:
    >>> class ReadOnlyProvider:
    ...     def decide(self, descriptor, arguments):
    ...         return descriptor.name.startswith("get_")
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

from pydantic import BaseModel

from toolgate.ai.tools.exceptions import CapabilityExecutionError

if TYPE_CHECKING:
    from toolgate.ai.tools.base import CapabilityDescriptor

__all__ = [
    "REJECTION_REASON",
    "ApprovalProvider",
    "Executed",
    "InvocationOutcome",
    "InvocationRequest",
    "Rejected",
    "render_result",
]

REJECTION_REASON = "Operation was rejected."


@dataclass(frozen=True)
class InvocationRequest:
    """One concrete attempt to run a capability.

    Attributes:
        descriptor: Registered capability being invoked
        arguments: Argument values by parameter name, in the order the
            model sent them
        call_id: Tool call id assigned by the model, if any
    """

    descriptor: CapabilityDescriptor
    arguments: Mapping[str, Any] = field(default_factory=dict)
    call_id: str | None = None

    @property
    def function_name(self) -> str:
        """Qualified function name of the capability."""
        return self.descriptor.qualified_name


@dataclass(frozen=True)
class Executed:
    """The capability ran once.

    ``result`` is what it returned. When it raised instead, ``result`` is
    None and ``error`` holds the failure; the request still counts as
    executed.
    """

    result: Any
    error: CapabilityExecutionError | None = None

    @property
    def failed(self) -> bool:
        """Whether the capability raised instead of returning."""
        return self.error is not None

    def to_text(self) -> str:
        """Render the result (or the failure) for a tool message."""
        if self.error is not None:
            return str(self.error)
        return render_result(self.result)


@dataclass(frozen=True)
class Rejected:
    """The capability was not run."""

    reason: str = REJECTION_REASON

    def to_text(self) -> str:
        """Render the rejection for a tool message."""
        return self.reason


InvocationOutcome = Union[Executed, Rejected]


def render_result(result: Any) -> str:
    """Render a capability return value as text for the model.

    Strings pass through, pydantic models and containers become JSON, and
    ``None`` becomes ``null``.
    """
    if isinstance(result, str):
        return result
    return json.dumps(_to_jsonable(result), default=str)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Mapping):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


@runtime_checkable
class ApprovalProvider(Protocol):
    """Policy deciding whether an invocation may proceed.

    Implementations may block for as long as they need (an interactive
    prompt waits for the user) but must never approve while waiting. Every
    request is decided on its own; identical repeated requests are asked
    again.
    """

    def decide(
        self,
        descriptor: CapabilityDescriptor,
        arguments: Mapping[str, Any],
    ) -> bool:
        """Return True to let the invocation run, False to reject it."""
        ...
