"""Invocation middleware chain with the approval gate.

Every capability call goes through one entry point built from an ordered list
of middlewares. A middleware receives the request and a ``call_next``
continuation; it decides whether and when to continue. The innermost handler
actually runs the capability.

The approval gate is one such middleware: it asks the ApprovalProvider and
only calls ``call_next`` when the answer is yes. Middlewares placed before it
see every request; middlewares placed after it only see approved ones.

Example:
    >>> from toolgate.ai.tools.providers import AlwaysDenyProvider
    >>> invoker = ToolInvoker(AlwaysDenyProvider())
    >>> outcome = invoker.invoke(registry.create_request("Math-add", {"a": 2, "b": 3}))
    >>> outcome
    Rejected(reason='Operation was rejected.')
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from toolgate.ai.tools.approval import (
    REJECTION_REASON,
    Executed,
    InvocationOutcome,
    InvocationRequest,
    Rejected,
)
from toolgate.ai.tools.audit import AuditEvent
from toolgate.ai.tools.exceptions import CapabilityExecutionError

if TYPE_CHECKING:
    from toolgate.ai.tools.approval import ApprovalProvider
    from toolgate.ai.tools.audit import AuditLogger

logger = logging.getLogger(__name__)

Handler = Callable[[InvocationRequest], InvocationOutcome]
Middleware = Callable[[InvocationRequest, Handler], InvocationOutcome]


def execute_capability(request: InvocationRequest) -> InvocationOutcome:
    """Run the capability once and wrap its return value.

    An exception from the implementation does not propagate: it is wrapped
    in ``CapabilityExecutionError`` and returned as a failed ``Executed``.
    """
    descriptor = request.descriptor
    try:
        result = descriptor.tool.invoke(dict(request.arguments))
    except Exception as e:
        error = CapabilityExecutionError(
            f"Function {descriptor.qualified_name} failed: {e}",
            capability=descriptor.qualified_name,
        )
        error.__cause__ = e
        return Executed(None, error=error)
    return Executed(result)


def build_chain(middlewares: Sequence[Middleware], terminal: Handler) -> Handler:
    """Compose middlewares around a terminal handler.

    The first middleware is the outermost one.
    """
    handler = terminal
    for middleware in reversed(middlewares):
        handler = _bind(middleware, handler)
    return handler


def _bind(middleware: Middleware, call_next: Handler) -> Handler:
    def handler(request: InvocationRequest) -> InvocationOutcome:
        return middleware(request, call_next)

    return handler


def approval_gate(provider: ApprovalProvider) -> Middleware:
    """Middleware that only continues when the provider approves.

    The provider's decision is awaited before anything further down the chain
    starts; a denial short-circuits with ``Rejected``.
    """

    def gate(request: InvocationRequest, call_next: Handler) -> InvocationOutcome:
        if provider.decide(request.descriptor, request.arguments):
            return call_next(request)
        return Rejected(REJECTION_REASON)

    return gate


def log_invocations(request: InvocationRequest, call_next: Handler) -> InvocationOutcome:
    """Middleware logging each invocation and its outcome."""
    logger.debug(f"Invoking {request.function_name} with {dict(request.arguments)}")
    outcome = call_next(request)
    if isinstance(outcome, Rejected):
        logger.info(f"{request.function_name} rejected: {outcome.reason}")
    elif outcome.failed:
        logger.warning(f"{request.function_name} failed: {_failure_text(outcome)}")
    else:
        logger.debug(f"{request.function_name} returned {outcome.to_text()[:200]}")
    return outcome


def audit_invocations(audit_logger: AuditLogger) -> Middleware:
    """Middleware recording request, denial, result and error audit events.

    Place it outside the approval gate so denials are recorded too.
    """

    def audit(request: InvocationRequest, call_next: Handler) -> InvocationOutcome:
        name = request.function_name
        arguments = dict(request.arguments)
        audit_logger.log_event(
            AuditEvent(
                event_type="request",
                tool_name=name,
                arguments=arguments,
                call_id=request.call_id,
            )
        )

        started = time.monotonic()
        outcome = call_next(request)

        if isinstance(outcome, Rejected):
            audit_logger.log_event(
                AuditEvent(
                    event_type="denial",
                    tool_name=name,
                    arguments=arguments,
                    call_id=request.call_id,
                    decision=False,
                    result=outcome.reason,
                )
            )
        elif outcome.failed:
            audit_logger.log_event(
                AuditEvent(
                    event_type="error",
                    tool_name=name,
                    arguments=arguments,
                    call_id=request.call_id,
                    decision=True,
                    duration_ms=_elapsed_ms(started),
                    error=_failure_text(outcome),
                )
            )
        else:
            audit_logger.log_event(
                AuditEvent(
                    event_type="result",
                    tool_name=name,
                    arguments=arguments,
                    call_id=request.call_id,
                    decision=True,
                    result=outcome.to_text(),
                    duration_ms=_elapsed_ms(started),
                )
            )
        return outcome

    return audit


def audit_approvals(audit_logger: AuditLogger) -> Middleware:
    """Middleware recording an approval event before the capability runs.

    Place it directly after the approval gate; it only sees approved requests.
    """

    def audit(request: InvocationRequest, call_next: Handler) -> InvocationOutcome:
        audit_logger.log_event(
            AuditEvent(
                event_type="approval",
                tool_name=request.function_name,
                arguments=dict(request.arguments),
                call_id=request.call_id,
                decision=True,
            )
        )
        return call_next(request)

    return audit


def _failure_text(outcome: Executed) -> str:
    error = outcome.error
    return str(error.__cause__ or error) if error is not None else ""


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class ToolInvoker:
    """Single chokepoint for running capabilities.

    Composes the middleware chain once at construction. By default the chain
    is ``[log_invocations, approval_gate(provider)]``; with an audit logger,
    an audit middleware sits between the two and another records approvals
    right after the gate. ``before_gate`` and ``after_gate`` let
    callers interpose their own middlewares on either side of the gate.

    Attributes:
        provider: The approval policy consulted for every request
    """

    def __init__(
        self,
        provider: ApprovalProvider,
        *,
        audit_logger: AuditLogger | None = None,
        before_gate: Sequence[Middleware] = (),
        after_gate: Sequence[Middleware] = (),
        terminal: Handler = execute_capability,
    ) -> None:
        self.provider = provider
        middlewares: list[Middleware] = [log_invocations]
        if audit_logger is not None:
            middlewares.append(audit_invocations(audit_logger))
        middlewares.extend(before_gate)
        middlewares.append(approval_gate(provider))
        if audit_logger is not None:
            middlewares.append(audit_approvals(audit_logger))
        middlewares.extend(after_gate)
        self._middlewares = tuple(middlewares)
        self._handler = build_chain(self._middlewares, terminal)

    @property
    def middlewares(self) -> tuple[Middleware, ...]:
        """The composed middlewares, outermost first."""
        return self._middlewares

    def invoke(self, request: InvocationRequest) -> InvocationOutcome:
        """Run a request through the chain.

        Returns:
            ``Executed`` if the capability ran (failed or not), ``Rejected``
            if it did not
        """
        return self._handler(request)
