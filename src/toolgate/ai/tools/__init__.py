"""Capability registry and function-invocation approval gate.

Every function call the model proposes is resolved against a
``CapabilityRegistry`` and then run through a ``ToolInvoker``: a chain of
middlewares that includes the approval gate. A capability only runs after an
``ApprovalProvider`` has said yes; otherwise the call is answered with a
rejection and the capability never executes.

Architecture:
- Registry: explicit object built at startup, read-only afterwards
- Protocol-based extension points: ApprovalProvider, AuditLogger
- Middleware chain: ``(request, call_next) -> outcome``, gate included

Example:
    >>> from toolgate.ai.tools import CapabilityRegistry, ToolInvoker
    >>> from toolgate.ai.tools.providers import ConsoleApprovalProvider
    >>>
    >>> registry = CapabilityRegistry()
    >>> registry.register_plugin(LightsPlugin())
    >>> invoker = ToolInvoker(ConsoleApprovalProvider())
    >>> outcome = invoker.invoke(registry.create_request("Lights-get_lights"))
"""

from toolgate.ai.tools.approval import (
    REJECTION_REASON,
    ApprovalProvider,
    Executed,
    InvocationOutcome,
    InvocationRequest,
    Rejected,
)
from toolgate.ai.tools.audit import AuditEvent, AuditLogger, FileAuditLogger
from toolgate.ai.tools.base import CapabilityDescriptor, ParameterSpec, qualify_name
from toolgate.ai.tools.exceptions import (
    CapabilityExecutionError,
    DuplicateCapabilityError,
    ToolError,
    ToolExecutionError,
    UnknownCapabilityError,
)
from toolgate.ai.tools.invocation import (
    ToolInvoker,
    approval_gate,
    audit_approvals,
    audit_invocations,
    build_chain,
    execute_capability,
    log_invocations,
)
from toolgate.ai.tools.registry import CapabilityRegistry, Plugin

__all__ = [
    "REJECTION_REASON",
    "ApprovalProvider",
    "AuditEvent",
    "AuditLogger",
    "CapabilityDescriptor",
    "CapabilityExecutionError",
    "CapabilityRegistry",
    "DuplicateCapabilityError",
    "Executed",
    "FileAuditLogger",
    "InvocationOutcome",
    "InvocationRequest",
    "ParameterSpec",
    "Plugin",
    "Rejected",
    "ToolError",
    "ToolExecutionError",
    "ToolInvoker",
    "UnknownCapabilityError",
    "approval_gate",
    "audit_approvals",
    "audit_invocations",
    "build_chain",
    "execute_capability",
    "log_invocations",
    "qualify_name",
]
