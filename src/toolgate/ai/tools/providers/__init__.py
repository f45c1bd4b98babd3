"""Approval provider implementations.

- ConsoleApprovalProvider: interactive yes/no prompt on the console
- PolicyBasedApprovalProvider: allow/deny lists and argument rules
- AlwaysApproveProvider / AlwaysDenyProvider: fixed answers
"""

from toolgate.ai.tools.providers.cli import ConsoleApprovalProvider
from toolgate.ai.tools.providers.policy import ArgumentRule, PolicyBasedApprovalProvider
from toolgate.ai.tools.providers.static import AlwaysApproveProvider, AlwaysDenyProvider

__all__ = [
    "AlwaysApproveProvider",
    "AlwaysDenyProvider",
    "ArgumentRule",
    "ConsoleApprovalProvider",
    "PolicyBasedApprovalProvider",
]
