"""Build a ready-to-run chat session from configuration.

Everything a session needs is created here, once, at startup: the chat model,
the registry with the enabled plugins, the approval provider and the invoker
chain. Nothing is kept in module state.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from toolgate.ai.providers import get_chat_model
from toolgate.ai.tools.audit import FileAuditLogger
from toolgate.ai.tools.implementations import build_plugins
from toolgate.ai.tools.invocation import ToolInvoker
from toolgate.ai.tools.providers import (
    AlwaysApproveProvider,
    AlwaysDenyProvider,
    ConsoleApprovalProvider,
    PolicyBasedApprovalProvider,
)
from toolgate.ai.tools.registry import CapabilityRegistry
from toolgate.cli.chat_session import ChatSession

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel
    from rich.console import Console

    from toolgate.ai.tools.approval import ApprovalProvider
    from toolgate.config.env import EnvSettings
    from toolgate.config.models import ApprovalConfig, ToolgateConfig

logger = logging.getLogger(__name__)


def build_approval_provider(
    approval: ApprovalConfig,
    console: Console | None = None,
) -> ApprovalProvider:
    """Create the approval provider selected by ``approval.mode``."""
    if approval.mode == "interactive":
        return ConsoleApprovalProvider(
            console=console,
            timeout=approval.timeout,
            show_arguments=approval.show_arguments,
        )
    if approval.mode == "policy":
        return PolicyBasedApprovalProvider(
            allow=approval.allow,
            deny=approval.deny,
            rules=approval.rules,
        )
    if approval.mode == "allow":
        return AlwaysApproveProvider()
    return AlwaysDenyProvider()


def build_invoker(config: ToolgateConfig, console: Console | None = None) -> ToolInvoker:
    """Create the invoker chain: logging, audit (if enabled), approval gate."""
    audit_logger = FileAuditLogger(config.audit.log_file) if config.audit.enabled else None
    return ToolInvoker(
        build_approval_provider(config.approval, console),
        audit_logger=audit_logger,
    )


def build_registry(
    config: ToolgateConfig,
    env: EnvSettings,
    console: Console | None = None,
    strict: bool = True,
) -> CapabilityRegistry:
    """Create a registry holding every enabled plugin's capabilities."""
    registry = CapabilityRegistry()
    for plugin in build_plugins(config, env, console=console, strict=strict):
        registry.register_plugin(plugin)
    logger.debug(f"Built {registry!r}")
    return registry


def build_session(
    config: ToolgateConfig,
    env: EnvSettings,
    console: Console | None = None,
    model: BaseChatModel | None = None,
) -> ChatSession:
    """Create a chat session for ``config``.

    Args:
        config: Loaded configuration
        env: Environment settings with credentials already checked
        console: Shared rich console
        model: Chat model to use instead of building one from config

    Raises:
        ProviderInitializationError: If the chat model cannot be built
    """
    if model is None:
        model = get_chat_model(config, env)
    return ChatSession(
        config,
        model,
        build_registry(config, env, console),
        build_invoker(config, console),
        console=console,
    )
