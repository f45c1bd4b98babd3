"""Pytest configuration and shared fixtures for toolgate tests."""

from __future__ import annotations

import io
from collections.abc import Callable, Mapping
from typing import Any

import pytest
from langchain_core.language_models.fake_chat_models import FakeMessagesListChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.tools import tool
from rich.console import Console

from toolgate.ai.tools.registry import CapabilityRegistry
from toolgate.config.models import ToolgateConfig


class RecordingProvider:
    """Approval provider returning a fixed answer and recording every call."""

    def __init__(self, answer: bool, on_decide: Callable[[], None] | None = None):
        self.answer = answer
        self.on_decide = on_decide
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def decide(self, descriptor: Any, arguments: Mapping[str, Any]) -> bool:
        self.calls.append((descriptor.qualified_name, dict(arguments)))
        if self.on_decide is not None:
            self.on_decide()
        return self.answer


class ToolCallingFakeModel(FakeMessagesListChatModel):
    """Scripted chat model that accepts bind_tools and records what it saw."""

    bound_tools: list[Any] = []
    seen: list[list[BaseMessage]] = []

    def bind_tools(self, tools: Any, **kwargs: Any) -> ToolCallingFakeModel:
        self.bound_tools = list(tools)
        return self

    def invoke(self, input: Any, config: Any = None, **kwargs: Any) -> BaseMessage:
        self.seen = [*self.seen, list(input)]
        return super().invoke(input, config, **kwargs)


@pytest.fixture
def recording_provider() -> Callable[..., RecordingProvider]:
    """Factory for approval providers with a fixed answer."""
    return RecordingProvider


@pytest.fixture
def math_calls() -> list[tuple[int, int]]:
    """Arguments the ``add`` capability was actually run with."""
    return []


@pytest.fixture
def math_registry(math_calls: list[tuple[int, int]]) -> CapabilityRegistry:
    """Registry with a single ``add`` capability in the ``Math`` namespace."""

    @tool
    def add(a: int, b: int) -> int:
        """Add two numbers."""
        math_calls.append((a, b))
        return a + b

    registry = CapabilityRegistry()
    registry.register(add, plugin_name="Math")
    return registry


@pytest.fixture
def fake_model() -> Callable[[list[AIMessage]], ToolCallingFakeModel]:
    """Factory for a chat model that replies with the given messages in order."""

    def make(responses: list[AIMessage]) -> ToolCallingFakeModel:
        return ToolCallingFakeModel(responses=responses)

    return make


@pytest.fixture
def console_output() -> tuple[Console, io.StringIO]:
    """Rich console writing plain text to a buffer."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, highlight=False, color_system=None)
    return console, buffer


@pytest.fixture
def config() -> ToolgateConfig:
    """Default configuration with only the mock plugins enabled."""
    return ToolgateConfig(plugins=["Lights", "SoftwareBuilder"])


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's credentials and overrides out of every test."""
    from toolgate.config.env import API_KEY_ENV_VARS, ENDPOINT_ENV_VARS

    for name in (
        *API_KEY_ENV_VARS,
        *ENDPOINT_ENV_VARS,
        "FITNESS_API_TOKEN",
        "KEEP_API_TOKEN",
        "TOOLGATE_PROVIDER",
        "TOOLGATE_MODEL",
        "TOOLGATE_TEMPERATURE",
        "TOOLGATE_APPROVAL_MODE",
        "TOOLGATE_APPROVAL_TIMEOUT",
        "TOOLGATE_AUDIT_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
