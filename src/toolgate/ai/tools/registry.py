"""Capability registry for LangChain tools.

Provides registration of tools under optional plugin namespaces, lookup by
name or by the qualified function name the model sees, and binding of the
registered capabilities to a LangChain chat model.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Protocol

from langchain_core.utils.function_calling import convert_to_openai_tool

from toolgate.ai.tools.approval import InvocationRequest
from toolgate.ai.tools.base import (
    CapabilityDescriptor,
    describe_parameters,
    get_tool_schema,
)
from toolgate.ai.tools.exceptions import (
    DuplicateCapabilityError,
    UnknownCapabilityError,
)

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel
    from langchain_core.runnables import Runnable
    from langchain_core.tools import BaseTool


class Plugin(Protocol):
    """A group of tools registered under one namespace."""

    name: str

    def as_tools(self) -> list[BaseTool]:
        """Return the plugin's LangChain tools."""
        ...


class CapabilityRegistry:
    """Registry of the capabilities an agent may call.

    Written once while the session is being built, then only read. One
    registry belongs to one session; nothing is shared through module state.

    Example:
        >>> from langchain_core.tools import tool
        >>>
        >>> @tool
        ... def add(a: int, b: int) -> int:
        ...     '''Add two numbers.'''
        ...     return a + b
        >>>
        >>> registry = CapabilityRegistry()
        >>> registry.register(add, plugin_name="Math")
        >>> registry.resolve("add", "Math").qualified_name
        'Math-add'
    """

    def __init__(self) -> None:
        self._capabilities: dict[tuple[str | None, str], CapabilityDescriptor] = {}
        self._by_function_name: dict[str, CapabilityDescriptor] = {}

    def register(
        self,
        tool: BaseTool,
        plugin_name: str | None = None,
    ) -> CapabilityDescriptor:
        """Register a LangChain tool.

        Args:
            tool: LangChain BaseTool instance (decorated with @tool)
            plugin_name: Optional namespace the tool belongs to

        Returns:
            The descriptor stored for the tool

        Raises:
            DuplicateCapabilityError: If the name is taken in that namespace
            ValueError: If the tool or plugin name is not a valid identifier
        """
        key = (plugin_name, tool.name)
        if key in self._capabilities:
            namespace = plugin_name or "<global>"
            raise DuplicateCapabilityError(
                f"Capability '{tool.name}' is already registered in namespace "
                f"'{namespace}'"
            )

        schema = get_tool_schema(tool)
        descriptor = CapabilityDescriptor(
            name=tool.name,
            description=tool.description or "",
            tool=tool,
            plugin_name=plugin_name,
            parameters=describe_parameters(schema),
            schema=schema,
        )

        self._capabilities[key] = descriptor
        self._by_function_name[descriptor.qualified_name] = descriptor
        return descriptor

    def register_plugin(self, plugin: Plugin) -> list[CapabilityDescriptor]:
        """Register every tool a plugin exposes under the plugin's name."""
        return [self.register(tool, plugin_name=plugin.name) for tool in plugin.as_tools()]

    def resolve(self, name: str, plugin_name: str | None = None) -> CapabilityDescriptor:
        """Look up a capability by name within a namespace.

        Raises:
            UnknownCapabilityError: If nothing is registered under that key
        """
        try:
            return self._capabilities[(plugin_name, name)]
        except KeyError:
            where = f" in plugin '{plugin_name}'" if plugin_name else ""
            raise UnknownCapabilityError(
                f"Capability '{name}'{where} is not registered. "
                f"Available: {self._available()}",
                name=name,
            ) from None

    def find(self, function_name: str) -> CapabilityDescriptor:
        """Look up a capability by the qualified function name the model used.

        Raises:
            UnknownCapabilityError: If no capability has that function name
        """
        try:
            return self._by_function_name[function_name]
        except KeyError:
            raise UnknownCapabilityError(
                f"Function '{function_name}' is not registered. "
                f"Available: {self._available()}",
                name=function_name,
            ) from None

    def create_request(
        self,
        function_name: str,
        arguments: Mapping[str, Any] | None = None,
        call_id: str | None = None,
    ) -> InvocationRequest:
        """Build an invocation request for a function call proposed by the model.

        Raises:
            UnknownCapabilityError: Before any approval is asked for
        """
        descriptor = self.find(function_name)
        return InvocationRequest(
            descriptor=descriptor,
            arguments=dict(arguments or {}),
            call_id=call_id,
        )

    def list_capabilities(self, plugin_name: str | None = None) -> list[CapabilityDescriptor]:
        """List registered capabilities in registration order.

        Args:
            plugin_name: Only return capabilities of this plugin
        """
        descriptors = list(self._capabilities.values())
        if plugin_name is not None:
            descriptors = [d for d in descriptors if d.plugin_name == plugin_name]
        return descriptors

    def function_specs(self) -> list[dict[str, Any]]:
        """OpenAI-style function specs for every capability, using qualified names."""
        specs = []
        for descriptor in self._capabilities.values():
            spec = convert_to_openai_tool(descriptor.tool)
            spec["function"]["name"] = descriptor.qualified_name
            specs.append(spec)
        return specs

    def bind_to_model(self, model: BaseChatModel) -> Runnable[Any, Any]:
        """Bind all registered capabilities to a LangChain chat model.

        Returns the model unchanged when nothing is registered.
        """
        if not self._capabilities:
            return model
        return model.bind_tools(self.function_specs())

    def _available(self) -> str:
        return ", ".join(self._by_function_name) or "none"

    def __iter__(self) -> Iterator[CapabilityDescriptor]:
        return iter(self._capabilities.values())

    def __len__(self) -> int:
        """Return number of registered capabilities."""
        return len(self._capabilities)

    def __contains__(self, function_name: object) -> bool:
        """Check if a qualified function name is registered."""
        return function_name in self._by_function_name

    def __repr__(self) -> str:
        plugins = sorted({d.plugin_name or "<global>" for d in self._capabilities.values()})
        return f"CapabilityRegistry(capabilities={len(self)}, plugins={plugins})"
