"""Base classes and utilities for the capability system.

Provides the immutable descriptor stored in the registry and the helpers that
derive it from a LangChain tool's argument schema.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from langchain_core.tools import BaseTool

# Separator between plugin namespace and capability name in function names
# sent to the model ("Lights-get_state").
NAMESPACE_SEPARATOR = "-"

# Plugin and capability names; keeps qualified names unambiguous and valid
# as OpenAI function names.
NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


@dataclass(frozen=True)
class ParameterSpec:
    """One parameter of a capability.

    Attributes:
        name: Parameter name as the model must send it
        type: JSON schema type name ("integer", "string", "LightState", ...)
        required: Whether the model must supply the parameter
        description: Human-readable description, empty when not documented
    """

    name: str
    type: str
    required: bool = True
    description: str = ""


@dataclass(frozen=True)
class CapabilityDescriptor:
    """Metadata for a registered capability.

    Created once when the registry is built and never mutated afterwards.

    Attributes:
        name: Capability name within its namespace
        description: Human-readable description of what the capability does
        tool: The LangChain BaseTool that implements it
        plugin_name: Optional owning plugin (namespace)
        parameters: Ordered parameter list derived from the tool schema
        schema: JSON schema for the tool arguments
    """

    name: str
    description: str
    tool: BaseTool = field(repr=False, compare=False)
    plugin_name: str | None = None
    parameters: tuple[ParameterSpec, ...] = ()
    schema: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate names after initialization."""
        if not self.name or not NAME_PATTERN.match(self.name):
            raise ValueError(
                f"Capability name {self.name!r} must match {NAME_PATTERN.pattern}"
            )
        if self.plugin_name is not None and not NAME_PATTERN.match(self.plugin_name):
            raise ValueError(
                f"Plugin name {self.plugin_name!r} must match {NAME_PATTERN.pattern}"
            )

    @property
    def qualified_name(self) -> str:
        """Function name exposed to the model."""
        return qualify_name(self.name, self.plugin_name)


def qualify_name(name: str, plugin_name: str | None = None) -> str:
    """Build the function name the model sees for a capability.

    Example:
        >>> qualify_name("get_state", "Lights")
        'Lights-get_state'
        >>> qualify_name("add")
        'add'
    """
    if plugin_name:
        return f"{plugin_name}{NAMESPACE_SEPARATOR}{name}"
    return name


def get_tool_schema(tool: BaseTool) -> dict[str, Any]:
    """Extract JSON schema from LangChain tool.

    Args:
        tool: LangChain BaseTool instance

    Returns:
        JSON schema dictionary for tool arguments
    """
    # LangChain tools have args_schema which is a Pydantic model
    if getattr(tool, "args_schema", None) is not None:
        args_schema = tool.args_schema
        if isinstance(args_schema, dict):
            return dict(args_schema)
        schema: dict[str, Any] = args_schema.model_json_schema()
        return schema

    if hasattr(tool, "get_input_schema"):
        schema = tool.get_input_schema().model_json_schema()
        return schema

    return {"type": "object", "properties": {}}


def _schema_type(prop: dict[str, Any]) -> str:
    if "$ref" in prop:
        return str(prop["$ref"]).rsplit("/", 1)[-1]
    if len(prop.get("allOf", [])) == 1:
        return _schema_type(prop["allOf"][0])
    if "type" in prop:
        if prop["type"] == "array" and isinstance(prop.get("items"), dict):
            return f"array[{_schema_type(prop['items'])}]"
        return str(prop["type"])
    if "anyOf" in prop:
        # Optional[X] shows up as anyOf [X, null]
        types = [_schema_type(option) for option in prop["anyOf"]]
        return " | ".join(t for t in types if t != "null") or "null"
    return "any"


def describe_parameters(schema: dict[str, Any]) -> tuple[ParameterSpec, ...]:
    """Turn a JSON object schema into an ordered parameter list.

    Property order follows the schema, which follows the tool signature.
    """
    required = set(schema.get("required", []))
    properties: dict[str, Any] = schema.get("properties", {})
    return tuple(
        ParameterSpec(
            name=name,
            type=_schema_type(prop),
            required=name in required,
            description=prop.get("description", ""),
        )
        for name, prop in properties.items()
    )
