"""Pydantic configuration models for toolgate.

This module provides strongly-typed configuration models using Pydantic v2.
Secrets never live here; they are read from the environment by
``toolgate.config.env``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from toolgate.ai.tools.providers.policy import ArgumentRule

PLUGIN_NAMES = ("Lights", "SoftwareBuilder", "GoogleFitness", "GoogleKeep")


class Provider(str, Enum):
    """Hosted LLM provider enumeration."""

    AZURE_OPENAI = "azure_openai"
    OPENAI = "openai"


class ApprovalConfig(BaseModel):
    """How function calls proposed by the model are approved.

    Modes:
    - ``interactive``: ask on the console for every call
    - ``policy``: decide from ``allow``, ``deny`` and ``rules`` without asking
    - ``allow``: approve everything (testing only)
    - ``deny``: reject everything
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    mode: Literal["interactive", "policy", "allow", "deny"] = Field(
        default="interactive",
        description="Approval mode: 'interactive', 'policy', 'allow' or 'deny'",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds to wait for an interactive answer before denying (None = wait forever)",
    )
    allow: list[str] = Field(
        default_factory=list,
        description="Capabilities approved in policy mode, e.g. 'Lights-get_lights' or 'Lights-*'",
    )
    deny: list[str] = Field(
        default_factory=list,
        description="Capabilities always rejected in policy mode",
    )
    rules: list[ArgumentRule] = Field(
        default_factory=list,
        description="Ordered argument rules evaluated in policy mode",
    )
    show_arguments: bool = Field(
        default=True,
        description="Display argument values in the interactive prompt",
    )

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        """Warn when every call would run without confirmation."""
        if v == "allow":
            import warnings

            warnings.warn(
                "approval mode 'allow' runs every function call without confirmation. "
                "Use it only for testing.",
                UserWarning,
                stacklevel=2,
            )
        return v


class AuditConfig(BaseModel):
    """Audit logging of function invocations."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    enabled: bool = Field(
        default=True,
        description="Record requests, denials, results and errors",
    )
    log_file: Path = Field(
        default=Path.home() / ".toolgate" / "audit.jsonl",
        description="Path to audit log file in JSONL format (one JSON event per line)",
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        """Expand user path and convert to Path object."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return Path(v) if not isinstance(v, Path) else v


class ServiceConfig(BaseModel):
    """Settings shared by the REST-backed plugins."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    base_url: str = Field(description="REST API base URL")
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )


class FitnessConfig(ServiceConfig):
    """Google Fitness plugin settings."""

    base_url: str = Field(
        default="https://www.googleapis.com/fitness/v1/users/me",
        description="Fitness REST API base URL",
    )
    heart_rate_bucket_seconds: int = Field(
        default=60,
        gt=0,
        description="Bucket width for heart rate samples",
    )


class NotesConfig(ServiceConfig):
    """Google Keep plugin settings."""

    base_url: str = Field(
        default="https://keep.googleapis.com/v1",
        description="Keep REST API base URL",
    )
    max_pages: int = Field(
        default=10,
        gt=0,
        description="Maximum number of result pages fetched per call",
    )


class ToolgateConfig(BaseModel):
    """Root configuration for the toolgate console agent."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    provider: Provider = Field(
        default=Provider.AZURE_OPENAI,
        description="Hosted LLM provider",
    )
    model: str = Field(
        default="gpt-4",
        description="Model name (the deployment name for Azure OpenAI)",
    )
    api_version: str = Field(
        default="2024-06-01",
        description="Azure OpenAI API version",
    )
    temperature: float | None = Field(
        default=None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (None = provider default)",
    )
    agent_name: str = Field(
        default="Main-Assistant",
        description="Agent name shown in console output",
    )
    instructions: str = Field(
        default="Respond to user questions as an assistant",
        description="System instructions given to the model",
    )
    clear_command: str = Field(
        default="clear-context",
        description="Input line that resets the conversation (case-insensitive)",
    )
    max_tool_rounds: int = Field(
        default=128,
        gt=0,
        description="Maximum model/function-call cycles per user turn",
    )
    plugins: list[str] = Field(
        default_factory=lambda: list(PLUGIN_NAMES),
        description="Enabled plugins",
    )
    approval: ApprovalConfig = Field(default_factory=ApprovalConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    fitness: FitnessConfig = Field(default_factory=FitnessConfig)
    notes: NotesConfig = Field(default_factory=NotesConfig)

    @field_validator("model", "agent_name", "clear_command")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate required names are not blank."""
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_plugins(self) -> ToolgateConfig:
        """Validate that every enabled plugin exists."""
        unknown = [name for name in self.plugins if name not in PLUGIN_NAMES]
        if unknown:
            raise ValueError(
                f"Unknown plugin(s): {', '.join(unknown)}. "
                f"Available plugins: {', '.join(PLUGIN_NAMES)}"
            )
        return self
