"""Audit logging for capability invocations.

Records approval decisions, results and failures as structured events.
Backends implement the AuditLogger protocol.

Example (default file logger):
    >>> from toolgate.ai.tools.audit import FileAuditLogger, AuditEvent
    >>> from pathlib import Path
    >>> logger = FileAuditLogger(Path.home() / ".toolgate" / "audit.jsonl")
    >>> logger.log_event(
    ...     AuditEvent(
    ...         event_type="approval",
    ...         tool_name="Lights-change_state",
    ...         arguments={"id": 1},
    ...         decision=True,
    ...     )
    ... )
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal, Protocol

__all__ = [
    "AuditEvent",
    "AuditLogger",
    "FileAuditLogger",
]


@dataclass
class AuditEvent:
    """Structured audit event for one step of an invocation.

    Attributes:
        event_type: Type of event (request/approval/denial/result/error)
        tool_name: Qualified function name of the capability
        arguments: Arguments the model supplied
        timestamp: Event timestamp (UTC)
        call_id: Tool call id assigned by the model
        decision: Approval decision (True=approved, False=denied, None=n/a)
        result: Rendered capability result
        duration_ms: Execution duration in milliseconds
        error: Error message if execution failed
    """

    event_type: Literal["request", "approval", "denial", "result", "error"]
    tool_name: str
    arguments: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    call_id: str | None = None
    decision: bool | None = None
    result: str | None = None
    duration_ms: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert event to a dictionary with an ISO 8601 timestamp."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class AuditLogger(Protocol):
    """Protocol for pluggable audit logging backends."""

    def log_event(self, event: AuditEvent) -> None:
        """Log an audit event.

        Implementations must not raise: a failed audit write never stops an
        invocation.
        """
        ...


class FileAuditLogger:
    """File-based audit logger using JSONL format.

    Appends one JSON object per line, creating the parent directory on first
    write.
    """

    def __init__(self, log_file: Path | str) -> None:
        self.log_file = Path(log_file)

    def log_event(self, event: AuditEvent) -> None:
        """Append event to the log file; errors go to stderr."""
        try:
            line = json.dumps(event.to_dict(), default=str)
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with self.log_file.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except (OSError, TypeError, ValueError) as e:
            print(f"Audit logging error: {e}", file=sys.stderr)
