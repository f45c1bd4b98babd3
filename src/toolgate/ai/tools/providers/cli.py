"""Console approval provider for terminal sessions."""

from __future__ import annotations

import logging
import select
import sys
from collections.abc import Callable, Mapping
from typing import IO, TYPE_CHECKING, Any

from rich.console import Console

if TYPE_CHECKING:
    from toolgate.ai.tools.base import CapabilityDescriptor

logger = logging.getLogger(__name__)

APPROVAL_TOKEN = "yes"


class ConsoleApprovalProvider:
    """Interactive approval provider asking yes/no on the console.

    Prints the function name, its plugin and its arguments, then blocks for
    one line of input. Only ``yes`` (any case, surrounding whitespace
    ignored) approves; any other answer, an empty line or EOF denies. There
    is no re-prompting.

    Example:
        >>> from toolgate.ai.tools import ToolInvoker
        >>> invoker = ToolInvoker(ConsoleApprovalProvider())
    """

    def __init__(
        self,
        *,
        console: Console | None = None,
        input_func: Callable[[], str] | None = None,
        timeout: float | None = None,
        stream: IO[str] | None = None,
        show_arguments: bool = True,
    ):
        """Initialize console approval provider.

        Args:
            console: Rich console for output (default: new Console)
            input_func: Reads one line of input (default: builtins.input).
                Only used without a timeout.
            timeout: Seconds to wait for an answer; no answer denies.
                None waits forever.
            stream: Stream read when a timeout is set (default: sys.stdin)
            show_arguments: Whether to display argument values
        """
        self.console = console or Console(highlight=False, emoji=False)
        self.input_func = input_func
        self.timeout = timeout
        self.stream = stream
        self.show_arguments = show_arguments

    def decide(
        self,
        descriptor: CapabilityDescriptor,
        arguments: Mapping[str, Any],
    ) -> bool:
        """Show the invocation and read the user's decision."""
        self._render(descriptor, arguments)

        answer = self._read_answer()
        if answer is None:
            logger.info(f"No approval answer for {descriptor.qualified_name}; denied")
            return False

        approved = is_approval(answer)
        logger.debug(
            f"Approval for {descriptor.qualified_name}: "
            f"{'approved' if approved else 'denied'} ({answer!r})"
        )
        return approved

    def _render(self, descriptor: CapabilityDescriptor, arguments: Mapping[str, Any]) -> None:
        out = self.console
        out.print("====================", markup=False, emoji=False)
        out.print(f"Function name: {descriptor.name}", markup=False, emoji=False)
        out.print(f"Plugin name: {descriptor.plugin_name or 'N/A'}", markup=False, emoji=False)

        if not arguments or not self.show_arguments:
            out.print("\nArguments: N/A", markup=False, emoji=False)
        else:
            out.print("\nArguments:", markup=False, emoji=False)
            for key, value in arguments.items():
                out.print(f"{key}: {value}", markup=False, emoji=False)

        out.print("\nApprove invocation? (yes/no)", markup=False, emoji=False)

    def _read_answer(self) -> str | None:
        """Read one line; None on EOF, interrupt or timeout."""
        if self.timeout is not None:
            return self._read_with_timeout(self.timeout)

        read = self.input_func or input
        try:
            return read()
        except (EOFError, KeyboardInterrupt):
            return None

    def _read_with_timeout(self, timeout: float) -> str | None:
        stream = self.stream or sys.stdin
        ready, _, _ = select.select([stream], [], [], timeout)
        if not ready:
            self.console.print(
                f"[yellow]No answer within {timeout:g}s - denied[/yellow]"
            )
            return None
        line = stream.readline()
        # readline() returns "" only at EOF
        return line or None


def is_approval(answer: str) -> bool:
    """Return True only for the approval token, ignoring case and whitespace."""
    return answer.strip().lower() == APPROVAL_TOKEN
