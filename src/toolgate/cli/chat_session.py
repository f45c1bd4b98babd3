"""Console chat session driving the agent loop.

Reads one line of user input per turn, sends the conversation to the model
and runs every function call the model proposes through the ToolInvoker,
one at a time and in the order proposed, until the model answers without
calling a function.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)
from rich.console import Console

from toolgate.ai.exceptions import ToolgateAIError, ToolRoundLimitError, UpstreamServiceError
from toolgate.ai.tools.approval import Executed
from toolgate.ai.tools.exceptions import UnknownCapabilityError

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel

    from toolgate.ai.tools.invocation import ToolInvoker
    from toolgate.ai.tools.registry import CapabilityRegistry
    from toolgate.config.models import ToolgateConfig

logger = logging.getLogger(__name__)

CONTEXT_CLEARED = "Conversation context has been cleared."


def message_text(message: BaseMessage) -> str:
    """Plain text of a message whose content may be a list of blocks."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


class ChatSession:
    """Stateful console conversation with a tool-calling model.

    The history lives in memory only and starts with the system
    instructions. A turn that fails upstream is rolled back so the history
    never holds half a turn.

    Example:
        >>> session = ChatSession(config, model, registry, invoker)
        >>> session.run()  # returns on Ctrl+D / Ctrl+C
    """

    def __init__(
        self,
        config: ToolgateConfig,
        model: BaseChatModel,
        registry: CapabilityRegistry,
        invoker: ToolInvoker,
        console: Console | None = None,
        input_func: Callable[[], str | None] | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            config: Agent name, instructions, clear command and round limit
            model: Chat model; the registry's capabilities are bound to it
            registry: Capabilities the model may call
            invoker: Chokepoint every call goes through (approval included)
            console: Rich console for output (default: new Console)
            input_func: Returns one line of input, or None to end the
                session (default: prompt_toolkit prompt)
        """
        self.config = config
        self.registry = registry
        self.invoker = invoker
        self.console = console or Console(highlight=False)
        self.model = registry.bind_to_model(model)

        if input_func is None:
            from toolgate.cli.input import default_input_func

            input_func = default_input_func()
        self.input_func = input_func

        self.messages: list[BaseMessage] = []
        self.clear_history()

    def clear_history(self) -> None:
        """Start a fresh history holding only the system instructions."""
        self.messages = [SystemMessage(content=self.config.instructions)]
        logger.info("Cleared conversation history")

    def run(self) -> None:
        """Read and answer user input until EOF or Ctrl+C."""
        while True:
            line = self.input_func()
            if line is None:
                logger.debug("Input closed, ending session")
                return

            text = line.strip()
            if not text:
                continue
            if text.lower() == self.config.clear_command.lower():
                self.clear_history()
                self.console.print(CONTEXT_CLEARED, markup=False)
                continue

            try:
                self.send(text)
            except UpstreamServiceError as e:
                self.console.print(
                    f"Error invoking chat completion: {e}", style="red", markup=False
                )
            except ToolgateAIError as e:
                self.console.print(str(e), style="red", markup=False)

    def send(self, text: str) -> AIMessage:
        """Run one user turn and return the model's final message.

        Raises:
            UpstreamServiceError: If a model call failed; history is rolled back
            ToolRoundLimitError: If the model kept calling functions past
                ``max_tool_rounds``; history is rolled back
        """
        checkpoint = len(self.messages)
        self.messages.append(HumanMessage(content=text))

        try:
            for _ in range(self.config.max_tool_rounds):
                response = self._invoke_model()
                self.messages.append(response)
                self._print_message(response)

                if not response.tool_calls and not response.invalid_tool_calls:
                    return response

                for call in response.tool_calls:
                    self.messages.append(self._run_tool_call(call))
                for invalid in response.invalid_tool_calls:
                    self.messages.append(self._reject_invalid_call(invalid))

            raise ToolRoundLimitError(
                f"Stopped after {self.config.max_tool_rounds} function-call rounds "
                "without a final answer"
            )
        except (ToolgateAIError, KeyboardInterrupt):
            del self.messages[checkpoint:]
            raise

    def _invoke_model(self) -> AIMessage:
        try:
            response = self.model.invoke(self.messages)
        except Exception as e:
            logger.error(f"Chat completion failed: {e}", exc_info=True)
            raise UpstreamServiceError(str(e)) from e

        if not isinstance(response, AIMessage):
            raise UpstreamServiceError(
                f"Unexpected response type from model: {type(response).__name__}"
            )
        return response

    def _run_tool_call(self, call: Any) -> ToolMessage:
        name: str = call["name"]
        call_id: str = call.get("id") or ""
        status = "success"

        try:
            request = self.registry.create_request(name, call.get("args") or {}, call_id)
        except UnknownCapabilityError:
            logger.warning(f"Model called unknown function '{name}'")
            content, status = f"Unknown function: {name}", "error"
        else:
            outcome = self.invoker.invoke(request)
            content = outcome.to_text()
            if isinstance(outcome, Executed) and outcome.failed:
                status = "error"

        self.console.print(f"  [tool result] {call_id} - {content}", markup=False)
        return ToolMessage(content=content, tool_call_id=call_id, name=name, status=status)

    def _reject_invalid_call(self, invalid: Any) -> ToolMessage:
        name = invalid.get("name") or ""
        call_id = invalid.get("id") or ""
        content = f"Invalid arguments for function {name}: {invalid.get('error') or 'malformed JSON'}"
        self.console.print(f"  [tool result] {call_id} - {content}", markup=False)
        return ToolMessage(content=content, tool_call_id=call_id, name=name, status="error")

    def _print_message(self, message: AIMessage) -> None:
        self.console.print(
            f"\n# assistant - {self.config.agent_name}: {message_text(message)}",
            style="green",
            markup=False,
        )
        for call in message.tool_calls:
            self.console.print(f"  [tool call] {call['name']} ({call.get('id')})", markup=False)

        usage = message.usage_metadata
        if usage:
            self.console.print(
                f"  [Usage] Tokens: {usage['total_tokens']}, "
                f"Input: {usage['input_tokens']}, Output: {usage['output_tokens']}",
                markup=False,
            )
        has_calls = bool(message.tool_calls or message.invalid_tool_calls)
        self.console.print(f"Function calls: {has_calls}", markup=False)
