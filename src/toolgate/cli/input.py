"""Line-oriented user input with history using prompt_toolkit.

Example:
    >>> from toolgate.cli.input import get_user_input
    >>> while True:
    ...     user_input = get_user_input()
    ...     if user_input is None:  # EOF or Ctrl+C
    ...         break
    ...     print(f"You said: {user_input}")
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import FileHistory, InMemoryHistory
from prompt_toolkit.styles import Style

if TYPE_CHECKING:
    from prompt_toolkit.history import History

logger = logging.getLogger(__name__)

_STYLE = Style.from_dict(
    {
        "prompt": "ansicyan bold",
    }
)

DEFAULT_HISTORY_FILE = Path.home() / ".toolgate" / "chat_history"


def create_prompt_session(
    prompt_text: str = "User input: ",
    history_file: Path | None = DEFAULT_HISTORY_FILE,
) -> PromptSession[str]:
    """Create a reusable prompt session.

    Args:
        prompt_text: Text to display as prompt
        history_file: Path to a persistent history file, or None for
            in-memory history only
    """
    history: History
    if history_file is not None:
        history_file.parent.mkdir(parents=True, exist_ok=True)
        history = FileHistory(str(history_file))
        logger.debug(f"Using history file: {history_file}")
    else:
        history = InMemoryHistory()

    return PromptSession(
        message=FormattedText([("class:prompt", prompt_text)]),
        style=_STYLE,
        history=history,
    )


def get_user_input(session: PromptSession[str] | None = None) -> str | None:
    """Read one line of user input.

    Returns:
        The line as typed, or None on Ctrl+D or Ctrl+C. There are no exit
        commands; every other line, blank ones included, is returned.
    """
    if session is None:
        session = create_prompt_session()

    try:
        return session.prompt()
    except (EOFError, KeyboardInterrupt):
        logger.debug("User interrupted input (EOF or Ctrl+C)")
        return None


def read_plain_line() -> str | None:
    """Read one line without prompt_toolkit, for piped (non-terminal) stdin."""
    try:
        return input("User input: ")
    except (EOFError, KeyboardInterrupt):
        return None


def default_input_func() -> Callable[[], str | None]:
    """Line reader for the chat loop.

    Uses a prompt_toolkit session with history on a terminal and plain
    ``input()`` when stdin is redirected.
    """
    if not sys.stdin.isatty():
        return read_plain_line

    session = create_prompt_session()
    return lambda: get_user_input(session)
