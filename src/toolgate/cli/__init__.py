"""Console front end: the chat session and user input."""

from toolgate.cli.chat_session import ChatSession

__all__ = ["ChatSession"]
