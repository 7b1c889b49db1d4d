"""Helpers for building prompt messages and results."""

from typing import Iterable, Optional

from mcp.types import GetPromptResult, PromptMessage, TextContent


def user_message(text: str) -> PromptMessage:
    """Create a user prompt message with text content."""
    return PromptMessage(role="user", content=TextContent(type="text", text=text))


def assistant_message(text: str) -> PromptMessage:
    """Create an assistant prompt message with text content."""
    return PromptMessage(role="assistant", content=TextContent(type="text", text=text))


def to_prompt_result(
    messages: Iterable[PromptMessage], description: Optional[str] = None
) -> GetPromptResult:
    """Wrap an ordered sequence of messages into a GetPromptResult.

    Args:
        messages: Messages in the order they should be returned
        description: Optional description attached to the result

    Returns:
        GetPromptResult holding the messages in the same order
    """
    return GetPromptResult(description=description, messages=list(messages))
