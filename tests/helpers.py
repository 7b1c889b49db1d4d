"""Helper functions for the prompt registry tests."""
from __future__ import annotations

import asyncio
from typing import Any

from mcp.types import GetPromptResult


def run(coro: Any) -> Any:
    """Run a coroutine to completion in a fresh event loop."""
    return asyncio.run(coro)


def texts(result: GetPromptResult) -> list[str]:
    """Text of every message in a prompt result, in order."""
    return [message.content.text for message in result.messages]


def roles(result: GetPromptResult) -> list[str]:
    return [message.role for message in result.messages]
