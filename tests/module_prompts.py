"""A module scanned whole by PromptRegistryBuilder.add_module()."""
from __future__ import annotations

from mcp.types import PromptMessage

from mcp_prompt_registry import Prompt, user_message


@Prompt("first", "Registered first")
def first() -> list[PromptMessage]:
    return [user_message("first")]


class Helpers:
    @staticmethod
    @Prompt("second", "Registered from a class")
    def second(count: int) -> list[PromptMessage]:
        return [user_message(f"second x{count}")]


@Prompt("third")
def third() -> list[PromptMessage]:
    return [user_message("third")]


def not_a_prompt() -> None:
    return None
