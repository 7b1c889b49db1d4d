from dataclasses import dataclass
from typing import Any, Callable, Optional
import logging

logger = logging.getLogger(__name__)

# Attribute set on decorated functions. Read once by the registry builder.
PROMPT_ATTR = "__mcp_prompt__"


@dataclass(frozen=True)
class PromptInfo:
    """Metadata captured by @Prompt for one callable."""

    name: str
    description: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class PromptArg:
    """Per-parameter annotation, used inside typing.Annotated.

    Usage:
        def summary(text: Annotated[str, PromptArg("Text to summarize")]) -> ...

    Args:
        description: Shown to clients in the prompt's argument list
        required: Overrides required/optional inference when not None
    """

    description: Optional[str] = None
    required: Optional[bool] = None


# ------------------------------------------------------------------------------
# Prompt - Decorator class that marks callables as MCP prompts
# ------------------------------------------------------------------------------
# Usage:
#   @Prompt("prompt_name", "Description for AI")
#   async def my_prompt(topic: str, style: str = "friendly") -> list[PromptMessage]:
#       return [user_message(f"Talk about {topic} in a {style} way")]
#
# Parameters:
#   - name: Unique prompt identifier exposed to MCP clients (case-insensitive)
#   - description: Shown to AI to understand when/how to use the prompt
#   - title: Optional human-readable display name
#
# What happens at import time:
#   1. Validates the name is a non-empty string
#   2. Attaches a PromptInfo to the function
#   3. Returns the original function (or staticmethod/classmethod) unchanged
#
# Nothing is registered globally. PromptRegistryBuilder reads the PromptInfo
# when the function, its class, an instance or its module is added.
# ------------------------------------------------------------------------------
class Prompt:
    """Decorator for MCP prompts.

    Works on plain functions, instance methods, staticmethods and
    classmethods, in either decorator order.

    Usage:
        @Prompt("greeting", "A friendly greeting prompt")
        async def greeting() -> list[PromptMessage]:
            return [assistant_message("Hello! How can I assist you today?")]

    Args:
        name: Unique identifier for the prompt
        description: Explanation of what the prompt does (shown to AI)
        title: Optional human-readable display name (defaults to None)
    """

    def __init__(self, name: str, description: Optional[str] = None, title: Optional[str] = None):
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Prompt name must be a non-empty string")
        self.info = PromptInfo(name=name, description=description, title=title)

    def __call__(self, func: Any) -> Any:
        """Mark the decorated callable as an MCP prompt."""
        target = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
        if not callable(target):
            raise TypeError(f"@Prompt can only decorate callables, got {type(func).__name__}")

        setattr(target, PROMPT_ATTR, self.info)
        logger.debug("Marked prompt: %s", self.info.name)
        return func


def get_prompt_info(func: Callable[..., Any]) -> Optional[PromptInfo]:
    """Return the PromptInfo attached by @Prompt, or None."""
    if isinstance(func, (staticmethod, classmethod)):
        func = func.__func__
    info = getattr(func, PROMPT_ATTR, None)
    return info if isinstance(info, PromptInfo) else None
