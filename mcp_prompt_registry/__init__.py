"""
mcp_prompt_registry - Registry and dispatcher for MCP prompts.

Mark callables with @Prompt, collect them with PromptRegistryBuilder, and
serve them through PromptsCapability on any MCP server.
"""

__version__ = "0.1.0"

from .binder import bind_arguments
from .cancellation import CancellationToken
from .capability import PromptsCapability, build_registry, with_prompts
from .config import Config, ConfigManager
from .dispatcher import PromptDispatcher
from .errors import (
    ArgumentConversionError,
    DuplicatePromptError,
    InvalidRequestError,
    InvalidReturnTypeError,
    MissingArgumentError,
    MissingInstanceError,
    NotAPromptError,
    PromptError,
    PromptExecutionError,
    RegistrationError,
    RegistryFrozenError,
    UnknownPromptError,
    UnresolvedAnnotationError,
)
from .messages import assistant_message, to_prompt_result, user_message
from .prompt_decorator import Prompt, PromptArg, PromptInfo
from .registry import HandlerBinding, PromptDescriptor, PromptRegistry, PromptRegistryBuilder
from .schema import Argument, ParameterSpec, ResultShape

__all__ = [
    "Argument",
    "ArgumentConversionError",
    "CancellationToken",
    "Config",
    "ConfigManager",
    "DuplicatePromptError",
    "HandlerBinding",
    "InvalidRequestError",
    "InvalidReturnTypeError",
    "MissingArgumentError",
    "MissingInstanceError",
    "NotAPromptError",
    "ParameterSpec",
    "Prompt",
    "PromptArg",
    "PromptDescriptor",
    "PromptDispatcher",
    "PromptError",
    "PromptExecutionError",
    "PromptInfo",
    "PromptRegistry",
    "PromptRegistryBuilder",
    "PromptsCapability",
    "RegistrationError",
    "RegistryFrozenError",
    "ResultShape",
    "UnknownPromptError",
    "UnresolvedAnnotationError",
    "assistant_message",
    "bind_arguments",
    "build_registry",
    "to_prompt_result",
    "user_message",
    "with_prompts",
]
