# errors.py
"""Error taxonomy for prompt registration and dispatch.

Every error raised by this package derives from PromptError. Registration
errors abort only the registration being attempted; dispatch errors are
reported to the caller and never retried.

Error Handling Strategy:
    Handlers may raise PromptError subclasses themselves, in which case the
    dispatcher propagates them untouched. Any other exception escaping a
    handler is logged and re-raised as PromptExecutionError. The capability
    adapter renders PromptError into the MCP protocol error using the
    JSON-RPC code stored on each error class.
"""

from typing import Any, Optional

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST


# ------------------------------------------------------------------------------
# PromptError - Base exception with structured error info
# ------------------------------------------------------------------------------
# - message: What went wrong
# - hint: Actionable suggestion for the client (optional)
# - **data: Extra context like prompt name, argument name, etc. (optional)
#
# Example: raise PromptError("Prompt not found", hint="Check spelling", name="sumary")
# ------------------------------------------------------------------------------
class PromptError(Exception):
    """Base class for all prompt registry and dispatch errors.

    Args:
        message: Description of what went wrong
        hint: Actionable suggestion for the client (optional)
        **data: Extra context such as the prompt or argument name (optional)
    """

    code: int = INTERNAL_ERROR

    def __init__(self, message: str, hint: Optional[str] = None, **data: Any):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.data = data

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


# ==============================================================================
# Registration errors
# ==============================================================================

class RegistrationError(PromptError):
    """A callable could not be registered as a prompt."""


class DuplicatePromptError(RegistrationError):
    def __init__(self, name: str):
        super().__init__(
            f"A prompt with the name '{name}' is already registered",
            hint="Prompt names are compared case-insensitively",
            name=name,
        )
        self.name = name


class MissingInstanceError(RegistrationError):
    def __init__(self, method_name: str, owner: str):
        super().__init__(
            f"Cannot register instance method '{method_name}' on type '{owner}' without an instance",
            hint="Register an instance of the type, or make the method a staticmethod",
            method=method_name,
            owner=owner,
        )


class InvalidReturnTypeError(RegistrationError):
    def __init__(self, method_name: str, declared: Any):
        super().__init__(
            f"Prompt '{method_name}' has an invalid return type {declared!r}. "
            "Expected GetPromptResult or list[PromptMessage]",
            method=method_name,
        )


class NotAPromptError(RegistrationError):
    def __init__(self, func_name: str):
        super().__init__(
            f"'{func_name}' is not marked as a prompt",
            hint="Decorate it with @Prompt(...)",
            func=func_name,
        )


class UnresolvedAnnotationError(RegistrationError):
    def __init__(self, func_name: str, parameter: str, annotation: str):
        super().__init__(
            f"Cannot resolve annotation {annotation!r} of '{parameter}' on prompt '{func_name}'",
            hint="Import the type at module level, not only under TYPE_CHECKING",
            func=func_name,
            parameter=parameter,
        )
        self.parameter = parameter


class RegistryFrozenError(RegistrationError):
    def __init__(self) -> None:
        super().__init__(
            "The prompt registry has already been built",
            hint="Register all prompts before calling build()",
        )


# ==============================================================================
# Dispatch errors
# ==============================================================================

class InvalidRequestError(PromptError):
    code = INVALID_REQUEST


class UnknownPromptError(PromptError):
    code = INVALID_PARAMS

    def __init__(self, name: str):
        super().__init__(f"Unknown prompt: {name}", hint="Use prompts/list to see available prompts", name=name)
        self.name = name


class MissingArgumentError(PromptError):
    code = INVALID_PARAMS

    def __init__(self, name: str):
        super().__init__(f"Missing required argument: {name}", argument=name)
        self.name = name


class ArgumentConversionError(PromptError):
    code = INVALID_PARAMS

    def __init__(self, name: str, value: Any, target: Any, reason: Optional[str] = None):
        target_name = getattr(target, "__name__", repr(target))
        message = f"Cannot convert argument '{name}' value {value!r} to {target_name}"
        if reason:
            message += f": {reason}"
        super().__init__(message, argument=name)
        self.name = name
        self.value = value
        self.target = target


class PromptExecutionError(PromptError):
    """The prompt handler itself raised. The inner message is preserved."""

    code = INTERNAL_ERROR

    def __init__(self, name: str, inner_message: str):
        super().__init__(f"Error executing prompt handler '{name}': {inner_message}", name=name)
        self.name = name
        self.inner_message = inner_message
