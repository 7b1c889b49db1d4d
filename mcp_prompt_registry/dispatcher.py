"""Runtime entry point for prompts/list and prompts/get.

Per call: resolving -> binding -> invoking -> normalizing -> done/failed.
No state is shared between calls, so any number of get_prompt coroutines
may run concurrently against the same frozen registry.
"""

import inspect
import logging
from typing import Any, Mapping, Optional

from mcp.types import GetPromptResult

from .binder import bind_arguments
from .cancellation import CancellationToken
from .errors import InvalidRequestError, PromptError, PromptExecutionError
from .messages import to_prompt_result
from .registry import HandlerBinding, PromptDescriptor, PromptRegistry
from .schema import ResultShape

logger = logging.getLogger(__name__)


class PromptDispatcher:
    """Lists registered prompts and invokes them by name.

    Usage:
        >>> dispatcher = PromptDispatcher(registry)
        >>> dispatcher.list_prompts()
        (PromptDescriptor(name='greeting', ...),)
        >>> await dispatcher.get_prompt("summary", {"text": "hello world"})
        GetPromptResult(messages=[...])
    """

    def __init__(self, registry: PromptRegistry) -> None:
        if registry is None:
            raise TypeError("PromptDispatcher requires a built PromptRegistry")
        self._registry = registry

    @property
    def registry(self) -> PromptRegistry:
        return self._registry

    def list_prompts(self) -> tuple[PromptDescriptor, ...]:
        """Snapshot of all descriptors in registration order."""
        return self._registry.descriptors()

    async def get_prompt(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> GetPromptResult:
        """Invoke a prompt by name and normalize its result.

        Args:
            name: Prompt name (case-insensitive)
            arguments: Caller-supplied argument values, usually strings
            cancellation: Token passed to handlers that accept one

        Returns:
            GetPromptResult with the handler's messages

        Raises:
            InvalidRequestError: name is empty or not a string
            UnknownPromptError: No prompt has this name
            MissingArgumentError: A required argument was not supplied
            ArgumentConversionError: An argument could not be converted
            PromptExecutionError: The handler raised a non-PromptError exception
        """
        if not isinstance(name, str) or not name:
            raise InvalidRequestError("Prompt name cannot be null or empty")

        descriptor, binding = self._registry.resolve(name)
        token = cancellation if cancellation is not None else CancellationToken()
        args, kwargs = bind_arguments(binding.parameters, arguments, token)

        logger.debug("Invoking prompt: %s", descriptor.name)
        try:
            result = binding.call(args, kwargs)
            if inspect.isawaitable(result):
                result = await result
            return _normalize(binding, result)
        except PromptError:
            raise
        except Exception as e:
            logger.exception("Prompt error in %s: %s", descriptor.name, e)
            raise PromptExecutionError(descriptor.name, str(e)) from e


def _normalize(binding: HandlerBinding, result: Any) -> GetPromptResult:
    if binding.result_shape is ResultShape.RESULT:
        if not isinstance(result, GetPromptResult):
            raise TypeError(f"expected GetPromptResult, got {type(result).__name__}")
        return result
    return to_prompt_result(result)
