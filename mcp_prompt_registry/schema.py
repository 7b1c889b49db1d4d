"""Parameter schema derivation and result-shape detection.

Runs once per prompt at registration time. Produces:
    - Argument list shown to clients (name, description, required)
    - ParameterSpec list used by the binder at invocation time
    - ResultShape telling the dispatcher how to normalize the return value

Required inference (explicit PromptArg(required=...) always wins):
    value-shaped type (int, float, bool) -> required
    optional type (Optional[T], T | None) -> not required
    has a default value                   -> not required
    otherwise                             -> required
"""

import collections.abc
import enum
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Optional, get_args, get_origin

from mcp.types import GetPromptResult, PromptMessage

from .cancellation import CancellationToken
from .conversion import Converter, converter_for, is_optional, strip_optional, unwrap_annotated
from .errors import UnresolvedAnnotationError
from .prompt_decorator import PromptArg

VALUE_SHAPED_TYPES = (int, float, bool)

_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence)
_AWAITABLE_ORIGINS = (collections.abc.Awaitable, collections.abc.Coroutine)


@dataclass(frozen=True)
class Argument:
    """One entry of a prompt's argument schema."""

    name: str
    description: Optional[str] = None
    required: bool = True


@dataclass(frozen=True)
class ParameterSpec:
    """How to bind one formal parameter of a prompt handler.

    Attributes:
        name: Parameter name, also the key looked up in the caller's arguments
        annotation: Declared type (inspect.Parameter.empty when unannotated)
        keyword_only: Bind as keyword argument instead of positional
        is_cancellation: Trailing slot filled from the call's CancellationToken
        default: Default value, or inspect.Parameter.empty
        convert: Coercion function selected for the declared type
    """

    name: str
    annotation: Any
    keyword_only: bool = False
    is_cancellation: bool = False
    default: Any = inspect.Parameter.empty
    convert: Converter = converter_for(Any)

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


class ResultShape(enum.Enum):
    """The two sanctioned prompt return shapes."""

    RESULT = "result"      # GetPromptResult, passed through
    MESSAGES = "messages"  # ordered sequence of PromptMessage, wrapped


def _resolve_hints(func: Callable[..., Any]) -> dict[str, Any]:
    """Resolve string annotations against the function's module globals.

    Raises:
        UnresolvedAnnotationError: Naming the first parameter (or "return")
            whose annotation cannot be resolved
    """
    try:
        return typing.get_type_hints(func, include_extras=True)
    except (NameError, TypeError):
        pass

    # Resolve one annotation at a time to find the one that fails
    globalns = getattr(inspect.unwrap(func), "__globals__", {})
    hints: dict[str, Any] = {}
    for name, annotation in getattr(func, "__annotations__", {}).items():
        holder = types.SimpleNamespace(__annotations__={name: annotation})
        try:
            hints.update(typing.get_type_hints(holder, globalns=globalns, include_extras=True))
        except (NameError, TypeError):
            raise UnresolvedAnnotationError(func.__qualname__, name, str(annotation)) from None
    return hints


def _is_cancellation_type(annotation: Any) -> bool:
    annotation, _ = unwrap_annotated(annotation)
    return strip_optional(annotation) is CancellationToken


def _find_prompt_arg(annotation: Any) -> Optional[PromptArg]:
    _, metadata = unwrap_annotated(annotation)
    if not metadata and is_optional(annotation):
        # Python 3.10 wraps Annotated[...] = None in Optional
        _, metadata = unwrap_annotated(strip_optional(annotation))
    for item in metadata:
        if isinstance(item, PromptArg):
            return item
    return None


def infer_required(annotation: Any, has_default: bool) -> bool:
    """Required flag for a parameter without an explicit override."""
    annotation, _ = unwrap_annotated(annotation)
    if annotation in VALUE_SHAPED_TYPES:
        return True
    if is_optional(annotation):
        return False
    return not has_default


def build_parameters(
    func: Callable[..., Any], skip_first: bool = False
) -> tuple[list[Argument], list[ParameterSpec]]:
    """Derive the argument schema and binding specs for a handler.

    Args:
        func: The raw (unbound) handler function
        skip_first: Drop the first parameter (self/cls of a bound method)

    Returns:
        Tuple of (arguments shown to clients, parameter specs for binding)
    """
    hints = _resolve_hints(func)
    params = [
        p for p in inspect.signature(func).parameters.values()
        if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    if skip_first and params:
        params = params[1:]

    arguments: list[Argument] = []
    specs: list[ParameterSpec] = []

    for index, param in enumerate(params):
        annotation = hints.get(param.name, param.annotation)
        keyword_only = param.kind is inspect.Parameter.KEYWORD_ONLY

        # The last parameter may receive the call's CancellationToken
        if index == len(params) - 1 and _is_cancellation_type(annotation):
            specs.append(ParameterSpec(
                name=param.name,
                annotation=annotation,
                keyword_only=keyword_only,
                is_cancellation=True,
                default=param.default,
            ))
            continue

        override = _find_prompt_arg(annotation)
        has_default = param.default is not inspect.Parameter.empty

        required = infer_required(annotation, has_default)
        if override is not None and override.required is not None:
            required = override.required

        arguments.append(Argument(
            name=param.name,
            description=override.description if override else None,
            required=required,
        ))
        specs.append(ParameterSpec(
            name=param.name,
            annotation=annotation,
            keyword_only=keyword_only,
            default=param.default,
            convert=converter_for(annotation),
        ))

    return arguments, specs


def _unwrap_awaitable(annotation: Any) -> Any:
    if get_origin(annotation) in _AWAITABLE_ORIGINS:
        args = get_args(annotation)
        return args[-1] if args else Any
    return annotation


def _is_message_sequence(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin not in _SEQUENCE_ORIGINS:
        return False
    args = get_args(annotation)
    if origin is tuple:
        # tuple[PromptMessage, ...]
        return len(args) == 2 and args[1] is Ellipsis and args[0] is PromptMessage
    return len(args) == 1 and args[0] is PromptMessage


def result_shape_of(func: Callable[..., Any]) -> Optional[ResultShape]:
    """Classify a handler's declared return type, or None if unsupported."""
    annotation = _resolve_hints(func).get("return", inspect.Signature.empty)
    annotation, _ = unwrap_annotated(annotation)
    annotation = _unwrap_awaitable(annotation)

    if _is_message_sequence(annotation):
        return ResultShape.MESSAGES
    if get_origin(annotation) is None and isinstance(annotation, type) and issubclass(annotation, GetPromptResult):
        return ResultShape.RESULT
    return None
