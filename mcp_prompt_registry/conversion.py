"""Argument coercion rules.

A converter is selected once per parameter at registration time and stored
on its ParameterSpec. At invocation time the binder only calls it.

Rules, in order:
    1. None is accepted for optional parameters
    2. Values already of the declared type pass through (bool is never
       accepted for int or float)
    3. Text is parsed for int, float and bool targets
    4. Everything else goes through a pydantic TypeAdapter; text that fails
       plain validation is retried as JSON

Converters raise ValueError or TypeError on failure. The binder turns those
into ArgumentConversionError.
"""

import inspect
import types
from typing import Annotated, Any, Callable, Optional, Union, get_args, get_origin

from pydantic import TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

Converter = Callable[[Any], Any]

_NONE_TYPE = type(None)


def unwrap_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split Annotated[T, ...] into (T, metadata). Other types get empty metadata."""
    if get_origin(annotation) is Annotated:
        return annotation.__origin__, tuple(annotation.__metadata__)
    return annotation, ()


def is_optional(annotation: Any) -> bool:
    """True for Optional[T], Union[..., None] and T | None."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return _NONE_TYPE in get_args(annotation)
    return False


def strip_optional(annotation: Any) -> Any:
    """Drop None from an optional union. Non-optional types are returned as-is."""
    if not is_optional(annotation):
        return annotation
    rest = [arg for arg in get_args(annotation) if arg is not _NONE_TYPE]
    if len(rest) == 1:
        return rest[0]
    return Union[tuple(rest)]


def parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError(f"{text!r} is not a valid boolean")


def parse_int(text: str) -> int:
    return int(text.strip())


def parse_float(text: str) -> float:
    return float(text.strip())


_TEXT_PARSERS: dict[type, Callable[[str], Any]] = {
    int: parse_int,
    float: parse_float,
    bool: parse_bool,
}


def _identity(value: Any) -> Any:
    return value


def _matches(value: Any, target: Any) -> bool:
    # list[int] and friends pass isinstance(_, type) on 3.10 but cannot be checked
    if get_origin(target) is not None or not isinstance(target, type):
        return False
    if isinstance(value, bool) and target in (int, float):
        return False
    return isinstance(value, target)


def _build_adapter(target: Any) -> Optional[TypeAdapter]:
    try:
        return TypeAdapter(target)
    except PydanticSchemaGenerationError:
        # Arbitrary classes pydantic cannot describe: isinstance passthrough only.
        return None


def converter_for(annotation: Any) -> Converter:
    """Select the converter for a declared parameter type.

    Args:
        annotation: The parameter's type hint, possibly Annotated or Optional,
            or inspect.Parameter.empty when the parameter is unannotated

    Returns:
        A function taking the caller-supplied value and returning the value
        to bind
    """
    annotation, _ = unwrap_annotated(annotation)
    if annotation is inspect.Parameter.empty or annotation is Any:
        return _identity

    optional = is_optional(annotation)
    target, _ = unwrap_annotated(strip_optional(annotation))
    if target is Any:
        return _identity

    parser = _TEXT_PARSERS.get(target)
    adapter = _build_adapter(target)

    def convert(value: Any) -> Any:
        if value is None and optional:
            return None
        if _matches(value, target):
            return value
        if parser is not None and isinstance(value, str):
            return parser(value)
        if adapter is None:
            raise TypeError(f"expected an instance of {getattr(target, '__name__', target)!r}")
        try:
            return adapter.validate_python(value)
        except ValidationError:
            if not isinstance(value, str):
                raise
            return adapter.validate_json(value)

    return convert
