"""Bind caller-supplied prompt arguments to a handler's parameters.

For each parameter, in declaration order:
    1. Trailing CancellationToken slot -> the call's token
    2. Value supplied by the caller     -> spec.convert(value)
    3. Default value declared           -> the default
    4. Otherwise                        -> MissingArgumentError

Pure function of its inputs. Safe to call concurrently for the same binding.
"""

from typing import Any, Mapping, Optional, Sequence

from .cancellation import CancellationToken
from .errors import ArgumentConversionError, MissingArgumentError
from .schema import ParameterSpec


def convert_argument(spec: ParameterSpec, value: Any) -> Any:
    """Coerce one supplied value to the parameter's declared type.

    Raises:
        ArgumentConversionError: If the value cannot be converted
    """
    try:
        return spec.convert(value)
    except (ValueError, TypeError) as e:
        raise ArgumentConversionError(spec.name, value, spec.annotation, str(e)) from e


def bind_arguments(
    parameters: Sequence[ParameterSpec],
    arguments: Optional[Mapping[str, Any]],
    cancellation: CancellationToken,
) -> tuple[list[Any], dict[str, Any]]:
    """Produce the call arguments for a handler.

    Args:
        parameters: The binding's parameter specs (self/cls excluded)
        arguments: Caller-supplied name -> value map; None means empty.
            Names not matching any parameter are ignored.
        cancellation: Token bound to the trailing cancellation slot

    Returns:
        Tuple of (positional args, keyword-only kwargs)

    Raises:
        MissingArgumentError: A parameter has neither a value nor a default
        ArgumentConversionError: A supplied value cannot be converted
    """
    supplied = arguments or {}
    args: list[Any] = []
    kwargs: dict[str, Any] = {}

    for spec in parameters:
        if spec.is_cancellation:
            value = cancellation
        elif spec.name in supplied:
            value = convert_argument(spec, supplied[spec.name])
        elif spec.has_default:
            value = spec.default
        else:
            raise MissingArgumentError(spec.name)

        if spec.keyword_only:
            kwargs[spec.name] = value
        else:
            args.append(value)

    return args, kwargs
