"""Prompt registry: builder during setup, frozen table afterwards.

Prompts are added to a PromptRegistryBuilder during a single-threaded setup
phase. build() returns a PromptRegistry, a read-only mapping that can be
queried concurrently without locking. The builder refuses further additions
once built.

Lookups are case-insensitive: "Greeting" and "greeting" are the same prompt.
"""

import inspect
import logging
import types
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from mcp import types as mcp_types

from .errors import (
    DuplicatePromptError,
    InvalidReturnTypeError,
    MissingInstanceError,
    NotAPromptError,
    RegistryFrozenError,
    UnknownPromptError,
)
from .prompt_decorator import PromptInfo, get_prompt_info
from .schema import Argument, ParameterSpec, ResultShape, build_parameters, result_shape_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptDescriptor:
    """Catalog entry handed out by prompts/list."""

    name: str
    description: Optional[str] = None
    title: Optional[str] = None
    arguments: tuple[Argument, ...] = ()

    def to_mcp(self) -> mcp_types.Prompt:
        """Render as the MCP protocol Prompt model."""
        arguments = [
            mcp_types.PromptArgument(name=a.name, description=a.description, required=a.required)
            for a in self.arguments
        ]
        return mcp_types.Prompt(
            name=self.name,
            title=self.title,
            description=self.description,
            arguments=arguments or None,
        )


@dataclass(frozen=True)
class HandlerBinding:
    """How to call a registered prompt. Never exposed through prompts/list.

    Attributes:
        func: The raw function (unbound for methods)
        instance: Owning object for instance methods, the class for
            classmethods, None for plain functions and staticmethods
        parameters: Binding specs for the formal parameters after self/cls
        result_shape: Which of the two sanctioned shapes func returns
    """

    func: Callable[..., Any]
    instance: Any
    parameters: tuple[ParameterSpec, ...]
    result_shape: ResultShape

    def call(self, args: list[Any], kwargs: dict[str, Any]) -> Any:
        if self.instance is None:
            return self.func(*args, **kwargs)
        return self.func(self.instance, *args, **kwargs)


# ------------------------------------------------------------------------------
# PromptRegistry - Frozen, read-only prompt table
# ------------------------------------------------------------------------------
class PromptRegistry:
    """Read-only mapping from prompt name to (descriptor, binding).

    Only PromptRegistryBuilder.build() creates instances.
    """

    def __init__(self, entries: dict[str, tuple[PromptDescriptor, HandlerBinding]]):
        self._entries = types.MappingProxyType(dict(entries))
        self._descriptors = tuple(descriptor for descriptor, _ in self._entries.values())

    def descriptors(self) -> tuple[PromptDescriptor, ...]:
        """All descriptors in registration order."""
        return self._descriptors

    def names(self) -> list[str]:
        return [d.name for d in self._descriptors]

    def resolve(self, name: str) -> tuple[PromptDescriptor, HandlerBinding]:
        """Case-insensitive lookup.

        Raises:
            UnknownPromptError: If no prompt has this name
        """
        try:
            return self._entries[name.casefold()]
        except KeyError:
            raise UnknownPromptError(name) from None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PromptDescriptor]:
        return iter(self._descriptors)

    def __repr__(self) -> str:
        return f"PromptRegistry(prompts={self.names()!r})"


# ------------------------------------------------------------------------------
# PromptRegistryBuilder - Accumulates prompts during setup
# ------------------------------------------------------------------------------
# Usage:
#   registry = (
#       PromptRegistryBuilder()
#       .add_function(greeting)              # module-level @Prompt function
#       .add_type(StaticPrompts)             # staticmethods / classmethods
#       .add_instance(ChatPrompts(client))   # instance methods
#       .build()
#   )
#
# Each add_* call validates before inserting, so a failed registration
# leaves the builder exactly as it was.
# ------------------------------------------------------------------------------
class PromptRegistryBuilder:
    """Collects prompt registrations and freezes them into a PromptRegistry."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[PromptDescriptor, HandlerBinding]] = {}
        self._built = False

    def add_function(
        self,
        func: Callable[..., Any],
        instance: Any = None,
        *,
        prompt: Optional[PromptInfo] = None,
        owner: Optional[type] = None,
    ) -> "PromptRegistryBuilder":
        """Register a single callable.

        Args:
            func: Plain function, method function, staticmethod or classmethod
            instance: Owning object; required when func is an instance method
            prompt: Metadata to use instead of the @Prompt annotation
            owner: Class func was found on (set by add_type)

        Returns:
            This builder, for chaining

        Raises:
            RegistryFrozenError: If build() was already called
            NotAPromptError: If func has no @Prompt and prompt is None
            MissingInstanceError: If func is an instance method without instance
            DuplicatePromptError: If the name is taken (case-insensitive)
            InvalidReturnTypeError: If the return annotation is not a
                GetPromptResult or a sequence of PromptMessage
        """
        if self._built:
            raise RegistryFrozenError()

        info = prompt or get_prompt_info(func)
        if info is None:
            raise NotAPromptError(getattr(func, "__qualname__", repr(func)))

        raw, bound_to, skip_first = self._unwrap(func, instance, owner)

        key = info.name.casefold()
        if key in self._entries:
            raise DuplicatePromptError(info.name)

        shape = result_shape_of(raw)
        if shape is None:
            declared = inspect.signature(raw).return_annotation
            raise InvalidReturnTypeError(raw.__qualname__, declared)

        arguments, parameters = build_parameters(raw, skip_first=skip_first)

        descriptor = PromptDescriptor(
            name=info.name,
            description=info.description,
            title=info.title,
            arguments=tuple(arguments),
        )
        binding = HandlerBinding(
            func=raw,
            instance=bound_to,
            parameters=tuple(parameters),
            result_shape=shape,
        )
        self._entries[key] = (descriptor, binding)
        logger.debug("Registered prompt: %s (%d arguments)", info.name, len(arguments))
        return self

    def add_type(self, cls: type, instance: Any = None) -> "PromptRegistryBuilder":
        """Register every @Prompt method defined on cls or its bases.

        Staticmethods and classmethods need no instance. Instance methods
        are bound to instance, which must then be given.
        """
        for func in self._prompt_members(cls):
            self.add_function(func, instance, owner=cls)
        return self

    def add_instance(self, obj: Any) -> "PromptRegistryBuilder":
        """Register every @Prompt method of obj's type, bound to obj."""
        if obj is None:
            raise TypeError("add_instance() requires an instance")
        return self.add_type(type(obj), obj)

    def add_module(self, module: types.ModuleType) -> "PromptRegistryBuilder":
        """Register @Prompt functions and classes defined in module.

        Classes are added without an instance, so a class with instance
        method prompts fails with MissingInstanceError. Prefer explicit
        add_function/add_instance calls.
        """
        for value in list(vars(module).values()):
            if getattr(value, "__module__", None) != module.__name__:
                continue
            if inspect.isclass(value):
                if next(self._prompt_members(value), None) is not None:
                    self.add_type(value)
            elif inspect.isfunction(value) and get_prompt_info(value) is not None:
                self.add_function(value)
        return self

    def build(self) -> PromptRegistry:
        """Freeze the collected prompts. The builder accepts no more additions."""
        self._built = True
        logger.debug("Built prompt registry with %d prompts", len(self._entries))
        return PromptRegistry(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @staticmethod
    def _prompt_members(cls: type) -> Iterator[Any]:
        # Bases first so registration follows definition order; subclass
        # attributes replace inherited ones of the same name.
        members: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for attr_name, value in vars(klass).items():
                members[attr_name] = value
        for value in members.values():
            if get_prompt_info(value) is not None:
                yield value

    @staticmethod
    def _unwrap(func: Any, instance: Any, owner: Optional[type]) -> tuple[Callable[..., Any], Any, bool]:
        """Return (raw function, object bound as first argument, skip first param)."""
        if isinstance(func, staticmethod):
            return func.__func__, None, False
        if isinstance(func, classmethod):
            if owner is None:
                raise TypeError("classmethod prompts must be registered through add_type()")
            return func.__func__, owner, True
        if inspect.ismethod(func):
            # Already bound (obj.method or Class.classmethod)
            return func.__func__, func.__self__, True
        if owner is not None:
            if instance is None:
                raise MissingInstanceError(func.__name__, owner.__qualname__)
            return func, instance, True
        if instance is not None:
            return func, instance, True
        owner_name = _method_owner_name(func)
        if owner_name is not None:
            # Instance method pulled off its class, e.g. add_function(Cls.method)
            raise MissingInstanceError(func.__name__, owner_name)
        return func, None, False


def _method_owner_name(func: Callable[..., Any]) -> Optional[str]:
    """Class name for a function defined as an instance method, else None.

    The class is looked up from the function's __qualname__ in its module.
    Classes defined inside a function cannot be reached that way; for those
    a first parameter named "self" is taken as the sign of a method.
    """
    head, _, attr = getattr(func, "__qualname__", "").rpartition(".")
    if not head or head.endswith("<locals>"):
        return None
    owner = _lookup_qualname(getattr(func, "__globals__", {}), head)
    if owner is not None:
        return head if inspect.isclass(owner) and vars(owner).get(attr) is func else None
    params = list(inspect.signature(func).parameters)
    return head if params and params[0] == "self" else None


def _lookup_qualname(namespace: dict[str, Any], qualname: str) -> Any:
    parts = qualname.split(".")
    obj = namespace.get(parts[0])
    for part in parts[1:]:
        if obj is None or part == "<locals>":
            return None
        obj = getattr(obj, part, None)
    return obj
