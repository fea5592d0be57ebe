# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Conversion of plain Python values and annotations into descriptors."""

from __future__ import annotations

import functools
import threading
import types
import typing
from collections.abc import Callable
from typing import Any

from typeshape.model.format import (
    ANY,
    FALSE,
    NEVER,
    NULL,
    TRUE,
    UNDEFINED,
    UNDEFINED_TYPE,
    ClassDescriptor,
    FunctionDescriptor,
    FunctionParameter,
    GenericDescriptor,
    LiteralDescriptor,
    ObjectDescriptor,
    ObjectMember,
    TupleDescriptor,
    TupleElement,
    UnionDescriptor,
    VariableDescriptor,
    is_descriptor,
    is_thunk,
)
from typeshape.model.metadata import TYPE_KEY, get_metadata

# ###############
# Public Interface
# ###############


class MalformedDescriptorError(ValueError):
    """Raised when a value cannot be turned into a descriptor."""


def lazy(producer: Callable[[], Any]) -> Callable[[], Any]:
    """Wrap *producer* in a thunk that converts and caches its first result.

    Every call of the returned thunk yields the same descriptor object, which
    keeps descriptor identity stable for cycle detection.
    """
    lock = threading.Lock()
    result: list[Any] = []

    def thunk() -> Any:
        if not result:
            with lock:
                if not result:
                    result.append(as_descriptor(producer()))
        return result[0]

    return thunk


def force(slot: Any) -> Any:
    """Return the descriptor stored in a type position, evaluating a thunk if needed."""
    if is_descriptor(slot):
        return slot
    if is_thunk(slot):
        return as_descriptor(slot())
    return as_descriptor(slot)


def as_descriptor(value: Any) -> Any:
    """Convert *value* into a descriptor.

    Accepted inputs are descriptors, objects exposing ``to_descriptor()``
    (resolved wrappers and builders), ``None``, booleans, :data:`UNDEFINED`,
    number and string literals, Python classes, typing annotations
    (``list[int]``, ``int | None``, ``Literal[...]``, type variables), lists
    and tuples (tuple types) and dicts (object shapes).

    Raises:
        MalformedDescriptorError: If *value* has no descriptor form.
    """
    if is_descriptor(value):
        return value
    to_descriptor = getattr(value, "to_descriptor", None)
    if to_descriptor is not None and not isinstance(value, type):
        return to_descriptor()
    if value is None or value is type(None):
        return NULL
    if value is UNDEFINED:
        return UNDEFINED_TYPE
    if value is True:
        return TRUE
    if value is False:
        return FALSE
    if isinstance(value, (int, float, str)):
        return LiteralDescriptor(value=value)
    if isinstance(value, dict):
        return object_descriptor(value)
    if isinstance(value, (list, tuple)):
        return TupleDescriptor(elements=[TupleElement(type=as_descriptor(item)) for item in value])
    if isinstance(value, typing.TypeVar):
        return _variable_descriptor(value)
    if _is_annotation(value):
        return _annotation_descriptor(value)
    if isinstance(value, type):
        recorded = get_metadata(TYPE_KEY, value)
        return force(recorded) if recorded is not None else class_descriptor(value)
    raise MalformedDescriptorError(f"Cannot convert {value!r} into a type descriptor")


@functools.lru_cache(maxsize=None)
def class_descriptor(cls: type) -> ClassDescriptor:
    """Return the shared descriptor for a Python class."""
    return ClassDescriptor(name=cls.__qualname__, runtime_class=cls)


def object_descriptor(shape: dict[str, Any], name: str | None = None) -> ObjectDescriptor:
    """Build an object shape from a mapping of member names to types.

    A value shaped ``{"type": ..., "flags": ...}`` becomes a flagged member;
    any other value is converted with :func:`as_descriptor`.
    """
    return ObjectDescriptor(name=name, members=[member_from_entry(key, value) for key, value in shape.items()])


def member_from_entry(name: str, value: Any) -> ObjectMember:
    """Build one object member from a plain mapping entry."""
    if isinstance(value, dict) and value.get("type") is not None and value.get("flags") is not None:
        return ObjectMember(name=name, type=as_descriptor(value["type"]), flags=value["flags"])
    return ObjectMember(name=name, type=as_descriptor(value))


# ################
# Implementation
# ################

_ELLIPSIS_TUPLE_ARITY = 2


def _is_annotation(value: Any) -> bool:
    return (
        value is typing.Any
        or value is typing.NoReturn
        or value is getattr(typing, "Never", typing.NoReturn)
        or isinstance(value, types.UnionType)
        or typing.get_origin(value) is not None
    )


def _annotation_descriptor(annotation: Any) -> Any:
    if annotation is typing.Any:
        return ANY
    if annotation is typing.NoReturn or annotation is getattr(typing, "Never", typing.NoReturn):
        return NEVER

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        return as_descriptor(args[0])
    if origin is typing.Literal:
        literals = [as_descriptor(arg) for arg in args]
        return literals[0] if len(literals) == 1 else UnionDescriptor(types=literals)
    if origin is typing.Union or isinstance(annotation, types.UnionType):
        return UnionDescriptor(types=[as_descriptor(arg) for arg in args])
    if origin is typing.ClassVar:
        return as_descriptor(args[0]) if args else ANY
    if origin is tuple and args and args[-1] is not Ellipsis:
        if args == ((),):
            return TupleDescriptor()
        return TupleDescriptor(elements=[TupleElement(type=as_descriptor(arg)) for arg in args])
    if origin is Callable:
        return _callable_descriptor(args)
    if isinstance(origin, type):
        if origin is tuple and len(args) == _ELLIPSIS_TUPLE_ARITY:
            args = args[:1]
        base = class_descriptor(origin)
        return GenericDescriptor(base=lambda: base, arguments=[as_descriptor(arg) for arg in args])
    raise MalformedDescriptorError(f"Unsupported annotation {annotation!r}")


def _callable_descriptor(args: tuple[Any, ...]) -> FunctionDescriptor:
    """``Callable[[A, B], R]`` takes two positional arguments; ``Callable[..., R]`` leaves them unchecked."""
    accepted, returns = (args[0], args[-1]) if args else (Ellipsis, ANY)
    if not isinstance(accepted, list):
        return FunctionDescriptor(parameters=None, returns=as_descriptor(returns))
    parameters = [FunctionParameter(name=f"arg{index}", type=as_descriptor(arg)) for index, arg in enumerate(accepted)]
    return FunctionDescriptor(parameters=parameters, returns=as_descriptor(returns))


def _variable_descriptor(variable: typing.TypeVar) -> VariableDescriptor:
    bound = variable.__bound__
    if bound is None and variable.__constraints__:
        bound = typing.Union[variable.__constraints__]  # noqa: UP007
    if bound is None:
        return VariableDescriptor(name=variable.__name__)
    return VariableDescriptor(name=variable.__name__, declaration=lazy(lambda: bound))
