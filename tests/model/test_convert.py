# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for converting plain Python values into descriptors."""

import typing
from collections.abc import Callable
from typing import Any, ClassVar, Literal

import pytest

from typeshape.model.convert import MalformedDescriptorError, as_descriptor, class_descriptor, force, lazy
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
    GenericDescriptor,
    LiteralDescriptor,
    ObjectDescriptor,
    TupleDescriptor,
    UnionDescriptor,
    VariableDescriptor,
)
from typeshape.model.metadata import TYPE_KEY, define_metadata

# ###############
# Helpers
# ###############


class _Recorded:
    pass


class _Plain:
    pass


# ###############
# Normal Cases
# ###############


def test_intrinsic_values() -> None:
    """None, booleans and UNDEFINED map to the shared intrinsic descriptors."""
    assert as_descriptor(None) is NULL
    assert as_descriptor(type(None)) is NULL
    assert as_descriptor(True) is TRUE
    assert as_descriptor(False) is FALSE
    assert as_descriptor(UNDEFINED) is UNDEFINED_TYPE


def test_literals() -> None:
    """Numbers and strings become literal descriptors."""
    assert as_descriptor(1) == LiteralDescriptor(value=1)
    assert as_descriptor(2.5) == LiteralDescriptor(value=2.5)
    assert as_descriptor("s") == LiteralDescriptor(value="s")
    assert as_descriptor(10**30).value == 10**30


def test_descriptors_pass_through() -> None:
    """Descriptors are returned unchanged."""
    assert as_descriptor(ANY) is ANY


def test_dict_becomes_object_shape() -> None:
    """A dict becomes an object shape; {type, flags} entries become flagged members."""
    descriptor = as_descriptor({"a": int, "b": {"type": str, "flags": "?"}})

    assert isinstance(descriptor, ObjectDescriptor)
    assert [m.name for m in descriptor.members] == ["a", "b"]
    assert descriptor.members[0].flags == ""
    assert descriptor.members[1].flags == "?"
    assert descriptor.members[1].type.runtime_class is str


def test_dict_without_flags_is_a_nested_shape() -> None:
    """A nested dict without both type and flags is a nested object shape."""
    descriptor = as_descriptor({"a": {"type": str}})
    assert isinstance(descriptor.members[0].type, ObjectDescriptor)


def test_list_and_tuple_become_tuple_types() -> None:
    """Lists and tuples describe tuple types of their converted items."""
    descriptor = as_descriptor([int, "x"])

    assert isinstance(descriptor, TupleDescriptor)
    assert descriptor.elements[0].type.runtime_class is int
    assert descriptor.elements[1].type == LiteralDescriptor(value="x")
    assert as_descriptor(()) == TupleDescriptor()


def test_classes_share_descriptors() -> None:
    """The same Python class always yields the same descriptor object."""
    assert as_descriptor(_Plain) is as_descriptor(_Plain)
    assert as_descriptor(_Plain) is class_descriptor(_Plain)
    assert as_descriptor(_Plain).name == "_Plain"


def test_recorded_class_type_wins() -> None:
    """A class with a recorded type converts to the recorded descriptor."""
    recorded = ObjectDescriptor(name="Recorded")
    define_metadata(TYPE_KEY, lambda: recorded, _Recorded)

    assert as_descriptor(_Recorded) is recorded


def test_annotations() -> None:
    """Typing annotations map to their descriptor counterparts."""
    assert as_descriptor(Any) is ANY
    assert as_descriptor(typing.NoReturn) is NEVER
    assert as_descriptor(Literal["a"]) == LiteralDescriptor(value="a")
    assert isinstance(as_descriptor(Literal["a", "b"]), UnionDescriptor)
    assert isinstance(as_descriptor(int | None), UnionDescriptor)
    assert isinstance(as_descriptor(typing.Optional[int]), UnionDescriptor)  # noqa: UP045
    assert as_descriptor(ClassVar[int]).runtime_class is int


def test_generic_annotations() -> None:
    """Parameterized builtin containers become generic applications."""
    descriptor = as_descriptor(dict[str, int])

    assert isinstance(descriptor, GenericDescriptor)
    assert descriptor.base().runtime_class is dict
    assert [a.runtime_class for a in descriptor.arguments] == [str, int]


def test_callable_annotations() -> None:
    """Callable annotations become function types."""
    fixed = as_descriptor(Callable[[int, str], bool])
    loose = as_descriptor(typing.Callable[..., int])  # noqa: UP035

    assert isinstance(fixed, FunctionDescriptor)
    assert [p.type.runtime_class for p in fixed.parameters] == [int, str]
    assert [p.name for p in fixed.parameters] == ["arg0", "arg1"]
    assert fixed.returns.runtime_class is bool
    assert loose.parameters is None
    assert loose.returns.runtime_class is int


def test_fixed_and_variadic_tuple_annotations() -> None:
    """tuple[X, Y] is a tuple type; tuple[X, ...] is a homogeneous generic."""
    fixed = as_descriptor(tuple[int, str])
    variadic = as_descriptor(tuple[int, ...])

    assert isinstance(fixed, TupleDescriptor)
    assert len(fixed.elements) == 2
    assert isinstance(variadic, GenericDescriptor)
    assert len(variadic.arguments) == 1


def test_type_variables() -> None:
    """TypeVars become variables declared by their bound."""
    free = typing.TypeVar("free")
    bounded = typing.TypeVar("bounded", bound=int)

    assert as_descriptor(free) == VariableDescriptor(name="free")
    descriptor = as_descriptor(bounded)
    assert descriptor.name == "bounded"
    assert descriptor.declaration().runtime_class is int


def test_lazy_caches_first_result() -> None:
    """A lazy thunk evaluates its producer once."""
    calls: list[int] = []

    def producer() -> Any:
        calls.append(1)
        return {"a": int}

    thunk = lazy(producer)
    assert thunk() is thunk()
    assert calls == [1]


def test_force() -> None:
    """force evaluates thunks and converts plain values."""
    assert force(NULL) is NULL
    assert force(lambda: None) is NULL
    assert isinstance(force(int), ClassDescriptor)


# ###############
# Error Cases
# ###############


def test_unconvertible_value() -> None:
    """Values without a descriptor form raise MalformedDescriptorError."""
    with pytest.raises(MalformedDescriptorError):
        as_descriptor(object())
