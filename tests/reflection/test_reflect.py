# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for looking up declaration types through recorded metadata."""

from dataclasses import dataclass
from typing import ClassVar

import pytest

from typeshape.model.format import InterfaceDescriptor, InterfaceToken, ObjectMember
from typeshape.model.metadata import TYPE_KEY, define_metadata
from typeshape.reflection.reflect import NoTypeInformationError, reflect
from typeshape.reflection.refs import ClassRef, resolve

# ###############
# Helpers
# ###############


@dataclass
class _Person:
    name: str
    nickname: str | None = None
    population: ClassVar[int] = 0


class _Recorded:
    pass


def _annotated(value: int) -> str:
    return str(value)


# ###############
# Normal Cases
# ###############


def test_reflect_describes_annotated_classes() -> None:
    """A user class is described by its annotations."""
    ref = reflect(_Person)

    assert isinstance(ref, ClassRef)
    assert ref.runtime_class is _Person
    assert [m.name for m in ref.members] == ["name", "nickname"]
    assert not ref.get_member("name").is_optional
    assert ref.get_member("nickname").is_optional
    assert [m.name for m in ref.static_members] == ["population"]


def test_reflected_description_is_recorded() -> None:
    """After reflection the class resolves to its recorded description."""
    reflect(_Person)
    assert resolve(_Person).has_members


def test_reflect_member_annotation() -> None:
    """A member without recorded metadata falls back to its annotation."""
    assert reflect(_Person, "name").is_builtin_class(str)
    assert reflect(_Person, "nickname").is_union()
    assert reflect(_annotated, "return").is_builtin_class(str)


def test_reflect_prefers_recorded_metadata() -> None:
    """Recorded types win over annotations and conversion."""
    define_metadata(TYPE_KEY, lambda: {"id": int}, _Recorded)
    define_metadata(TYPE_KEY, lambda: str, _Recorded, "label")

    assert reflect(_Recorded).is_object()
    assert reflect(_Recorded, "label").is_builtin_class(str)


def test_reflect_interface_token() -> None:
    """An interface token resolves through the type recorded for it."""
    token = InterfaceToken(name="Named")
    descriptor = InterfaceDescriptor(token=token, members=[ObjectMember(name="name", type=str)])
    define_metadata(TYPE_KEY, lambda: descriptor, token)

    ref = reflect(token)
    assert ref.is_interface()
    assert ref.descriptor is descriptor


def test_reflect_plain_values() -> None:
    """Values without metadata are converted directly."""
    assert reflect(int).is_builtin_class(int)
    assert reflect(int | None).is_union()
    assert reflect({"a": int}).is_object()


# ###############
# Error Cases
# ###############


def test_reflect_unknown_member() -> None:
    """A member with neither metadata nor annotation raises."""
    with pytest.raises(NoTypeInformationError):
        reflect(_Person, "missing")
