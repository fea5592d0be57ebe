# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Wrappers for object members, tuple elements and function parameters."""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from typeshape.model.flags import Flags
from typeshape.model.format import FunctionParameter, ObjectMember, TupleElement

if TYPE_CHECKING:
    from typeshape.reflection.binding import Bindings
    from typeshape.reflection.refs import TypeRef

# ###############
# Public Interface
# ###############


class MemberRef:
    """A named member of an object shape, interface or class."""

    def __init__(self, member: ObjectMember, bindings: Bindings) -> None:
        self._member = member
        self._bindings = bindings

    @property
    def name(self) -> str:
        return self._member.name

    @functools.cached_property
    def flags(self) -> Flags:
        return Flags.parse(self._member.flags)

    @functools.cached_property
    def type(self) -> TypeRef:
        """The member's type, resolved on first access."""
        from typeshape.reflection.refs import resolve_slot

        return resolve_slot(self._member.type, self._bindings)

    @property
    def is_optional(self) -> bool:
        return self.flags.is_optional

    @property
    def is_method(self) -> bool:
        return self.flags.is_method

    @property
    def is_static(self) -> bool:
        return self.flags.is_static

    def to_member(self) -> ObjectMember:
        return self._member

    def __repr__(self) -> str:
        return f"MemberRef({self.name!r}, flags={str(self.flags)!r})"


class TupleElementRef:
    """One positional element of a tuple type."""

    def __init__(self, element: TupleElement, bindings: Bindings) -> None:
        self._element = element
        self._bindings = bindings

    @property
    def name(self) -> str | None:
        return self._element.name

    @functools.cached_property
    def flags(self) -> Flags:
        return Flags.parse(self._element.flags)

    @functools.cached_property
    def type(self) -> TypeRef:
        from typeshape.reflection.refs import resolve_slot

        return resolve_slot(self._element.type, self._bindings)

    @property
    def is_optional(self) -> bool:
        return self.flags.is_optional

    @property
    def is_rest(self) -> bool:
        return self.flags.is_rest

    def to_element(self) -> TupleElement:
        return self._element


class ParameterRef:
    """One declared parameter of a function type."""

    def __init__(self, parameter: FunctionParameter, bindings: Bindings) -> None:
        self._parameter = parameter
        self._bindings = bindings

    @property
    def name(self) -> str:
        return self._parameter.name

    @functools.cached_property
    def flags(self) -> Flags:
        return Flags.parse(self._parameter.flags)

    @functools.cached_property
    def type(self) -> TypeRef:
        from typeshape.reflection.refs import resolve_slot

        return resolve_slot(self._parameter.type, self._bindings)

    @property
    def is_optional(self) -> bool:
        return self.flags.is_optional

    @property
    def is_rest(self) -> bool:
        return self.flags.is_rest

    def to_parameter(self) -> FunctionParameter:
        return self._parameter

    def __repr__(self) -> str:
        return f"ParameterRef({self.name!r}, flags={str(self.flags)!r})"
