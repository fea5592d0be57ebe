# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Builders for assembling descriptors by hand.

Builders are mutable; :meth:`TypeBuilder.build` returns an immutable
descriptor. The result is cached until the builder is changed again, so a
builder referenced from several places yields one descriptor object. Another
builder used as a type is stored as a thunk, which lets builders refer to each
other, or to themselves, before they are complete.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from typing import Any

from typeshape.model.convert import force, lazy, member_from_entry
from typeshape.model.flags import F_INTERFACE, F_PROPERTY
from typeshape.model.format import (
    UNKNOWN,
    AliasDescriptor,
    AliasToken,
    ArrayDescriptor,
    EnumDescriptor,
    FunctionDescriptor,
    FunctionParameter,
    GenericDescriptor,
    InterfaceDescriptor,
    InterfaceToken,
    IntersectionDescriptor,
    LiteralValue,
    ObjectDescriptor,
    ObjectMember,
    TupleDescriptor,
    TupleElement,
    UnionDescriptor,
    VariableDescriptor,
    is_descriptor,
    is_thunk,
)
from typeshape.model.metadata import FLAGS_KEY, METHODS_KEY, PROPERTIES_KEY, TYPE_KEY, define_metadata, get_metadata
from typeshape.reflection.refs import ClassRef, InterfaceRef, ObjectRef, TypeRef, resolve

# ###############
# Public Interface
# ###############


class IncompatibleExtendKindError(TypeError):
    """Raised when an object builder is extended from a type it cannot copy members from."""


class TypeBuilder:
    """Base class for all builders.

    Keeps a metadata map scoped per declaration and per member. Builders that
    own a nominal token also write the metadata through to the process-wide
    metadata store, keyed by that token.
    """

    def __init__(self) -> None:
        self.metadata: dict[str, Any] = {}
        self._built: Any = None

    def get_token(self) -> Hashable | None:
        """The nominal token identifying the built declaration, if it has one."""
        return None

    def define_metadata(self, key: str, value: Any, prop: str | None = None) -> None:
        token = self.get_token()
        if token is not None:
            define_metadata(key, value, token, prop)
        self.metadata[_scoped(key, prop)] = value

    def get_metadata(self, key: str, prop: str | None = None) -> Any:
        token = self.get_token()
        if token is not None:
            return get_metadata(key, token, prop)
        return self.metadata.get(_scoped(key, prop))

    def build(self) -> Any:
        """Return the descriptor for the current state of the builder."""
        if self._built is None:
            self._built = self._build()
        return self._built

    def to_descriptor(self) -> Any:
        return self.build()

    def get_type(self) -> TypeRef:
        """Return the built descriptor wrapped for navigation."""
        return resolve(self.build())

    def _build(self) -> Any:
        return UNKNOWN

    def _changed(self) -> None:
        self._built = None


class ObjectLikeTypeBuilder(TypeBuilder):
    """Builder for types made of named members."""

    def __init__(self) -> None:
        super().__init__()
        self._members: list[ObjectMember] = []

    def add_property(self, name: str, type: Any, flags: str | None = None) -> ObjectLikeTypeBuilder:
        """Append a member. Duplicate names are kept; the last one wins when read."""
        self._members.append(ObjectMember(name=name, type=_slot(type), flags=flags or ""))
        self._changed()
        return self

    def extend(self, other: Any) -> ObjectLikeTypeBuilder:
        """Copy the members of *other* into this builder, in order.

        *other* may be another object-like builder, an object type (descriptor
        or wrapper), or a mapping from member names to types. Mapping values
        shaped ``{"type": ..., "flags": ...}`` become flagged members.

        Raises:
            IncompatibleExtendKindError: If *other* is a non-object-like builder,
                an interface or class reference, or any other kind of type.
        """
        if isinstance(other, TypeBuilder):
            if not isinstance(other, ObjectLikeTypeBuilder):
                raise IncompatibleExtendKindError("Cannot extend from non-object-like builders")
            members = list(other._members)
        elif isinstance(other, TypeRef) or is_descriptor(other):
            members = _object_members(resolve(other))
        elif isinstance(other, Mapping):
            members = [member_from_entry(name, value) for name, value in other.items()]
        else:
            raise IncompatibleExtendKindError(f"Cannot extend from {type(other).__name__} values")

        for member in members:
            self.add_property(member.name, member.type, member.flags)
        return self


class ObjectTypeBuilder(ObjectLikeTypeBuilder):
    """Builder for anonymous object shapes."""

    def __init__(self, name: str | None = None) -> None:
        super().__init__()
        self._name = name

    def _build(self) -> ObjectDescriptor:
        return ObjectDescriptor(name=self._name, members=list(self._members))


class InterfaceTypeBuilder(ObjectLikeTypeBuilder):
    """Builder for nominal interfaces.

    The interface token is created once; its identity survives renames and
    rebuilds, and all metadata is recorded against it.
    """

    def __init__(self, name: str = "") -> None:
        self._token = InterfaceToken(name=name)
        super().__init__()
        self._extends: list[Any] = []
        self._parameters: list[str] = []
        self.define_metadata(PROPERTIES_KEY, [])
        self.define_metadata(METHODS_KEY, [])
        self.define_metadata(TYPE_KEY, self.build)
        self.add_flag(F_INTERFACE)

    def get_token(self) -> InterfaceToken:
        return self._token

    @property
    def name(self) -> str:
        return self._token.name

    @name.setter
    def name(self, name: str) -> None:
        self._token = self._token.model_copy(update={"name": name})
        self._changed()

    def set_name(self, name: str) -> InterfaceTypeBuilder:
        self.name = name
        return self

    def add_flag(self, flag: str | None, prop: str | None = None) -> InterfaceTypeBuilder:
        """Append *flag* to the flags recorded for the interface or one of its members."""
        if not flag:
            return self
        self.define_metadata(FLAGS_KEY, (self.get_metadata(FLAGS_KEY, prop) or "") + flag, prop)
        self._changed()
        return self

    def add_property(self, name: str, type: Any, flags: str | None = None) -> InterfaceTypeBuilder:
        super().add_property(name, type, flags)
        slot = self._members[-1].type
        self.get_metadata(PROPERTIES_KEY).append(name)
        self.define_metadata(TYPE_KEY, lambda: force(slot), name)
        self.add_flag(F_PROPERTY, name)
        self.add_flag(flags, name)
        return self

    def add_parameters(self, *names: str) -> InterfaceTypeBuilder:
        """Declare type parameters, in order."""
        self._parameters.extend(names)
        self._changed()
        return self

    def add_extends(self, *types: Any) -> InterfaceTypeBuilder:
        """Declare parent interfaces, in order."""
        self._extends.extend(_slot(t) for t in types)
        self._changed()
        return self

    def _build(self) -> InterfaceDescriptor:
        return InterfaceDescriptor(
            token=self._token,
            members=list(self._members),
            extends=list(self._extends),
            parameters=list(self._parameters),
            flags=self.get_metadata(FLAGS_KEY) or "",
        )


class AliasTypeBuilder(TypeBuilder):
    """Builder for named type aliases. The aliased type defaults to ``unknown``."""

    def __init__(self, name: str = "", aliased: Any = UNKNOWN) -> None:
        super().__init__()
        self._token = AliasToken(name=name)
        self._aliased = aliased
        self._parameters: list[str] = []

    def get_token(self) -> AliasToken:
        return self._token

    @property
    def name(self) -> str:
        return self._token.name

    @name.setter
    def name(self, name: str) -> None:
        self._token = self._token.model_copy(update={"name": name})
        self._changed()

    def set_name(self, name: str) -> AliasTypeBuilder:
        self.name = name
        return self

    def set_aliased_type(self, aliased: Any) -> AliasTypeBuilder:
        """Set the aliased type. It is converted lazily, on first resolution."""
        self._aliased = aliased
        self._changed()
        return self

    def add_parameters(self, *names: str) -> AliasTypeBuilder:
        self._parameters.extend(names)
        self._changed()
        return self

    def _build(self) -> AliasDescriptor:
        aliased = self._aliased
        return AliasDescriptor(
            name=self._token.name,
            token=self._token,
            target=_thunk(aliased),
            parameters=list(self._parameters),
        )


class GenericTypeBuilder(TypeBuilder):
    """Builder for the application of a parameterized type to arguments."""

    def __init__(self, base: Any = None, *arguments: Any) -> None:
        super().__init__()
        self._base = base
        self._arguments = [_slot(argument) for argument in arguments]

    def set_base_type(self, base: Any) -> GenericTypeBuilder:
        self._base = base
        self._changed()
        return self

    def add_arguments(self, *arguments: Any) -> GenericTypeBuilder:
        self._arguments.extend(_slot(argument) for argument in arguments)
        self._changed()
        return self

    def _build(self) -> GenericDescriptor:
        if self._base is None:
            raise ValueError("GenericTypeBuilder has no base type")
        return GenericDescriptor(base=_thunk(self._base), arguments=list(self._arguments))


class VariableTypeBuilder(TypeBuilder):
    """Builder for a reference to a type parameter."""

    def __init__(self, name: str = "", declaration: Any = None) -> None:
        super().__init__()
        self._name = name
        self._declaration = declaration

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self._name = name
        self._changed()

    def set_type_declaration(self, declaration: Any) -> VariableTypeBuilder:
        self._declaration = declaration
        self._changed()
        return self

    def _build(self) -> VariableDescriptor:
        declaration = None if self._declaration is None else _thunk(self._declaration)
        return VariableDescriptor(name=self._name, declaration=declaration)


class TupleTypeBuilder(TypeBuilder):
    """Builder for tuple types."""

    def __init__(self) -> None:
        super().__init__()
        self._elements: list[TupleElement] = []

    def push(self, *types: Any) -> TupleTypeBuilder:
        """Append unnamed, unflagged elements."""
        for element_type in types:
            self.add_element(element_type)
        return self

    def add_element(self, element_type: Any, name: str | None = None, flags: str = "") -> TupleTypeBuilder:
        self._elements.append(TupleElement(type=_slot(element_type), name=name, flags=flags))
        self._changed()
        return self

    def _build(self) -> TupleDescriptor:
        return TupleDescriptor(elements=list(self._elements))


class ArrayTypeBuilder(TypeBuilder):
    """Builder for homogeneous sequence types."""

    def __init__(self, element_type: Any = UNKNOWN) -> None:
        super().__init__()
        self._element_type = element_type

    @property
    def element_type(self) -> Any:
        return self._element_type

    @element_type.setter
    def element_type(self, element_type: Any) -> None:
        self._element_type = element_type
        self._changed()

    def _build(self) -> ArrayDescriptor:
        return ArrayDescriptor(element=_slot(self._element_type))


class _CompositeTypeBuilder(TypeBuilder):
    def __init__(self, *types: Any) -> None:
        super().__init__()
        self._types = [_slot(t) for t in types]

    def push(self, *types: Any) -> _CompositeTypeBuilder:
        self._types.extend(_slot(t) for t in types)
        self._changed()
        return self


class UnionTypeBuilder(_CompositeTypeBuilder):
    """Builder for union types."""

    def _build(self) -> UnionDescriptor:
        return UnionDescriptor(types=list(self._types))


class IntersectionTypeBuilder(_CompositeTypeBuilder):
    """Builder for intersection types."""

    def _build(self) -> IntersectionDescriptor:
        return IntersectionDescriptor(types=list(self._types))


class EnumTypeBuilder(TypeBuilder):
    """Builder for enums."""

    def __init__(self, name: str = "") -> None:
        super().__init__()
        self._name = name
        self._values: dict[str, LiteralValue] = {}

    def add_value(self, name: str, value: LiteralValue) -> EnumTypeBuilder:
        self._values[name] = value
        self._changed()
        return self

    def _build(self) -> EnumDescriptor:
        return EnumDescriptor(name=self._name, values=dict(self._values))


class FunctionTypeBuilder(TypeBuilder):
    """Builder for function types."""

    def __init__(self, name: str | None = None) -> None:
        super().__init__()
        self._name = name
        self._parameters: list[FunctionParameter] = []
        self._returns: Any = UNKNOWN
        self._flags = ""

    def add_parameter(self, name: str, parameter_type: Any = UNKNOWN, flags: str = "") -> FunctionTypeBuilder:
        self._parameters.append(FunctionParameter(name=name, type=_slot(parameter_type), flags=flags))
        self._changed()
        return self

    def set_return_type(self, return_type: Any) -> FunctionTypeBuilder:
        self._returns = return_type
        self._changed()
        return self

    def add_flag(self, flag: str) -> FunctionTypeBuilder:
        if flag not in self._flags:
            self._flags += flag
            self._changed()
        return self

    def _build(self) -> FunctionDescriptor:
        return FunctionDescriptor(
            name=self._name, parameters=list(self._parameters), returns=_slot(self._returns), flags=self._flags
        )


# ################
# Implementation
# ################


def _scoped(key: str, prop: str | None) -> str:
    return key if prop is None else f"{key}@{prop}"


def _slot(value: Any) -> Any:
    # Builders stay deferred so they can be referenced before they are complete.
    if isinstance(value, TypeBuilder):
        return value.build
    if isinstance(value, TypeRef):
        return value.to_descriptor()
    return value


def _thunk(value: Any) -> Callable[[], Any]:
    if isinstance(value, TypeBuilder):
        return value.build
    if is_thunk(value):
        return lazy(value)
    return lazy(lambda: value)


def _object_members(ref: TypeRef) -> list[ObjectMember]:
    target = ref.unaliased()
    if isinstance(target, ObjectRef):
        return [member.to_member() for member in target.own_members]
    if isinstance(target, InterfaceRef):
        raise IncompatibleExtendKindError("Cannot extend from interface references")
    if isinstance(target, ClassRef):
        raise IncompatibleExtendKindError("Cannot extend from class references")
    raise IncompatibleExtendKindError(f"Cannot extend from {target.kind} types")
